from __future__ import annotations

from typing import Any, Dict
import json


def _fmt_pct(x: float) -> str:
    return f"{100.0 * x:.2f}%"


def build_markdown(metrics: Dict[str, Any]) -> str:
    m = metrics
    meta = m.get("meta", {})
    counts = m.get("counts", {})
    game = m.get("game", {})
    rounds_total = max(1, counts.get("rounds", 0))

    tr_table = "Transition | Count\n---|---\n"
    for k, v in sorted((m.get("transitions") or {}).items(), key=lambda kv: (-kv[1], kv[0])):
        tr_table += f"{k} | {v}\n"
    if tr_table.strip().endswith("---|---"):
        tr_table += "- | -\n"

    md = [
        f"# Simon Run Report — {meta.get('run_id', '(unknown)')}",
        "\n## Meta\n",
        "```json\n" + json.dumps(meta, indent=2) + "\n```\n",
        "## Summary\n",
        f"- Ticks: {counts.get('ticks', 0)}",
        f"- Rounds: {counts.get('rounds', 0)} | cleared: {game.get('cleared', 0)} ({_fmt_pct(game.get('cleared', 0) / rounds_total)}) | missed: {game.get('missed', 0)}",
        f"- Longest sequence cleared: {game.get('best_length', 0)}",
        f"- Game overs: {game.get('game_overs', 0)}",
        f"- Final state: {game.get('final_state', '') or '-'} | score: {game.get('final_score', 0)}",
        "\n## Transitions\n\n" + tr_table,
    ]

    rounds = m.get("rounds", [])
    if rounds:
        md.append("## Rounds (first 20)\n")
        md.append("Tick | Round | Length | Expected | Pressed | Result\n---|---|---|---|---|---")
        for r in rounds[:20]:
            md.append(
                f"{r.get('tick', '')} | {r.get('round', '')} | {r.get('length', '')} | "
                f"{r.get('expected', '')} | {r.get('pressed', '')} | {r.get('result', '')}"
            )

    return "\n".join(md) + "\n"
