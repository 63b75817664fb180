from __future__ import annotations

from pathlib import Path
from datetime import datetime, timezone
import typer

from simonsays.bench import PLAYERS
from simonsays.core.tick import run_loop

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.command()
def run(
    ticks: int = typer.Option(200_000, help="Number of clock ticks to simulate"),
    seed: int = typer.Option(42, help="Seed for randomised players"),
    player: str = typer.Option("echo", help=f"Player bot ({', '.join(PLAYERS)})"),
    ticks_per_milli: int = typer.Option(50, help="Clock ticks per millisecond (16-bit)"),
    segments_invert: bool = typer.Option(False, help="Common-anode display polarity"),
    runs_dir: Path = typer.Option(Path("runs"), help="Directory to store run artifacts"),
):
    """Simulate a Simon session driven by a player bot."""
    if not 0 < ticks_per_milli <= 0xFFFF:
        raise typer.BadParameter("ticks-per-milli must be in 1..65535")
    if player.lower().strip() not in PLAYERS:
        raise typer.BadParameter(f"Unknown player {player!r}; choose from {', '.join(PLAYERS)}")

    run_id = f"simon_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}"
    out_dir = runs_dir / run_id
    out_dir.mkdir(parents=True, exist_ok=False)
    summary = run_loop(
        ticks=ticks,
        seed=seed,
        run_dir=out_dir,
        run_id=run_id,
        player_name=player,
        ticks_per_milli=ticks_per_milli,
        segments_invert=segments_invert,
    )
    typer.echo(
        f"{summary['rounds']} rounds ({summary['cleared']} cleared, {summary['missed']} missed), "
        f"score {summary['score']:02d}, final state {summary['final_state']}"
    )
    typer.echo(f"Done. See {out_dir}")


if __name__ == "__main__":
    app()
