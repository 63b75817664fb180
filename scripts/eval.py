from __future__ import annotations

from pathlib import Path
import typer
from rich.console import Console
from rich.table import Table

from simonsays.eval.metrics import compute_metrics, first_color_distribution, normalize_bins
from simonsays.eval.report import build_markdown

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


@app.command()
def report(run_dir: Path = typer.Argument(..., help="Path to runs/<id>")) -> None:
    """Write report.md for a recorded run."""
    run_dir = Path(run_dir)
    if not (run_dir / "events.jsonl").exists():
        raise typer.BadParameter(f"No events.jsonl in {run_dir}")
    out_md = run_dir / "report.md"
    out_md.write_text(build_markdown(compute_metrics(run_dir)), encoding="utf-8")
    typer.echo(f"Wrote {out_md}")


@app.command()
def sweep(
    samples: int = typer.Option(500, help="Number of start-press delays (1 ms apart) to try"),
    ticks_per_milli: int = typer.Option(50, help="Clock ticks per millisecond"),
    tolerance: float = typer.Option(0.05, help="Allowed deviation from 25% per colour"),
) -> None:
    """Distribution of the first colour over start-press timing."""
    if samples <= 0:
        raise typer.BadParameter("samples must be positive")
    bins = first_color_distribution(samples, ticks_per_milli=ticks_per_milli)
    shares = normalize_bins(bins)

    table = Table(title=f"First colour over {samples} start delays")
    table.add_column("Colour", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for i, (count, share) in enumerate(zip(bins, shares)):
        table.add_row(str(i), str(count), f"{share:.2f}")
    console.print(table)

    if not all(abs(share - 0.25) <= tolerance for share in shares):
        typer.echo("Distribution outside tolerance")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
