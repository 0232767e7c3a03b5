"""
Report module for the simulator.

Renders the aggregate of a run with rich: the output per second summary,
the per-ability breakdown table and the outcome rates.
"""

from core.utils import ccapture, cprint, crule
from rich.table import Table
from sim.config import SimulationConfig
from sim.runner import RunSummary


def breakdown_table(summary: RunSummary) -> Table:
    """
    Builds the per-ability breakdown table of a run.

    Args:
        summary (RunSummary): The run to describe.

    Returns:
        Table: One row per ability, highest total first.

    """
    healer = summary.label == "HPS"
    table = Table(title="Ability Breakdown", pad_edge=False)
    table.add_column("Ability", style="bold")
    table.add_column("Share", justify="right", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("Hits", justify="right")
    table.add_column("Crits", justify="right", style="yellow")
    if healer:
        table.add_column("Overheal", justify="right", style="magenta")
    else:
        table.add_column("Miss %", justify="right", style="magenta")
        table.add_column("Dodges", justify="right", style="magenta")
        table.add_column("Glancing", justify="right", style="dim white")
    for entry in summary.aggregate_breakdown():
        row = [
            entry.ability.display_name,
            f"{entry.share:.1f}%",
            f"{entry.average_hit:.0f}",
            str(entry.hits),
            str(entry.crits),
        ]
        if healer:
            row.append(str(entry.overhealing))
        else:
            row += [f"{entry.miss_percent:.1f}%", str(entry.dodges), str(entry.glancing)]
        table.add_row(*row)
    return table


def statistics_table(summary: RunSummary) -> Table:
    """Builds the table of run-wide outcome rates."""
    statistics = summary.aggregate_statistics()
    table = Table(title="Outcomes", pad_edge=False)
    table.add_column("Outcome", style="bold")
    table.add_column("Rate", justify="right")
    for name in ("crit", "hit", "glancing", "miss", "dodge"):
        table.add_row(name.title(), f"{statistics[name]:.2f}%")
    return table


def format_summary(summary: RunSummary) -> str:
    """Returns the one-line output per second summary of a run."""
    return (
        f"[bold]{summary.label}[/]: [green]{summary.mean_output_per_second:.1f}[/] "
        f"(min {summary.min_output_per_second:.1f}, max {summary.max_output_per_second:.1f}) "
        f"over {summary.iterations} iterations in {summary.execution_time:.2f}s"
    )


def print_report(config: SimulationConfig, summary: RunSummary) -> None:
    """
    Prints the full report of a run to the console.

    Args:
        config (SimulationConfig): The configuration that was simulated.
        summary (RunSummary): The run's results.

    """
    crule(f"{config.character_class.colored_name} Report", style="bold blue")
    cprint(format_summary(summary))
    cprint(ccapture(breakdown_table(summary)))
    cprint(ccapture(statistics_table(summary)))
