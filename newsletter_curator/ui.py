"""Console summary of a curation run."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models.article import SelectionResult


def selection_table(result: SelectionResult) -> Table:
    """Build a table of the selected articles, best first."""
    table = Table(title="Selected articles", box=box.ROUNDED, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Score", justify="right", style="bold bright_green")
    table.add_column("Title", style="bright_white", overflow="fold")
    table.add_column("Source", style="bright_cyan")
    table.add_column("Origin", style="bright_magenta")
    table.add_column("Quality", style="bright_yellow")

    for rank, scored in enumerate(result.articles, start=1):
        table.add_row(
            str(rank),
            f"{scored.final_score:.1f}",
            scored.article.title,
            scored.source,
            scored.category,
            scored.quality_assessment.level.value,
        )
    return table


def diagnostics_panel(result: SelectionResult) -> Panel:
    diagnostics = result.diagnostics
    metadata = result.metadata
    lines = [
        f"Input articles:        {diagnostics.total_input}",
        f"Malformed (dropped):   {diagnostics.malformed}",
        f"Duplicates removed:    {diagnostics.duplicates_removed}",
        f"Unparsable dates:      {diagnostics.unparsable_dates}",
        f"Scoring fallbacks:     {diagnostics.scoring_fallbacks}",
        f"Scored:                {metadata.total_considered}",
        f"Selected:              {metadata.total_selected} ({metadata.selection_rate}%)",
        f"Score range:           {metadata.score_range.min} - {metadata.score_range.max}"
        f" (max possible {metadata.max_possible_score:g})",
    ]
    return Panel("\n".join(lines), title="Curation summary", border_style="bright_blue",
                 box=box.ROUNDED)


def show_summary(result: SelectionResult, console: Console | None = None) -> None:
    """Print the run summary and the selection table."""
    console = console or Console(stderr=True)
    console.print(diagnostics_panel(result))
    if result.articles:
        console.print(selection_table(result))
    else:
        console.print("[yellow]No articles met the selection criteria[/yellow]")
