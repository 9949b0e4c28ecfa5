from rich.console import Console
from rich.table import Table

console = Console()

IMPORTANCE_STYLES = {
    "major": "bold red",
    "average": "yellow",
    "minor": "cyan",
}


def format_value(value):
    if isinstance(value, float):
        return f"{value:.2%}" if value <= 1 else f"{value:.2f}"
    if value is None:
        return "-"
    return str(value)


def print_analysis(result):
    metadata = result["fight_metadata"]
    console.print(
        f"[bold]{metadata['source']}[/bold] on {metadata['encounter']} "
        f"({metadata['duration'] / 1000:.1f}s), spec: {result.get('spec') or 'unknown'}"
    )

    statistics = Table(title="Statistics")
    statistics.add_column("Statistic")
    statistics.add_column("Value", justify="right")
    statistics.add_column("Notes")
    for statistic in result["statistics"]:
        if not statistic["available"]:
            statistics.add_row(statistic["label"], "n/a", statistic["tooltip"], style="dim")
            continue
        statistics.add_row(
            statistic["label"],
            format_value(statistic["value"]),
            statistic["tooltip"] or "",
        )
    console.print(statistics)

    if result["suggestions"]:
        suggestions = Table(title="Suggestions")
        suggestions.add_column("Importance")
        suggestions.add_column("Suggestion")
        suggestions.add_column("Actual", justify="right")
        suggestions.add_column("Recommended", justify="right")
        for suggestion in result["suggestions"]:
            importance = suggestion["importance"]
            suggestions.add_row(
                f"[{IMPORTANCE_STYLES[importance]}]{importance}[/]",
                suggestion["text"],
                format_value(suggestion["actual"]),
                format_value(suggestion["recommended"]),
            )
        console.print(suggestions)
    else:
        console.print("* No suggestions, well played")

    total_score = result["analysis"].get("analysis_scores", {}).get("total_score")
    if total_score is not None:
        console.print(f"Total score: {total_score:.2%}")

    if result.get("degraded_analyzers"):
        console.print(
            f"[yellow]Partial results from: {', '.join(result['degraded_analyzers'])}[/]"
        )
