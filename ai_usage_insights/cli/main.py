"""
CLI interface for AI Usage Insights.

Loads usage records from a file, applies filters and sorting, and
renders results and analytics as tables.
"""

import logging
import sys
from dataclasses import replace
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from ai_usage_insights.config.loader import load_query_config, parse_providers
from ai_usage_insights.core.analytics import AnalyticsSummary
from ai_usage_insights.core.filters import DateRange, FilterCriteria, NumericRange
from ai_usage_insights.core.pipeline import QueryConfig, QueryResult, run_query
from ai_usage_insights.core.sorting import coerce_sort_field, coerce_sort_order
from ai_usage_insights.storage.loader import load_records, parse_timestamp
from ai_usage_insights.storage.models import UsageRecord

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1

LOAD_ERRORS = (FileNotFoundError, ValueError, yaml.YAMLError)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """AI Usage Insights CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    if ctx.invoked_subcommand is None:
        console.print("AI Usage Insights - Use --help to see available commands")


def _build_range(
    current: Optional[NumericRange],
    minimum: Optional[float],
    maximum: Optional[float]
) -> Optional[NumericRange]:
    """Overlay CLI bounds onto a configured range, bound by bound."""
    if minimum is None and maximum is None:
        return current
    base = current or NumericRange()
    return NumericRange(
        min=minimum if minimum is not None else base.min,
        max=maximum if maximum is not None else base.max
    )


def _build_query(
    config_path: Optional[str],
    models: Optional[List[str]],
    providers: Optional[List[str]],
    since: Optional[str],
    until: Optional[str],
    min_cost: Optional[float],
    max_cost: Optional[float],
    min_tokens: Optional[int],
    max_tokens: Optional[int],
    search: Optional[str]
) -> QueryConfig:
    """Merge a query config file with command-line overrides."""
    query = load_query_config(config_path) if config_path else QueryConfig()
    criteria = query.filters

    date_range = criteria.date_range
    if since is not None or until is not None:
        base = date_range or DateRange()
        date_range = DateRange(
            start=parse_timestamp(since, "'--since'") if since is not None else base.start,
            end=parse_timestamp(until, "'--until'") if until is not None else base.end
        )

    criteria = FilterCriteria(
        models=frozenset(models) if models else criteria.models,
        providers=parse_providers(providers) if providers else criteria.providers,
        date_range=date_range,
        cost_range=_build_range(criteria.cost_range, min_cost, max_cost),
        token_range=_build_range(criteria.token_range, min_tokens, max_tokens),
        search=search if search is not None else criteria.search
    )
    return replace(query, filters=criteria)


def _run(records_file: str, query: QueryConfig) -> QueryResult:
    return run_query(load_records(records_file), query)


def _format_currency(amount: float) -> str:
    """Format currency with enough precision for per-request costs."""
    return f"${amount:,.4f}"


def _display_summary(summary: AnalyticsSummary) -> None:
    """Display overall and per-model analytics."""
    console.print("\n[bold]AI Usage Summary[/bold]")
    console.print("-" * 40)
    console.print(f"Records: {summary.record_count:,}")
    console.print(f"Total cost: {_format_currency(summary.total_cost)}")
    console.print(f"Average cost: {_format_currency(summary.avg_cost)}")
    console.print(f"Average response time: {summary.avg_response_time:,.1f} ms")
    console.print(f"Token efficiency: {summary.token_efficiency:.3f}")

    if not summary.model_stats:
        console.print("\n[dim]No usage records matched.[/]")
        return

    table = Table(title="Per-model statistics")
    table.add_column("Model")
    table.add_column("Requests", justify="right")
    table.add_column("Avg cost", justify="right")
    table.add_column("Avg tokens", justify="right")
    table.add_column("Avg response (ms)", justify="right")
    for model, stats in summary.model_stats.items():
        table.add_row(
            model,
            f"{stats.request_count:,}",
            _format_currency(stats.avg_cost),
            f"{stats.avg_tokens:,.1f}",
            f"{stats.avg_response_time:,.1f}"
        )
    console.print(table)


def _truncate(text: str, width: int = 40) -> str:
    return text if len(text) <= width else text[:width - 1] + "…"


def _display_records(records: List[UsageRecord]) -> None:
    """Display records as a table."""
    if not records:
        console.print("\n[dim]No usage records matched.[/]")
        return

    table = Table(title=f"Usage records ({len(records):,})")
    table.add_column("ID")
    table.add_column("Timestamp")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Tokens (in/out)", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Response (ms)", justify="right")
    table.add_column("Input")
    for record in records:
        table.add_row(
            record.id,
            record.timestamp.isoformat(sep=" ", timespec="seconds"),
            record.model,
            record.provider.value,
            f"{record.input_tokens:,}/{record.output_tokens:,}",
            _format_currency(record.cost),
            f"{record.response_time:,.1f}",
            _truncate(record.input)
        )
    console.print(table)


RECORDS_ARGUMENT = typer.Argument(..., help="JSON or YAML file of usage records")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="YAML query config file")
MODEL_OPTION = typer.Option(None, "--model", "-m", help="Only include this model (repeatable)")
PROVIDER_OPTION = typer.Option(None, "--provider", "-p", help="Only include this provider (repeatable)")
SINCE_OPTION = typer.Option(None, "--since", help="Earliest timestamp (ISO-8601, inclusive)")
UNTIL_OPTION = typer.Option(None, "--until", help="Latest timestamp (ISO-8601, inclusive)")
MIN_COST_OPTION = typer.Option(None, "--min-cost", help="Minimum cost (inclusive)")
MAX_COST_OPTION = typer.Option(None, "--max-cost", help="Maximum cost (inclusive)")
MIN_TOKENS_OPTION = typer.Option(None, "--min-tokens", help="Minimum total tokens (inclusive)")
MAX_TOKENS_OPTION = typer.Option(None, "--max-tokens", help="Maximum total tokens (inclusive)")
SEARCH_OPTION = typer.Option(None, "--search", "-s", help="Case-insensitive text in input or output")


@app.command()
def summary(
    records_file: str = RECORDS_ARGUMENT,
    config: Optional[str] = CONFIG_OPTION,
    model: Optional[List[str]] = MODEL_OPTION,
    provider: Optional[List[str]] = PROVIDER_OPTION,
    since: Optional[str] = SINCE_OPTION,
    until: Optional[str] = UNTIL_OPTION,
    min_cost: Optional[float] = MIN_COST_OPTION,
    max_cost: Optional[float] = MAX_COST_OPTION,
    min_tokens: Optional[int] = MIN_TOKENS_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    search: Optional[str] = SEARCH_OPTION
):
    """Show cost, latency and token analytics for matching records."""
    try:
        query = _build_query(
            config, model, provider, since, until,
            min_cost, max_cost, min_tokens, max_tokens, search
        )
        result = _run(records_file, query)
    except LOAD_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_ERROR)

    _display_summary(result.summary)
    sys.exit(EXIT_CODE_OK)


@app.command("list")
def list_records(
    records_file: str = RECORDS_ARGUMENT,
    config: Optional[str] = CONFIG_OPTION,
    model: Optional[List[str]] = MODEL_OPTION,
    provider: Optional[List[str]] = PROVIDER_OPTION,
    since: Optional[str] = SINCE_OPTION,
    until: Optional[str] = UNTIL_OPTION,
    min_cost: Optional[float] = MIN_COST_OPTION,
    max_cost: Optional[float] = MAX_COST_OPTION,
    min_tokens: Optional[int] = MIN_TOKENS_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    search: Optional[str] = SEARCH_OPTION,
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Field to sort by"),
    order: Optional[str] = typer.Option(None, "--order", "-o", help="Sort order: asc or desc"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Show at most N records")
):
    """List matching records, optionally sorted."""
    try:
        query = _build_query(
            config, model, provider, since, until,
            min_cost, max_cost, min_tokens, max_tokens, search
        )
        query = replace(
            query,
            sort_key=coerce_sort_field(sort_by) if sort_by else query.sort_key,
            sort_order=coerce_sort_order(order) if order else query.sort_order
        )
        records = _run(records_file, query).records
    except LOAD_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_ERROR)

    if limit is not None:
        records = records[:limit]

    logger.debug("Displaying %d records", len(records))
    _display_records(records)
    sys.exit(EXIT_CODE_OK)


if __name__ == "__main__":
    app()
