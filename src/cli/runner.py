# src/cli/runner.py

"""Headless CLI runner for one-shot pipeline runs and data inspection."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.adapters.site_adapter import build_adapters
from src.config.filter_config import FilterConfig
from src.config.logging_config import prune_old_logs
from src.config.settings import Settings
from src.models.diff_result import DiffResult, PriceChange
from src.services.pipeline_orchestrator import (
    PipelineOrchestrator,
    RunResult,
)
from src.storage.run_history import RunHistory

logger = logging.getLogger("lease_digest.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _match_site(name: str, site_ids: list[str]) -> str | None:
    """Resolve a site name exactly, else by substring in either direction."""
    needle = name.strip().lower()
    if needle in site_ids:
        return needle
    for site_id in site_ids:
        if needle in site_id or site_id in needle:
            return site_id
    return None


def resolve_sources(
    source_csv: str | None,
) -> list[dict[str, str]]:
    """Map a comma-separated list of site names to their config dicts.

    Returns all sources when *source_csv* is ``None``. Abbreviations
    such as ``leas`` resolve to ``leasys``. Raises ``SystemExit`` on
    unknown names.
    """
    available = {
        s["id"]: s for s in Settings.AVAILABLE_SOURCES
    }
    if source_csv is None:
        return Settings.AVAILABLE_SOURCES

    requested = [
        s.strip() for s in source_csv.split(",") if s.strip()
    ]
    resolved: list[dict[str, str]] = []
    unknown: list[str] = []
    for name in requested:
        site_id = _match_site(name, list(available))
        if site_id is None:
            unknown.append(name)
        elif available[site_id] not in resolved:
            resolved.append(available[site_id])

    if unknown:
        valid = ", ".join(sorted(available))
        _err.print(
            f"[red]Unknown site(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)

    return resolved


def _format_change(diff: DiffResult | None) -> str:
    """Rich markup for a price movement cell."""
    if diff is None:
        return "—"
    if diff.change is PriceChange.NEW:
        return "[bold cyan]NEW[/bold cyan]"
    if diff.change is PriceChange.INCREASED:
        return f"[red]▲ +{diff.delta}[/red]"
    if diff.change is PriceChange.DECREASED:
        return f"[green]▼ -{diff.delta}[/green]"
    return "[dim]=[/dim]"


def _print_digest(result: RunResult) -> None:
    """Render the best offer per vehicle as a Rich table on stdout."""
    best_diffs = {
        (d.offer.key, d.offer.site, d.offer.price): d
        for d in result.diffs
    }
    table = Table(
        title="Best Lease Offers",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Brand", style="bold")
    table.add_column("Model", max_width=50)
    table.add_column("€/month", justify="right", style="green")
    table.add_column("Months", justify="right")
    table.add_column("Site", style="magenta")
    table.add_column("Change", justify="center")
    table.add_column("Offers", justify="right", style="dim")

    groups = sorted(
        result.groups.values(), key=lambda g: g.lowest_price
    )
    for idx, group in enumerate(groups, 1):
        best = group.best
        diff = best_diffs.get((best.key, best.site, best.price))
        table.add_row(
            str(idx),
            group.brand,
            group.model or "—",
            f"{best.price:,}",
            str(best.duration),
            best.site,
            _format_change(diff),
            str(len(group.offers)),
        )

    Console().print(table)


def _print_summary(result: RunResult) -> None:
    """Write per-site counts and failures to stderr."""
    for failure in result.failures:
        _err.print(
            f"[red]✗ {failure.site}: {failure.error_type}: "
            f"{failure.message}[/red]"
        )
    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    counts = ", ".join(
        f"{site}={count}" for site, count in result.site_counts.items()
    )
    _err.print(f"[dim]Per site: {counts}[/dim]")

    parts: list[str] = []
    if result.rejected_count:
        parts.append(f"{result.rejected_count} unparseable")
    if result.invalid_count:
        parts.append(f"{result.invalid_count} filtered")
    detail = f" ({', '.join(parts)})" if parts else ""
    colour = "green" if result.ok else "red"
    _err.print(
        f"[{colour}]{result.status.value}: {result.total_offers} offers"
        f" of {result.raw_count} raw in {len(result.groups)} groups"
        f"{detail}[/{colour}]"
    )


async def cli_run(
    source_csv: str | None,
    output_format: str,
) -> int:
    """Run the pipeline once and return an exit code (0=ok, 1=fail)."""
    sources = resolve_sources(source_csv)

    try:
        filter_config = FilterConfig.from_settings()
    except ValueError as exc:
        logger.error("Invalid filter configuration: %s", exc)
        _err.print(f"[red]Invalid filter configuration: {exc}[/red]")
        return 1

    source_labels = ", ".join(s["label"] for s in sources)
    _err.print(
        f"[bold]Running:[/bold] {source_labels}  "
        f"[dim]€{filter_config.min_price}-{filter_config.max_price}/month, "
        f"≥{filter_config.min_duration_months} months[/dim]"
    )

    orchestrator = PipelineOrchestrator()
    result = await orchestrator.run(
        build_adapters(sources), filter_config
    )
    _print_summary(result)

    if output_format == "table":
        _print_digest(result)
    else:
        json.dump(
            {
                "status": result.status.value,
                "site_counts": result.site_counts,
                "total_offers": result.total_offers,
                **result.digest(),
            },
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0 if result.ok else 1


def run_stats() -> int:
    """Print cumulative run statistics."""
    stats = RunHistory().get_stats()
    if stats is None:
        _err.print("[yellow]No runs recorded yet.[/yellow]")
        return 0

    _err.print(
        f"[bold]{stats['total_runs']} runs[/bold], "
        f"{stats['total_offers_found']:,} offers found, "
        f"last run {stats['last_run']}"
    )
    table = Table(
        title="Per-site Statistics",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Site", style="magenta")
    table.add_column("Runs", justify="right")
    table.add_column("Total offers", justify="right")
    table.add_column("Average", justify="right", style="green")

    for site, entry in sorted(stats["site_stats"].items()):
        table.add_row(
            site,
            str(entry["runs"]),
            str(entry["total_offers"]),
            str(entry["average_offers"]),
        )

    Console().print(table)
    return 0


def run_history(days: int) -> int:
    """Print the run log for the last *days* days."""
    entries = RunHistory().get_history(days)
    if not entries:
        _err.print(f"[yellow]No runs in the last {days} days.[/yellow]")
        return 0

    table = Table(
        title=f"Runs — last {days} days",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Timestamp")
    table.add_column("Offers", justify="right", style="green")
    table.add_column("Breakdown", style="dim")

    for entry in entries:
        breakdown = ", ".join(
            f"{site}={count}"
            for site, count in entry.get("site_breakdown", {}).items()
        )
        table.add_row(
            str(entry["timestamp"]),
            str(entry.get("offer_count", 0)),
            breakdown,
        )

    Console().print(table)
    return 0


def run_cleanup() -> int:
    """Apply the history and log retention policies."""
    removed_entries = RunHistory().prune()
    removed_logs = prune_old_logs()
    _err.print(
        f"[green]✓ Removed {removed_entries} history entries"
        f" and {removed_logs} log files[/green]"
    )
    return 0
