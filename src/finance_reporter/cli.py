"""Command-line interface for the finance reporter."""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from finance_reporter import __version__
from finance_reporter.config import Config, ConfigError, load_config
from finance_reporter.models.report import ReportSummary
from finance_reporter.output.pdf_renderer import RenderError, ReportRenderer, register_fonts
from finance_reporter.processing.aggregator import generate_report
from finance_reporter.processing.time_window import (
    PRESET_FILTERS,
    WEEK_STARTS,
    InvalidDateFormat,
    WindowRequest,
)
from finance_reporter.store.base import StoreError
from finance_reporter.store.memory import DEFAULT_OWNER
from finance_reporter.store.yaml_store import load_ledger
from finance_reporter.utils.date_utils import to_iso
from finance_reporter.utils.decimal_utils import format_money
from finance_reporter.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="finance-report",
        description="Summarize expenses and deposits for a time window and render PDF reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --ledger ledger.yaml --filter monthly
  %(prog)s --ledger ledger.yaml --date 2025-03-10 --pdf day.pdf
  %(prog)s --ledger ledger.yaml --from 2025-01-01 --to 2025-03-31 --json q1.json
  %(prog)s --ledger ledger.yaml --filter today --pdf dashboard.pdf
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-l", "--ledger",
        type=Path,
        default=None,
        help="YAML ledger holding categories, expenses and deposits",
    )

    parser.add_argument(
        "--owner",
        default=None,
        help=f"Owner whose transactions are reported (default: ledger owner or '{DEFAULT_OWNER}')",
    )

    # Time window
    window_group = parser.add_argument_group("Time window")
    window_group.add_argument(
        "--filter",
        choices=PRESET_FILTERS,
        default=None,
        help="Preset window relative to today (UTC)",
    )
    window_group.add_argument(
        "--date",
        default=None,
        help="Single day (YYYY-MM-DD); overrides --from/--to and --filter",
    )
    window_group.add_argument(
        "--from",
        dest="from_date",
        default=None,
        help="Range start (YYYY-MM-DD); overrides --filter",
    )
    window_group.add_argument(
        "--to",
        dest="to_date",
        default=None,
        help="Range end (YYYY-MM-DD); overrides --filter",
    )
    window_group.add_argument(
        "--week-start",
        choices=WEEK_STARTS,
        default=None,
        help="First day of the week for --filter weekly (default: from settings, else mon)",
    )

    # Output
    parser.add_argument(
        "--json",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the summary as JSON",
    )
    parser.add_argument(
        "--pdf",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the rendered PDF report",
    )

    # Configuration
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate configuration files only",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    console.print("[bold]Validating configuration files...[/bold]\n")

    settings_path = args.config or (args.config_dir / "settings.yaml")
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        console.print(f"[yellow]Settings file not found: {settings_path} (defaults apply)[/yellow]")

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
        register_fonts(config.fonts)
    except (ConfigError, RenderError) as e:
        console.print(f"\n[red]Errors:[/red]\n  - {e}")
        return 1

    console.print("\n[green]✓[/green] Configuration loaded successfully")
    console.print(f"  - Currency symbol: {config.report.currency_symbol}")
    console.print(f"  - Week starts on: {config.report.week_start}")
    console.print(f"  - Regular font: {config.fonts.regular or 'Helvetica (built-in)'}")
    console.print("\n[green]Configuration is valid.[/green]")
    return 0


def display_summary(summary: ReportSummary, config: Config) -> None:
    """Display report totals and breakdowns.

    Args:
        summary: Aggregated report.
        config: Application configuration (currency formatting).
    """
    symbol = config.report.currency_symbol

    console.print("\n[bold]Report Summary[/bold]")
    start = to_iso(summary.window.start) or "all time"
    end = to_iso(summary.window.end) or "all time"
    console.print(f"  Window: {start} to {end}")
    console.print(f"  Deposits: {len(summary.deposits)}  Expenses: {len(summary.expenses)}")
    console.print(f"  Total deposits: [green]{format_money(summary.total_deposits, symbol)}[/green]")
    console.print(f"  Total expenses: [red]{format_money(summary.total_expenses, symbol)}[/red]")
    console.print(f"  Balance: [bold]{format_money(summary.balance, symbol)}[/bold]")

    if summary.category_aggregates:
        table = Table(title="Expenses by Category")
        table.add_column("Category")
        table.add_column("Total", justify="right")
        for aggregate in summary.category_aggregates:
            table.add_row(aggregate.category_name, format_money(aggregate.total, symbol))
        console.print(table)

    if summary.time_series:
        table = Table(title="Expenses over Time")
        table.add_column("Month")
        table.add_column("Total", justify="right")
        for point in summary.time_series:
            table.add_row(f"{point.year}-{point.month:02d}", format_money(point.total, symbol))
        console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, console_output=args.verbose > 0)

    if args.validate_only:
        return validate_config(args)

    if args.ledger is None:
        console.print("[red]Error: --ledger is required[/red]")
        parser.print_usage()
        return 1

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run with --validate-only to check configuration files.")
        return 1

    # Settings decide the log file; -v flags still win over the configured level
    setup_logging(
        level=log_level if args.verbose else config.logging.level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )

    request = WindowRequest(
        filter=args.filter,
        date=args.date,
        from_date=args.from_date,
        to_date=args.to_date,
        week_start=args.week_start or config.report.week_start,
    )

    try:
        store = load_ledger(args.ledger)
        owner = args.owner or store.default_owner
        summary = generate_report(store, owner, request)
    except InvalidDateFormat as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except StoreError as e:
        console.print(f"[red]Error reading ledger: {e}[/red]")
        return 1

    display_summary(summary, config)

    if args.json:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, indent=2, ensure_ascii=False)
        console.print(f"\n[green]JSON written to {args.json}[/green]")

    if args.pdf:
        try:
            content = ReportRenderer(config).render(summary)
        except RenderError as e:
            console.print(f"[red]Error rendering report: {e}[/red]")
            return 1
        args.pdf.parent.mkdir(parents=True, exist_ok=True)
        args.pdf.write_bytes(content)
        console.print(f"[green]PDF report written to {args.pdf}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
