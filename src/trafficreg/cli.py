"""
trafficreg Unified Command-Line Interface

Runs the interactive menu by default and exposes one-shot subcommands for
scripting:

    trafficreg [shell]                               Interactive numbered menu
    trafficreg list [--congested]                    Print all signals
    trafficreg register --id N --location TEXT --density D --timing T
    trafficreg set-density --id N --density D        Update congestion level
    trafficreg set-timing  --id N --timing T         Update green-light time
    trafficreg delete --id N                         Remove a signal
    trafficreg summary                               Totals and averages
    trafficreg export --output FILE.csv              Headed CSV table

Global options (``--file``, ``--config``, ``--log-level``, ``--log-file``,
``--json-logs``) go before the subcommand and override the JSON settings
file, which in turn overrides built-in defaults.

Package Location: src/trafficreg/cli.py
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, RegistryConfig, load_config
from .data.store import NotFoundError, DuplicateIdError, SignalStore, open_store
from .records.frames import export_csv, summarize
from .records.models import format_record
from .shell import MSG_DUPLICATE, MSG_EMPTY, MSG_NOT_FOUND, run_shell
from .utils.logging import configure_logging

log = logging.getLogger(__name__)


# ===========================================================================
# Shared helpers
# ===========================================================================

def _die(message: str) -> None:
    """Print an error message and exit with status 1.

    Args:
        message: Human-readable error text.
    """
    print(f"\n❌  Error: {message}", file=sys.stderr)
    sys.exit(1)


def _resolve_config(args: argparse.Namespace) -> RegistryConfig:
    """Combine settings file and CLI overrides into the effective config.

    Precedence: CLI flag > settings file > default.
    """
    try:
        base = load_config(args.config)
    except ConfigError as exc:
        _die(str(exc))
    return base.merged(
        data_file=args.file,
        log_level=args.log_level,
        log_file=args.log_file,
        json_logs=True if args.json_logs else None,
    )


def _open(cfg: RegistryConfig) -> SignalStore:
    try:
        return open_store(cfg.data_file)
    except OSError as exc:
        _die(f"Cannot read {cfg.data_file}: {exc}")


# ===========================================================================
# Subcommand handlers
# ===========================================================================

def handle_shell(args: argparse.Namespace, store: SignalStore) -> None:
    """Run the interactive menu until the operator chooses Exit."""
    run_shell(store)


def handle_list(args: argparse.Namespace, store: SignalStore) -> None:
    """Print every signal (or only congested ones) in store order."""
    records = store.list()
    if args.congested:
        records = [r for r in records if r.congested]
    print("\n===== Traffic Signals List =====")
    if not records:
        print(MSG_EMPTY)
    for record in records:
        print(format_record(record))


def handle_register(args: argparse.Namespace, store: SignalStore) -> None:
    try:
        store.register(args.id, args.location, args.density, args.timing)
    except DuplicateIdError:
        _die(MSG_DUPLICATE)
    print("Traffic Signal registered successfully!")


def handle_set_density(args: argparse.Namespace, store: SignalStore) -> None:
    try:
        record = store.update_density(args.id, args.density)
    except NotFoundError:
        _die(MSG_NOT_FOUND)
    print("Traffic density updated successfully!")
    print(format_record(record))


def handle_set_timing(args: argparse.Namespace, store: SignalStore) -> None:
    try:
        record = store.update_timing(args.id, args.timing)
    except NotFoundError:
        _die(MSG_NOT_FOUND)
    print("Signal timing updated successfully!")
    print(format_record(record))


def handle_delete(args: argparse.Namespace, store: SignalStore) -> None:
    try:
        store.delete(args.id)
    except NotFoundError:
        _die(MSG_NOT_FOUND)
    print("Traffic signal deleted successfully!")


def handle_summary(args: argparse.Namespace, store: SignalStore) -> None:
    """Print headline statistics for the whole store."""
    stats = summarize(store.list())
    fmt = lambda v: "n/a" if v is None else f"{v:.2f}"  # noqa: E731
    print(f"\n📊  Signals:        {stats['total']}")
    print(f"    Congested:      {stats['congested']}")
    print(f"    Mean density:   {fmt(stats['mean_density'])}")
    print(f"    Mean timing:    {fmt(stats['mean_timing'])}")


def handle_export(args: argparse.Namespace, store: SignalStore) -> None:
    """Write the store as a headed CSV table."""
    output = Path(args.output)
    try:
        count = export_csv(store.list(), output)
    except OSError as exc:
        _die(f"Export failed: {exc}")
    print(f"✅  Exported {count} signals → {output}")


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _add_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--id", required=True, type=int, metavar="N", help="Signal ID."
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct and return the top-level argument parser.

    Returns:
        Configured ``ArgumentParser`` with all subcommands attached.
    """
    parser = argparse.ArgumentParser(
        prog="trafficreg",
        description=(
            "trafficreg – Traffic Signal Record Manager\n"
            "Register, inspect, update and delete traffic signal records.\n"
            "Run without a subcommand for the interactive menu."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Backing data file (default: traffic_signals.txt).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="JSON settings file (default: trafficreg.json if present).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write logs to this file instead of stderr.",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=False,
        help="Emit logs as single-line JSON objects.",
    )
    parser.set_defaults(func=handle_shell)

    subs = parser.add_subparsers(dest="command", metavar="<command>")

    p_shell = subs.add_parser("shell", help="Interactive numbered menu (default).")
    p_shell.set_defaults(func=handle_shell)

    p_list = subs.add_parser("list", help="Print all registered signals.")
    p_list.add_argument(
        "--congested",
        action="store_true",
        default=False,
        help="Only show signals whose density is above 80%%.",
    )
    p_list.set_defaults(func=handle_list)

    p_reg = subs.add_parser("register", help="Register a new signal.")
    _add_id(p_reg)
    p_reg.add_argument("--location", required=True, help="Location text.")
    p_reg.add_argument(
        "--density", required=True, type=int, metavar="D",
        help="Initial traffic density (0-100%%).",
    )
    p_reg.add_argument(
        "--timing", required=True, type=int, metavar="T",
        help="Green light duration in seconds.",
    )
    p_reg.set_defaults(func=handle_register)

    p_den = subs.add_parser("set-density", help="Update a signal's density.")
    _add_id(p_den)
    p_den.add_argument(
        "--density", required=True, type=int, metavar="D",
        help="New traffic density (0-100%%).",
    )
    p_den.set_defaults(func=handle_set_density)

    p_tim = subs.add_parser("set-timing", help="Update a signal's green time.")
    _add_id(p_tim)
    p_tim.add_argument(
        "--timing", required=True, type=int, metavar="T",
        help="New green light duration in seconds.",
    )
    p_tim.set_defaults(func=handle_set_timing)

    p_del = subs.add_parser("delete", help="Delete a signal.")
    _add_id(p_del)
    p_del.set_defaults(func=handle_delete)

    p_sum = subs.add_parser("summary", help="Print totals and averages.")
    p_sum.set_defaults(func=handle_summary)

    p_exp = subs.add_parser(
        "export",
        help="Export signals as a headed CSV table.",
        description=(
            "Write every signal, including the derived congested flag, to a\n"
            "CSV file with a header row."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_exp.add_argument(
        "--output", required=True, metavar="FILE", help="Destination CSV file."
    )
    p_exp.set_defaults(func=handle_export)

    return parser


# ===========================================================================
# Entry point
# ===========================================================================

def main(argv: Optional[List[str]] = None) -> None:
    """Parse CLI arguments, set up logging, load the store and dispatch.

    Registered as the ``trafficreg`` console script in ``pyproject.toml``.

    Args:
        argv: Argument list; ``None`` reads ``sys.argv``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = _resolve_config(args)
    configure_logging(cfg.log_level, cfg.log_file, cfg.json_logs)
    log.debug("Effective config", extra={"data_file": str(cfg.data_file)})

    store = _open(cfg)
    try:
        args.func(args, store)
    except OSError as exc:
        _die(f"Cannot write {cfg.data_file}: {exc}")


if __name__ == "__main__":
    main()
