"""Command-line interface for ubuntu-report."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from . import __version__
from .config import load_config
from .consent import Consent, parse_answer, prompt_user
from .pipeline import PipelineResult, run_pipeline, show_report
from .report import ReportError
from .store import FileReportStore
from .sysinfo import Host, os_identity
from .utils import Verbosity, configure_logging


def _host(cfg: Dict[str, Any]) -> Host:
    return Host(root=Path(cfg.get("root") or "/"))


def _run(args: argparse.Namespace, answer: Consent, prompt=None) -> PipelineResult:
    cfg = args.config_data
    host = _host(cfg)
    cache_dir = Path(cfg["cache_dir"]) if cfg.get("cache_dir") else None
    return run_pipeline(
        answer,
        store=FileReportStore(cache_dir, logger=args.logger),
        identity=os_identity(host),
        base_url=args.url or cfg["url"],
        host=host,
        force=args.force,
        auto_confirm=bool(cfg.get("auto_confirm", False)),
        prompt=prompt,
        send_opt_out=bool(cfg.get("send_opt_out", True)),
        timeout=float(cfg.get("timeout_seconds", 10)),
        log=args.logger,
    )


def handle_show(args: argparse.Namespace) -> None:
    report = show_report(_host(args.config_data), args.logger)
    print(report.to_json(indent=2))


def handle_send(args: argparse.Namespace) -> None:
    _run(args, parse_answer(args.answer))


def handle_interactive(args: argparse.Namespace) -> None:
    result = _run(args, Consent.UNSET, prompt=prompt_user)
    if result.already_decided:
        print("A report decision was already made for this release; use --force to report again.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ubuntu-report",
        description="Report metrics from your system, on your terms.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="Optional YAML config override")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Issue INFO (-v) and DEBUG (-vv) output",
    )

    delivery = argparse.ArgumentParser(add_help=False)
    delivery.add_argument("--url", help="Base URL of the metrics server (defaults to the configured one)")
    delivery.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Collect and send a new report even if one was already sent for this release",
    )

    show_p = subparsers.add_parser(
        "show",
        parents=[common],
        help="Print the metrics that would be reported, without sending anything",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    show_p.set_defaults(func=handle_show)

    send_p = subparsers.add_parser(
        "send",
        parents=[common, delivery],
        help="Send or opt out of sending the report without any prompt",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    send_p.add_argument("answer", choices=["yes", "no"], help="yes sends the report, no sends an opt-out")
    send_p.set_defaults(func=handle_send)

    inter_p = subparsers.add_parser(
        "interactive",
        parents=[common, delivery],
        help="Show the report, then ask whether to send it",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    inter_p.set_defaults(func=handle_interactive)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(None if argv is None else list(argv))
    args.logger = configure_logging(Verbosity.from_count(args.verbose), stream=sys.stderr)
    args.config_data = load_config(str(args.config) if args.config else None)
    try:
        args.func(args)
    except ReportError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


__all__ = ["main", "build_parser"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
