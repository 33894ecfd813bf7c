from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import yaml

from .config import Settings, load_settings
from .engine import Reconciler
from .loader import load_document
from .manual import PromptManualRefiner
from .models import ConfigurationError, Direction, MatchStrategy, Pair
from .selection import StrategyReport

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ShortPathFormatter(logging.Formatter):
    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if str(root) not in {"", "."}]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for root in self.roots:
            message = message.replace(f"{root}/", "").replace(root, "")
        return message


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


def configure_logging(level: str, roots: list[Path]) -> None:
    handler = logging.StreamHandler()
    formatter_cls = ColorFormatter if sys.stderr.isatty() else ShortPathFormatter
    handler.setFormatter(formatter_cls(LOG_FORMAT, roots))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pair local audio files with remote album tracks")
    parser.add_argument("--config", type=Path, help="Path to album-match.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    match_cmd = subparsers.add_parser("match", help="Pair the tracks in an input document")
    match_cmd.add_argument("input", type=Path, help="YAML/JSON file with 'local' and 'remote' lists")
    match_cmd.add_argument(
        "--strategy",
        help="Strategy name or 'best' (default from config): "
        + ", ".join(strategy.value for strategy in MatchStrategy),
    )
    match_cmd.add_argument("--direction", help="forward (local drives) or reverse (remote drives)")
    match_cmd.add_argument("--json", action="store_true", help="Emit pairs as JSON records")

    compare_cmd = subparsers.add_parser("compare", help="Score every automatic strategy")
    compare_cmd.add_argument("input", type=Path, help="YAML/JSON file with 'local' and 'remote' lists")
    compare_cmd.add_argument("--direction", help="forward (local drives) or reverse (remote drives)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, [args.input.parent])
    try:
        settings = load_settings(args.config)
        if args.command == "match":
            return run_match(args, settings)
        return run_compare(args, settings)
    except (ConfigurationError, OSError, yaml.YAMLError) as exc:
        logger.error("%s", exc)
        return 2


def run_match(args: argparse.Namespace, settings: Settings) -> int:
    document = load_document(args.input)
    direction = Direction.parse(args.direction or settings.output.default_direction)
    choice = (args.strategy or settings.output.default_strategy).strip().lower()
    reconciler = Reconciler(settings.match, refiner=PromptManualRefiner())
    if choice == "best":
        selection = reconciler.best_strategy(document.local, document.remote, direction)
        strategy, pairs = selection.strategy, selection.pairs
    else:
        strategy = MatchStrategy.parse(choice)
        seed = None
        if strategy is MatchStrategy.MANUAL:
            seed = reconciler.best_strategy(document.local, document.remote, direction).pairs
        try:
            pairs = reconciler.match(document.local, document.remote, strategy, direction, seed_pairs=seed)
        except (EOFError, KeyboardInterrupt):
            logger.warning("Manual refinement aborted; nothing written")
            return 1
    if args.json:
        print(json.dumps({"strategy": strategy.value, "pairs": [p.to_record() for p in pairs]}, indent=2))
    else:
        print(f"Strategy: {strategy.value}")
        for line in format_pairs(pairs):
            print(line)
    return 0


def run_compare(args: argparse.Namespace, settings: Settings) -> int:
    document = load_document(args.input)
    direction = Direction.parse(args.direction or settings.output.default_direction)
    selection = Reconciler(settings.match).best_strategy(document.local, document.remote, direction)
    for line in format_reports(selection.reports, selection.strategy):
        print(line)
    return 0


def format_pairs(pairs: List[Pair]) -> List[str]:
    lines: List[str] = []
    for pair in pairs:
        remote = pair.remote.name if pair.remote else "-"
        local = pair.local.file_path if pair.local else "-"
        if pair.is_matched:
            lines.append(f"  {pair.confidence:5.1f} {pair.level.value:<6} {remote} <- {local}")
        else:
            lines.append(f"      - {'unmatched':<6} {remote} <- {local}")
    return lines


def format_reports(reports: List[StrategyReport], winner: MatchStrategy) -> List[str]:
    lines = [f"  {'strategy':<14}{'avg':>7}{'high':>6}{'med':>6}{'low':>6}{'matched':>9}"]
    for report in reports:
        marker = "*" if report.strategy is winner else " "
        lines.append(
            f"{marker} {report.strategy.value:<14}{report.average:>7.1f}"
            f"{report.high:>6}{report.medium:>6}{report.low:>6}{report.matched:>9}"
        )
    return lines


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
