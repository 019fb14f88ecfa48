"""Entry point: replay a saved model response through the parser and validator."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from decision_engine.config import Settings
from decision_engine.errors import DecisionError
from decision_engine.models.decision import FullDecision
from decision_engine.response_parser import parse_full_decision

logger = structlog.get_logger()


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decision-engine-replay",
        description="Parse and validate a saved model response.",
    )
    parser.add_argument("response_file", type=Path, help="file holding the raw model response")
    parser.add_argument("--equity", type=float, required=True, help="account equity")
    parser.add_argument("--major-leverage", type=int, default=settings.BTC_ETH_LEVERAGE)
    parser.add_argument("--altcoin-leverage", type=int, default=settings.ALTCOIN_LEVERAGE)
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = Settings()
    args = build_parser(settings).parse_args(argv)
    # stdout carries the JSON result
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))

    response = args.response_file.read_text(encoding="utf-8")
    try:
        result = parse_full_decision(
            response,
            args.equity,
            args.major_leverage,
            args.altcoin_leverage,
            settings,
        )
        status = 0
    except DecisionError as e:
        result = FullDecision(cot_trace=e.rationale, error=e.message)
        status = 1

    print(result.model_dump_json(indent=2, exclude_none=True))
    logger.info("replay_complete", file=str(args.response_file), ok=status == 0)
    return status


if __name__ == "__main__":
    sys.exit(main())
