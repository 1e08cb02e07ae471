from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from client.analysis_client import AnalysisClient
from client.controller import DiagnosisController
from client.report import render_report
from config.settings import get_settings
from diagnosis.schemas import LANGUAGE_NAMES


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Diagnose a mango leaf or fruit photo")
    parser.add_argument("image", type=Path, help="Path to a JPEG/PNG/WebP photo")
    parser.add_argument("--language", default="en", choices=sorted(LANGUAGE_NAMES))
    parser.add_argument("--server", default=settings.analysis_server_url)
    return parser.parse_args(argv)


async def _amain(args: argparse.Namespace) -> int:
    controller = DiagnosisController(AnalysisClient(args.server))
    controller.state.set_language(args.language)
    state = await controller.analyze_file(args.image)
    if state.result is None:
        print(state.error, file=sys.stderr)
        return 1
    print(render_report(state.result, state.sources), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=get_settings().log_level)
    return asyncio.run(_amain(_parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
