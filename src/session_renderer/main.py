"""Command-line entrypoint: render and publish every scheduled session."""

import argparse
import asyncio
import logging
import sys

from session_renderer.app_logging import configure_logging
from session_renderer.containers import AppContainer, build_container
from session_renderer.domain.report import BatchReport

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="session-renderer",
        description="Render session media from the schedule sheet and upload it.",
    )
    parser.add_argument("--composition", help="Composition id to render.")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Number of sessions rendered at once (default: sequential).",
    )
    return parser.parse_args(argv)


async def run_batch(container: AppContainer) -> BatchReport:
    """Run one batch and release the container's resources."""
    try:
        return await container.orchestrator.run()
    finally:
        await container.close_resources()


def main(argv: list[str] | None = None) -> int:
    """Run a batch and return the process exit code."""
    configure_logging()
    args = _parse_args(argv)
    _logger.info("Starting render and upload process")
    try:
        container = build_container(
            composition_id=args.composition, concurrency=args.concurrency
        )
        configure_logging(container.settings.log_level)
        report = asyncio.run(run_batch(container))
    except Exception:
        _logger.exception("An unhandled error occurred in the main process")
        return 1
    print(report.summary())
    return report.exit_code


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
