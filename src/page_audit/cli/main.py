"""CLI entrypoint for page audit."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..browser.playwright_client import PlaywrightPageSession
from ..core.errors import PageAuditError
from ..entrypoints import generate_config, navigation
from ..report.generator import write_report

# Load environment variables
load_dotenv()


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration.

    Args:
        level: Logging level
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Page Audit - Measure page load quality with a real browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Audit a page with the default (mobile) config
  page-audit https://www.example.com

  # Desktop preset, html report written to a file
  page-audit https://www.example.com --preset desktop --output html --output-path report.html

  # Only the performance and seo categories
  page-audit https://www.example.com --only-categories performance seo
        """,
    )

    parser.add_argument("url", type=str, help="URL to audit")

    parser.add_argument(
        "--config-path",
        type=Path,
        help="Path to a config file (default: packaged default config)",
    )

    parser.add_argument(
        "--preset",
        type=str,
        choices=["default", "desktop"],
        help="Use a packaged config preset",
    )

    parser.add_argument(
        "--output",
        type=str,
        choices=["json", "html", "csv"],
        help="Report format (default: json)",
    )

    parser.add_argument(
        "--output-path",
        type=Path,
        help="Write the report here instead of stdout",
    )

    parser.add_argument(
        "--only-categories",
        nargs="+",
        help="Only run audits in these categories",
    )

    parser.add_argument(
        "--max-wait-for-load",
        type=int,
        help="Upper bound on waiting for page load, in ms (default: 45000)",
    )

    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run browser in headed mode (visible)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("PAGE_AUDIT_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO, or PAGE_AUDIT_LOG_LEVEL)",
    )

    args = parser.parse_args(argv)
    if args.config_path and args.preset:
        parser.error("--config-path and --preset are mutually exclusive")
    return args


def build_flags(args: argparse.Namespace) -> dict:
    """Translate CLI arguments into settings overrides."""
    flags: dict = {}
    if args.output:
        flags["output"] = args.output
    if args.only_categories:
        flags["only_categories"] = tuple(args.only_categories)
    if args.max_wait_for_load is not None:
        flags["max_wait_for_load"] = args.max_wait_for_load
    return flags


async def main_async(argv: list[str] | None = None) -> int:
    """Async main function.

    Returns:
        Exit code
    """
    args = parse_args(argv)

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config = args.config_path or args.preset
        flags = build_flags(args)
        settings = generate_config(config, flags).settings

        async with PlaywrightPageSession(settings, headless=not args.no_headless) as session:
            result = await navigation(session.page, args.url, config, flags)

        if args.output_path:
            write_report(result.report or "", args.output_path)
        else:
            sys.stdout.write(result.report or "")
            sys.stdout.write("\n")

        lhr = result.lhr
        logger.info("=" * 60)
        logger.info("AUDIT COMPLETE")
        logger.info("=" * 60)
        for category in lhr.categories.values():
            score = "n/a" if category.score is None else f"{round(category.score * 100)}"
            logger.info(f"{category.title}: {score}")
        logger.info("=" * 60)

        if lhr.runtime_error:
            logger.error(f"Runtime error {lhr.runtime_error.code}: {lhr.runtime_error.message}")
            return 1
        return 0

    except KeyboardInterrupt:
        logger.info("Audit interrupted by user")
        return 130

    except PageAuditError as e:
        logger.error(f"Audit failed: {e}")
        return 1

    except Exception as e:
        logger.error(f"Audit failed: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main CLI entrypoint."""
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
