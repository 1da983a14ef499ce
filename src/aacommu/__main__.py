"""AACommu entry point.

Usage:
    python -m aacommu [OPTIONS]

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --mock-gateway   Use the in-process mock suggestion service
    --mock-audio     Use mock audio capture and speech output
    --help           Show this help message
    --version        Show version
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import AACConfig
from .config.loader import PROFILES, detect_profile, load_config
from .console import run_console

# Load .env from the project root (parent of src/), else the current directory
_env_file = Path(__file__).parent.parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="aacommu",
        description="AACommu - compose and speak replies in live conversations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m aacommu                              # Run with auto-detected profile
  python -m aacommu --profile prod               # Run with production profile
  python -m aacommu --config my.yaml             # Run with custom config file
  python -m aacommu --mock-gateway --mock-audio  # Run without server or devices

Environment:
  AACOMMU_PROFILE     Set profile (dev, prod, test)
  AACOMMU_SERVER_URL  Override the suggestion service URL
  AACOMMU_LOG_LEVEL   Override the log level
""",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML config file",
        metavar="PATH",
    )

    parser.add_argument(
        "--profile",
        choices=list(PROFILES),
        help="Configuration profile to use",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"AACommu v{__version__}",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and exit (for testing)",
    )

    parser.add_argument(
        "--mock-gateway",
        action="store_true",
        help="Use the in-process mock suggestion service",
    )

    parser.add_argument(
        "--mock-audio",
        action="store_true",
        help="Use mock audio capture and speech output",
    )

    return parser.parse_args(argv)


def load_from_args(args: argparse.Namespace) -> AACConfig:
    """Load configuration selected by command line arguments."""
    if args.config:
        return load_config(path=args.config)
    return load_config(profile=args.profile or detect_profile())


def main(argv: list[str] | None = None) -> int:
    """Main entry point for AACommu.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)

    try:
        config = load_from_args(args)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except (TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    logger = logging.getLogger("aacommu")

    logger.info(f"AACommu v{__version__}")
    logger.info(f"Profile: {args.profile or detect_profile()}")
    logger.info(f"Log level: {config.logging.level}")

    use_mock_gateway = config.testing.mock_gateway_enabled or args.mock_gateway
    use_mock_audio = config.testing.mock_audio_enabled or args.mock_audio

    if args.dry_run:
        logger.info("Dry run mode - exiting after config load")
        logger.info(f"Service: {'mock' if use_mock_gateway else config.gateway.base_url}")
        logger.info(f"TTS: {config.tts.engine} ({config.tts.language})")
        return 0

    try:
        return asyncio.run(
            run_console(
                config,
                use_mock_gateway=use_mock_gateway,
                use_mock_audio=use_mock_audio,
            )
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        return 0


if __name__ == "__main__":
    sys.exit(main())
