import argparse
import logging
import sys
from typing import List, Optional

from .core.errors import ConfigurationError
from .core.policy import load_policy
from .core.project import ProjectMigrator


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ng2react",
        description="ng2react - migrate Angular components to React function components",
    )
    parser.add_argument(
        "src",
        type=str,
        help="Root directory of the Angular sources"
    )
    parser.add_argument(
        "target",
        type=str,
        help="Directory the migrated project is written to"
    )
    parser.add_argument(
        "--policy",
        type=str,
        default=None,
        help="YAML file with pipe and injection handlers, merged over the defaults"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Transform everything but write nothing"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for ng2react. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger.info(f"Starting ng2react - {args.src} -> {args.target}")

    try:
        policy = load_policy(args.policy)
        migrator = ProjectMigrator(args.src, args.target, policy=policy, dry_run=args.dry_run)
        result = migrator.migrate()
    except ConfigurationError as e:
        logger.error(f"{e}")
        return 1

    for error in result.errors:
        logger.error(f"Failed: {error}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
