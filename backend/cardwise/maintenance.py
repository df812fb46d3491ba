"""
Scheduled maintenance for the session attempt log.

Run with ``python -m cardwise.maintenance [--older-than-days N]`` from cron or a
scheduler; it deletes attempts past the retention horizon for every user.
"""

import argparse
from datetime import timedelta

import structlog

from cardwise.config import configure_logging, get_settings
from cardwise.core import container
from cardwise.database import dispose_engine, session_scope

logger = structlog.get_logger(__name__)


def purge_session_attempts(older_than_days: int | None = None) -> int:
    """Delete attempts older than `older_than_days` (default: the retention setting)."""
    settings = get_settings()

    with session_scope(settings) as db:
        container.db.override(db)
        try:
            use_case = container.session_attempt_use_case()
            older_than = None
            if older_than_days is not None:
                older_than = use_case.clock() - timedelta(days=older_than_days)
            return use_case.purge_all(older_than)
        finally:
            container.db.reset_override()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Purge old session attempts.")
    parser.add_argument(
        "--older-than-days",
        type=int,
        default=None,
        help="Override the retention horizon (days).",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.ENVIRONMENT)
    try:
        deleted = purge_session_attempts(args.older_than_days)
        logger.info("maintenance_completed", deleted=deleted)
    finally:
        dispose_engine()


if __name__ == "__main__":
    main()
