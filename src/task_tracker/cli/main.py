# src/task_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs one command and exits with its code.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    log_dir = settings.data_dir if settings.log_file_enabled else None
    setup_logging(console_level=console_level, log_dir=log_dir)

    logger.debug("Starting %s argv=%s", settings.app_name, argv)

    state = create_initial_state(settings=settings)
    result = registry.handle(state, argv)

    stream = sys.stdout if result.exit_code == 0 else sys.stderr
    print(result.text, file=stream)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
