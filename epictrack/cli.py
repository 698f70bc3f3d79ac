#!/usr/bin/env python3
"""epictrack CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from epictrack.db import TrackerDatabase
from epictrack.errors import TrackerError
from epictrack.lib.config import TrackerConfig, load_config
from epictrack.navigator import Navigator
from epictrack.pages import EpicDetail, EpicView, Home, HomeView
from epictrack.ui.prompts import ConsolePrompts
from epictrack.ui.render import ConsoleRenderer

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_config(args) -> TrackerConfig:
    """Load config and apply CLI overrides."""
    config = load_config(Path(args.config) if args.config else None)
    if args.db:
        config.db_path = Path(args.db)
    if args.verbose:
        config.log_level = "DEBUG"
    return config


def setup_logging(config: TrackerConfig) -> None:
    """Configure the root logger once for the process."""
    kwargs = {"level": config.log_level, "format": LOG_FORMAT}
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        kwargs["filename"] = str(config.log_file)
    logging.basicConfig(**kwargs)


def cmd_run(args, config: TrackerConfig) -> int:
    """Interactive session until the user quits."""
    console = Console()
    navigator = Navigator(
        TrackerDatabase(config.db_path),
        ConsolePrompts(console),
        ConsoleRenderer(console),
    )
    logger.info(f"Starting session on {config.db_path}")
    try:
        navigator.run()
    except (KeyboardInterrupt, EOFError):
        console.print()
    return 0


def cmd_list(args, config: TrackerConfig) -> int:
    """Print the epic table once."""
    db = TrackerDatabase(config.db_path)
    epics = [epic for _, epic in db.read_db().list_epics()]
    ConsoleRenderer(clear=False).render(HomeView(page=Home(), epics=epics))
    return 0


def cmd_show(args, config: TrackerConfig) -> int:
    """Print one epic with its stories."""
    db = TrackerDatabase(config.db_path)
    epic, stories = db.read_epic_stories(args.epic_id)
    ConsoleRenderer(clear=False).render(
        EpicView(page=EpicDetail(args.epic_id), epic=epic, stories=stories)
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog='epictrack', description='Track epics and stories')
    parser.add_argument('--db', help='Database file (default: data/db.json)')
    parser.add_argument('--config', '-c', help='Env file with DB_PATH, LOG_LEVEL, LOG_FILE')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.set_defaults(func=cmd_run)
    subparsers = parser.add_subparsers(dest='command')

    # epictrack run
    p_run = subparsers.add_parser('run', help='Interactive session (default)')
    p_run.set_defaults(func=cmd_run)

    # epictrack list
    p_list = subparsers.add_parser('list', help='List epics')
    p_list.set_defaults(func=cmd_list)

    # epictrack show
    p_show = subparsers.add_parser('show', help='Show an epic and its stories')
    p_show.add_argument('epic_id', type=int, help='Epic ID')
    p_show.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)

    try:
        config = get_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    setup_logging(config)

    try:
        return args.func(args, config)
    except TrackerError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
