# ABOUTME: Command-line entry point invoked by Waybar on its interval and on clicks.
# ABOUTME: Mode flags flip the persisted view; a bare run prints one line of Waybar JSON.

import argparse
import json
import logging
import sys
from pathlib import Path

from waybar_weather.cache_store import CacheStore
from waybar_weather.deps import WidgetDeps, create_http_client
from waybar_weather.icons import load_icon_map
from waybar_weather.mode_store import ModeStore
from waybar_weather.settings import (
    CACHE_FILE_NAME,
    ICONS_FILE_NAME,
    MODE_FILE_NAME,
    SETTINGS_FILE_NAME,
    config_dir,
    load_settings,
    state_dir,
)
from waybar_weather.widget import run_update, safe_run

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """The command line could not be parsed."""


class WidgetArgumentParser(argparse.ArgumentParser):
    """Raises on usage errors instead of exiting; Waybar must still get a JSON line."""

    def error(self, message):
        raise UsageError(message)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line; unusable arguments fall back to a plain update run."""
    parser = WidgetArgumentParser(prog="waybar-weather", description="Open-Meteo weather module for Waybar")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--next", "--toggle", dest="cycle", action="store_const", const="next",
                       help="switch to the next tooltip view and exit")
    group.add_argument("--prev", dest="cycle", action="store_const", const="prev",
                       help="switch to the previous tooltip view and exit")
    group.add_argument("--set", dest="set_mode", metavar="MODE", nargs="?",
                       help="set the tooltip view (default or weekview) and exit")
    parser.add_argument("--refresh", action="store_true", help="ignore the cache and fetch live data")
    parser.add_argument("--config", type=Path, help="settings file (default: %(default)s)",
                        default=config_dir() / SETTINGS_FILE_NAME)
    try:
        args, unknown = parser.parse_known_args(argv)
    except UsageError as e:
        logger.warning("Ignoring command line: %s", e)
        return parser.parse_known_args([])[0]
    if unknown:
        logger.warning("Ignoring unrecognized arguments: %s", " ".join(unknown))
    return args


def configure_logging(debug: bool) -> None:
    """Log to stderr; stdout is reserved for the JSON line Waybar reads."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        force=True,
    )


def update(args: argparse.Namespace) -> dict:
    settings = load_settings(args.config)
    configure_logging(settings.debug)
    icons = load_icon_map(args.config.parent / ICONS_FILE_NAME, settings.icon_style)
    state = state_dir()
    with create_http_client() as client:
        deps = WidgetDeps(
            http_client=client,
            mode_store=ModeStore(state / MODE_FILE_NAME),
            cache_store=CacheStore(state / CACHE_FILE_NAME),
        )
        return run_update(deps, settings, icons, force_refresh=args.refresh)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.cycle or args.set_mode is not None:
        store = ModeStore(state_dir() / MODE_FILE_NAME)
        try:
            if args.cycle:
                store.cycle(args.cycle)
            else:
                store.set(args.set_mode)
        except OSError as e:
            logger.warning("Could not persist display mode: %s", e)
        return 0

    output = safe_run(lambda: update(args))
    print(json.dumps(output, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
