"""
Main entry point for the Gacha Simulator.

Loads the settings, opens the profile storage, fetches the pool and runs the
console front end. Several instances may share the same profile file: the
debug flag set in one of them shows up in the others.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from gachasim.app import GachaApp
from gachasim.core.errors import ConfigurationError
from gachasim.core.logging import setup_logging
from gachasim.core.settings import GachaSettings, load_settings
from gachasim.core.utils import cprint
from gachasim.storage.kv_store import StorageArea
from gachasim.ui.cli_interface import GachaCLI


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gachasim",
        description="Roll a weighted gacha pool and keep the results in a local profile.",
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON settings file")
    parser.add_argument("--profile", type=Path, default=None, help="profile storage file")
    parser.add_argument("--pool-file", type=Path, default=None, help="local pool JSON file")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="enable the debug menu for this session",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level",
    )
    return parser


async def run(settings: GachaSettings) -> None:
    area = StorageArea(settings.profile_path)
    app = GachaApp(settings, area.connect())
    try:
        await app.initialize()
        await GachaCLI(app).run()
    finally:
        app.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))
    try:
        settings = load_settings(
            args.config,
            profile_path=args.profile,
            pool_file=args.pool_file,
            debug_override=args.debug,
        )
        asyncio.run(run(settings))
    except ConfigurationError as e:
        cprint(f"[bold red]Invalid configuration:[/] {e}")
        return 2
    except KeyboardInterrupt:
        cprint("")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
