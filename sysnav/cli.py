"""Entry point for the sysnav command line tool."""

from __future__ import annotations

import argparse
from enum import Enum
import logging
import sys
import time
from typing import Callable, Dict, Optional, TextIO

from rich.console import Console

from . import __version__
from .explorer import run_explorer
from .formatting import format_menu, format_snapshot
from .system_state import SystemProvider, gather_snapshot

logger = logging.getLogger(__name__)

REFRESH_DELAY = 2.0


class MenuChoice(Enum):
    SYSTEM_HEALTH = "1"
    FILE_EXPLORER = "2"


def parse_menu_choice(line: str) -> Optional[MenuChoice]:
    try:
        return MenuChoice(line.strip())
    except ValueError:
        return None


class CommandLoop:
    """Top-level menu: shows system health or hands over to the file explorer."""

    def __init__(
        self,
        provider: SystemProvider,
        console: Console,
        read_line: Callable[[], str] = input,
        sleep: Callable[[float], None] = time.sleep,
        refresh_delay: float = REFRESH_DELAY,
    ) -> None:
        self._provider = provider
        self._console = console
        self._read_line = read_line
        self._sleep = sleep
        self._refresh_delay = refresh_delay
        self._handlers: Dict[MenuChoice, Callable[[], None]] = {
            MenuChoice.SYSTEM_HEALTH: self.show_system_health,
            MenuChoice.FILE_EXPLORER: self.enter_file_explorer,
        }

    def run(self) -> None:
        while True:
            self.step()

    def step(self) -> None:
        """Show the menu once and act on a single choice."""
        self._console.print(format_menu())
        choice = parse_menu_choice(self._read_line())
        if choice is None:
            self._console.print("Invalid choice, please enter 1 or 2.")
            return
        self._handlers[choice]()

    def show_system_health(self) -> None:
        snapshot = gather_snapshot(self._provider)
        logger.debug(
            "snapshot: cpu=%.2f%% disk=%d/%d bytes, %d processes",
            snapshot.cpu_usage_percent,
            snapshot.used_disk_bytes,
            snapshot.total_disk_bytes,
            len(snapshot.processes),
        )
        self._console.print(format_snapshot(snapshot, self._refresh_delay))
        self._sleep(self._refresh_delay)

    def enter_file_explorer(self) -> None:
        state = run_explorer(self._console, self._read_line)
        logger.debug("left file explorer at %s", state.current_directory)


def _build_console(file: Optional[TextIO] = None) -> Console:
    return Console(file=file, markup=False, emoji=False, highlight=False, soft_wrap=True)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Show a system health snapshot or browse directories from the terminal.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="write debug logs to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    loop = CommandLoop(SystemProvider(), _build_console(), read_line=input)
    try:
        loop.run()
    except KeyboardInterrupt:
        return
    except EOFError:
        logger.error("Failed to read input")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
