"""Minimal directory browser driven by ``cd``/``ls``/``exit`` commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from rich.console import Console

from .formatting import format_listing

logger = logging.getLogger(__name__)

MAX_DEPTH = 2


class CommandKind(Enum):
    EXIT = "exit"
    CHANGE_DIR = "cd"
    LIST = "ls"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    argument: str = ""


@dataclass(frozen=True)
class ListingEntry:
    path: Path
    is_dir: bool


def parse_command(line: str) -> Command:
    """Decode one input line into a :class:`Command`."""
    text = line.strip()
    if text == "exit":
        return Command(CommandKind.EXIT)
    if text == "ls":
        return Command(CommandKind.LIST)
    if text.startswith("cd "):
        return Command(CommandKind.CHANGE_DIR, text[3:].strip())
    return Command(CommandKind.UNKNOWN, text)


def starting_directory() -> Path:
    try:
        return Path.cwd()
    except OSError as exc:
        logger.debug("working directory unavailable (%s), starting at /", exc)
        return Path("/")


@dataclass
class ExplorerState:
    current_directory: Path = field(default_factory=starting_directory)

    def change_directory(self, target: str) -> bool:
        """Move into ``target`` relative to the current directory.

        The joined path is stored as-is. Returns ``False`` and leaves the
        state untouched when it is not an existing directory.
        """
        candidate = self.current_directory / target
        if not _is_dir(candidate):
            return False
        logger.debug("changing directory to %s", candidate)
        self.current_directory = candidate
        return True


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError as exc:
        logger.debug("cannot stat %s: %s", path, exc)
        return False


def list_entries(root: Path, max_depth: int = MAX_DEPTH) -> List[ListingEntry]:
    """Files and directories under ``root``, down to ``max_depth`` levels.

    ``root`` itself comes first, each directory is followed by its own
    contents, and entries that cannot be read are left out.
    """
    if not _is_dir(root):
        try:
            return [ListingEntry(root, False)] if root.is_file() else []
        except OSError as exc:
            logger.debug("cannot stat %s: %s", root, exc)
            return []
    entries: List[ListingEntry] = [ListingEntry(root, True)]
    entries.extend(_walk(root, 1, max_depth))
    return entries


def _walk(directory: Path, depth: int, max_depth: int) -> Iterator[ListingEntry]:
    if depth > max_depth:
        return
    try:
        with os.scandir(directory) as scanner:
            children = sorted(scanner, key=lambda entry: entry.name)
    except OSError as exc:
        logger.debug("cannot read %s: %s", directory, exc)
        return

    for child in children:
        try:
            is_dir = child.is_dir(follow_symlinks=False)
            is_file = child.is_file(follow_symlinks=False)
        except OSError as exc:
            logger.debug("cannot stat %s: %s", child.path, exc)
            continue
        if not (is_dir or is_file):
            continue
        path = Path(child.path)
        yield ListingEntry(path, is_dir)
        if is_dir:
            yield from _walk(path, depth + 1, max_depth)


def run_explorer(
    console: Console,
    read_line: Callable[[], str],
    state: Optional[ExplorerState] = None,
    max_depth: int = MAX_DEPTH,
) -> ExplorerState:
    """Browse until an ``exit`` command arrives; returns the final state.

    Without ``state`` browsing starts from the working directory, so every
    call is a fresh session.
    """
    state = state if state is not None else ExplorerState()

    def change_dir(command: Command) -> bool:
        if not state.change_directory(command.argument):
            console.print(f"Directory not found: {command.argument}")
        return True

    def list_again(command: Command) -> bool:
        return True

    def unknown(command: Command) -> bool:
        console.print(f"Unknown command: {command.argument}")
        return True

    handlers: Dict[CommandKind, Callable[[Command], bool]] = {
        CommandKind.EXIT: lambda command: False,
        CommandKind.CHANGE_DIR: change_dir,
        CommandKind.LIST: list_again,
        CommandKind.UNKNOWN: unknown,
    }

    while True:
        entries = list_entries(state.current_directory, max_depth)
        console.print(format_listing(state.current_directory, entries))
        command = parse_command(read_line())
        if not handlers[command.kind](command):
            return state
