import io
import os

import pytest
from rich.console import Console

from sysnav.explorer import (
    Command,
    CommandKind,
    ExplorerState,
    ListingEntry,
    list_entries,
    parse_command,
    run_explorer,
    starting_directory,
)


def make_console():
    buffer = io.StringIO()
    console = Console(file=buffer, markup=False, emoji=False, highlight=False, soft_wrap=True)
    return console, buffer


def scripted(*lines):
    remaining = iter(lines)

    def read_line():
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError

    return read_line


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "alpha" / "inner" / "deep").mkdir(parents=True)
    (tmp_path / "alpha" / "inner" / "deep" / "hidden.txt").write_text("x")
    (tmp_path / "alpha" / "a.txt").write_text("a")
    (tmp_path / "beta").mkdir()
    (tmp_path / "top.txt").write_text("t")
    return tmp_path


@pytest.mark.parametrize(
    "line, expected",
    [
        ("exit", Command(CommandKind.EXIT)),
        ("  exit \n", Command(CommandKind.EXIT)),
        ("ls", Command(CommandKind.LIST)),
        ("cd docs", Command(CommandKind.CHANGE_DIR, "docs")),
        ("cd   ../x  ", Command(CommandKind.CHANGE_DIR, "../x")),
        ("cd", Command(CommandKind.UNKNOWN, "cd")),
        ("rm -rf", Command(CommandKind.UNKNOWN, "rm -rf")),
        ("", Command(CommandKind.UNKNOWN, "")),
    ],
)
def test_parse_command(line, expected):
    assert parse_command(line) == expected


def test_list_entries_depth_two(tree):
    entries = list_entries(tree)
    assert entries == [
        ListingEntry(tree, True),
        ListingEntry(tree / "alpha", True),
        ListingEntry(tree / "alpha" / "a.txt", False),
        ListingEntry(tree / "alpha" / "inner", True),
        ListingEntry(tree / "beta", True),
        ListingEntry(tree / "top.txt", False),
    ]


def test_list_entries_skips_symlinks(tree):
    os.symlink(tree / "top.txt", tree / "link.txt")
    paths = [entry.path for entry in list_entries(tree)]
    assert tree / "link.txt" not in paths


def test_list_entries_missing_root(tmp_path):
    assert list_entries(tmp_path / "gone") == []


def test_change_directory_updates_to_joined_path(tree):
    state = ExplorerState(tree)
    assert state.change_directory("alpha")
    assert state.current_directory == tree / "alpha"


def test_change_directory_to_parent(tree):
    state = ExplorerState(tree / "alpha")
    assert state.change_directory("..")
    assert state.current_directory.resolve() == tree.resolve()


def test_change_directory_missing_keeps_state(tree):
    state = ExplorerState(tree)
    assert not state.change_directory("nope")
    assert not state.change_directory("top.txt")
    assert state.current_directory == tree


def test_starting_directory_is_cwd(tree, monkeypatch):
    monkeypatch.chdir(tree)
    assert starting_directory() == tree.resolve()


def test_run_explorer_navigates_and_exits(tree):
    console, buffer = make_console()
    state = run_explorer(console, scripted("cd alpha", "cd missing", "ls", "pwd", "exit"), ExplorerState(tree))

    assert state.current_directory == tree / "alpha"
    output = buffer.getvalue()
    assert f"Current Directory: {tree / 'alpha'}" in output
    assert "Directory not found: missing" in output
    assert "Unknown command: pwd" in output
    assert f"[FILE] {tree / 'alpha' / 'a.txt'}" in output


def test_run_explorer_exit_after_deep_navigation(tree):
    console, _ = make_console()
    state = run_explorer(console, scripted("cd alpha", "cd inner", "cd deep", "exit"), ExplorerState(tree))
    assert state.current_directory == tree / "alpha" / "inner" / "deep"


def test_run_explorer_read_failure_propagates(tree):
    console, _ = make_console()
    with pytest.raises(EOFError):
        run_explorer(console, scripted("ls"), ExplorerState(tree))


def test_change_directory_name_too_long_keeps_state(tree):
    state = ExplorerState(tree)
    assert not state.change_directory("a" * 300)
    assert state.current_directory == tree


def test_run_explorer_reports_unusable_cd_target(tree):
    console, buffer = make_console()
    target = "a" * 300
    state = run_explorer(console, scripted(f"cd {target}", "exit"), ExplorerState(tree))

    assert state.current_directory == tree
    assert f"Directory not found: {target}" in buffer.getvalue()


def test_list_entries_skips_unreadable_directory(tree, monkeypatch):
    real_scandir = os.scandir

    def scandir(path):
        if os.fspath(path) == os.fspath(tree / "alpha"):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    entries = list_entries(tree)
    assert entries == [
        ListingEntry(tree, True),
        ListingEntry(tree / "alpha", True),
        ListingEntry(tree / "beta", True),
        ListingEntry(tree / "top.txt", False),
    ]
