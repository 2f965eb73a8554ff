"""Tests for the Textual worktree selector"""
import asyncio

from textual.widgets import OptionList

from gj.ui.selector import WorktreeSelectorApp

LABELS = ["app/pr-1 (feature/a)", "app/login (gj/20240305_login)", "lib/x (x)"]


def run_selector(*keys):
    """Drive the selector with ``keys`` and return its result."""

    async def _run():
        app = WorktreeSelectorApp(LABELS)
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press(*keys)
        return app

    return asyncio.run(_run())


def test_enter_selects_first_by_default():
    assert run_selector("enter").return_value == 0


def test_arrow_keys_move_selection():
    assert run_selector("down", "down", "enter").return_value == 2


def test_escape_cancels():
    assert run_selector("escape").return_value is None


def test_q_cancels():
    assert run_selector("q").return_value is None


def test_lists_every_label():
    async def _run():
        app = WorktreeSelectorApp(LABELS)
        async with app.run_test() as pilot:
            await pilot.pause()
            option_list = app.query_one("#worktrees", OptionList)
            count = option_list.option_count
            highlighted = option_list.highlighted
            app.exit(None)
        return count, highlighted

    assert asyncio.run(_run()) == (3, 0)
