from pathlib import Path

import pytest

from arbor.dag.columns import ColumnLayout
from arbor.dag.controller import ViewportController
from arbor.dag.frontier import FrontierTraversal
from arbor.dag.sequence import MaterializedSequence
from arbor.tui.app import ArborApp

from conftest import oid


@pytest.fixture
def controller(source):
    for i in range(1, 61):
        subject = f"Fix issue {i}" if i % 10 == 0 else f"Change {i}"
        source.add(i, [i - 1] if i > 1 else [], minutes=i, subject=subject, paths=[f"file{i}.txt"])
    traversal = FrontierTraversal(source, [oid(60)])
    return ViewportController(MaterializedSequence(traversal, ColumnLayout()))


@pytest.mark.asyncio
async def test_app_loads_only_the_visible_window(controller):
    app = ArborApp(controller, repo_path=Path("/repo"), head_name="main")
    async with app.run_test(size=(100, 20)) as pilot:
        await pilot.pause()
        # 20 lines minus header and footer
        assert controller.viewport_height == 18
        assert controller.loaded() == 18 + 5 + 1
        assert controller.has_more()


@pytest.mark.asyncio
async def test_app_cursor_keys(controller):
    app = ArborApp(controller, repo_path=Path("/repo"))
    async with app.run_test(size=(100, 20)) as pilot:
        await pilot.press("j", "j", "down")
        assert controller.cursor == 3
        await pilot.press("k")
        assert controller.cursor == 2
        assert controller.selected().subject == "Change 58"


@pytest.mark.asyncio
async def test_app_search_and_cancel(controller):
    app = ArborApp(controller, repo_path=Path("/repo"))
    async with app.run_test(size=(100, 20)) as pilot:
        await pilot.press("slash", "f", "i", "x", "enter")
        await pilot.pause()
        assert controller.filter.query == "fix"
        assert [controller.entry_at(p).subject for p in range(controller.list_length())] == [
            f"Fix issue {i}" for i in (60, 50, 40, 30, 20, 10)
        ]
        assert not app.searching

        await pilot.press("slash")
        assert app.searching
        await pilot.press("escape")
        assert not app.searching
        assert controller.filter.query == "fix"


@pytest.mark.asyncio
async def test_app_toggles(controller):
    app = ArborApp(controller, repo_path=Path("/repo"))
    async with app.run_test(size=(100, 20)) as pilot:
        assert app.sidebar_width() == 33
        await pilot.press("tab")
        assert not app.show_sidebar
        assert app.sidebar_width() == 0

        await pilot.press("tab", "enter")
        assert app.show_files
        assert controller.changed_files(controller.selected()) == ["file60.txt"]
