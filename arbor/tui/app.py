import logging
from pathlib import Path

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Input, Static

from arbor.dag.controller import ViewportController
from arbor.tui import render
from arbor.tui.theme import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

MIN_SIDEBAR_TERMINAL_WIDTH = 60
MIN_SIDEBAR_WIDTH = 30


class ArborApp(App):
    """Full-screen commit graph browser.

    All history reading happens synchronously inside key and resize
    handlers, through the controller.
    """

    CSS = """
    #header, #footer {
        height: 1;
    }
    #body {
        height: 1fr;
    }
    #log {
        width: 1fr;
        height: 100%;
    }
    #sidebar {
        height: 100%;
        padding: 0 1;
    }
    #search {
        height: 1;
        border: none;
        padding: 0 1;
        display: none;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("down,j", "cursor_down", "Down"),
        Binding("up,k", "cursor_up", "Up"),
        Binding("enter", "toggle_files", "Files"),
        Binding("slash", "start_search", "Search"),
        Binding("tab", "toggle_sidebar", "Sidebar", priority=True),
        Binding("escape", "cancel_search", "Cancel", show=False, priority=True),
    ]

    def __init__(self, controller: ViewportController, repo_path: Path, head_name: str = "",
                 theme: Theme = DEFAULT_THEME):
        super().__init__()
        self.controller = controller
        self.repo_path = repo_path
        self.head_name = head_name
        self.arbor_theme = theme
        self.show_sidebar = True
        self.show_files = False
        self.searching = False
        self._laid_out = False

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        with Horizontal(id="body"):
            yield Static(id="log")
            yield Static(id="sidebar")
        yield Static(id="footer")
        yield Input(id="search", placeholder="filter by subject or author")

    def on_mount(self):
        sidebar = self.query_one("#sidebar", Static)
        sidebar.styles.background = self.arbor_theme.panel
        sidebar.styles.border = ("round", self.arbor_theme.panel_border)
        self.query_one("#log", Static).styles.background = self.arbor_theme.background
        self._laid_out = True
        self.relayout()

    def on_resize(self, event: events.Resize):
        if self._laid_out:
            self.relayout()

    def viewport_height(self) -> int:
        # header + footer, plus the search line while it is open
        return max(1, self.size.height - 2 - (1 if self.searching else 0))

    def sidebar_width(self) -> int:
        width = self.size.width
        if not self.show_sidebar or width < MIN_SIDEBAR_TERMINAL_WIDTH:
            return 0
        return max(MIN_SIDEBAR_WIDTH, width // 3)

    def relayout(self):
        self.controller.resize(self.viewport_height())
        self.refresh_view()

    def refresh_view(self):
        controller = self.controller
        width = self.size.width
        sidebar_width = self.sidebar_width()
        log_width = width - sidebar_width

        self.query_one("#header", Static).update(render.header_text(
            self.arbor_theme, width, self.repo_path, self.head_name, controller.filter.query,
            controller.list_length(), controller.loaded(),
        ))
        self.query_one("#log", Static).update(render.log_text(controller, self.arbor_theme, log_width))

        sidebar = self.query_one("#sidebar", Static)
        sidebar.display = sidebar_width > 0
        if sidebar_width > 0:
            sidebar.styles.width = sidebar_width
            entry = controller.selected()
            files = controller.changed_files(entry) if self.show_files and entry is not None else None
            # border and padding take four columns
            sidebar.update(render.sidebar_text(entry, self.arbor_theme, sidebar_width - 4, files))

        total = controller.list_length()
        self.query_one("#footer", Static).update(render.footer_text(
            self.arbor_theme, width, controller.cursor + 1 if total else 0, total,
            controller.loaded(), controller.has_more(), controller.filter.query,
        ))

    def action_cursor_down(self):
        self.controller.move_cursor(1)
        self.refresh_view()

    def action_cursor_up(self):
        self.controller.move_cursor(-1)
        self.refresh_view()

    def action_toggle_files(self):
        self.show_files = not self.show_files
        self.refresh_view()

    def action_toggle_sidebar(self):
        self.show_sidebar = not self.show_sidebar
        self.refresh_view()

    def action_start_search(self):
        search = self.query_one("#search", Input)
        search.value = self.controller.filter.query
        search.display = True
        self.searching = True
        search.focus()
        self.relayout()

    def _close_search(self):
        search = self.query_one("#search", Input)
        search.display = False
        self.searching = False
        self.set_focus(None)

    def action_cancel_search(self):
        if not self.searching:
            return
        self._close_search()
        self.relayout()

    def on_input_submitted(self, event: Input.Submitted):
        self._close_search()
        logger.info("Applying filter %r", event.value)
        self.controller.apply_filter(event.value)
        self.relayout()
