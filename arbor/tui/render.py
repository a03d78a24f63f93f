from pathlib import Path
from typing import List, Optional, Sequence

from rich.text import Text

from arbor.dag.controller import ViewportController
from arbor.dag.models import GraphCell, MaterializedEntry
from arbor.tui.theme import Theme

KEY_HINTS = "up/down k/j move | enter files | / search | tab sidebar | q quit"
DATE_FORMAT = "%a, %d %b %Y %H:%M:%S %z"


def wrap_text(text: str, width: int) -> List[str]:
    """Greedy word wrap; a single over-long word gets a line of its own."""
    if width <= 0:
        return [text]
    words = text.split()
    if not words:
        return [""]

    lines = []
    line = ""
    for word in words:
        if not line:
            line = word
        elif len(line) + len(word) + 1 > width:
            lines.append(line)
            line = word
        else:
            line = f"{line} {word}"
    lines.append(line)
    return lines


def truncate_text(text: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if len(text) <= max_width:
        return text
    if max_width <= 3:
        return text[:max_width]
    return text[:max_width - 3] + "..."


def fit(text: Text, width: int) -> Text:
    """Crops or pads `text` to exactly `width` cells."""
    if width > 0:
        text.truncate(width, overflow="crop", pad=True)
    return text


def graph_text(cells: Sequence[GraphCell], theme: Theme, background: str) -> Text:
    text = Text()
    for cell in cells:
        text.append(cell.symbol, style=f"{theme.branch_color(cell.color)} on {background}")
    return text


def row_text(entry: MaterializedEntry, theme: Theme, width: int, selected: bool = False, alt: bool = False) -> Text:
    background = theme.background_alt if alt else theme.background
    subject_color = theme.text
    author_color = theme.text_muted
    if selected:
        background = theme.highlight_background
        subject_color = theme.highlight_text
        author_color = theme.highlight_text

    line = Text(style=f"on {background}")
    line.append_text(graph_text(entry.graph, theme, background))
    line.append(" ")
    line.append(entry.short_oid, style=f"bold {theme.accent}")
    line.append(" ")
    line.append(entry.subject, style=f"bold {subject_color}")
    line.append(" - ", style=theme.text_dim)
    line.append(entry.author, style=author_color)
    return fit(line, width)


def empty_row(theme: Theme, width: int) -> Text:
    return fit(Text("No commits", style=f"{theme.text_dim} on {theme.background}"), width)


def blank_row(theme: Theme, width: int, alt: bool = False) -> Text:
    background = theme.background_alt if alt else theme.background
    return fit(Text("", style=f"on {background}"), width)


def log_text(controller: ViewportController, theme: Theme, width: int) -> Text:
    """Every line of the commit list for the current window."""
    viewport = controller.viewport_height
    lines = [
        row_text(entry, theme, width, selected=position == controller.cursor, alt=position % 2 == 1)
        for position, entry in controller.visible_rows()
    ]
    if not lines:
        lines.append(empty_row(theme, width))

    start = controller.offset
    while len(lines) < viewport:
        lines.append(blank_row(theme, width, alt=(start + len(lines)) % 2 == 1))
    return Text("\n").join(lines)


def sidebar_text(entry: Optional[MaterializedEntry], theme: Theme, width: int,
                 files: Optional[List[str]] = None) -> Text:
    if entry is None:
        return Text("No commit selected", style=theme.text_dim)

    text = Text()
    text.append(entry.short_oid + "\n", style=f"bold {theme.accent_alt}")
    text.append(entry.author + "\n")
    text.append(entry.timestamp.strftime(DATE_FORMAT) + "\n\n", style=theme.text_muted)
    text.append("\n".join(wrap_text(entry.node.message.strip(), width - 2)))

    if files is not None:
        text.append("\n\n")
        text.append("Changed files", style=f"bold {theme.accent}")
        for path in files:
            text.append(f"\n- {path}")
    return text


def _spread(left: Text, right: Text, width: int, style: str = "") -> Text:
    """`left` and `right` on one line, separated by at least one space."""
    content_width = max(0, width - 2)
    max_right = max(0, content_width - left.cell_len - 1)
    if right.cell_len > max_right:
        right.truncate(max_right, overflow="crop")
    space = content_width - left.cell_len - right.cell_len
    if space < 1:
        left.truncate(max(0, content_width - right.cell_len - 1), overflow="crop")
        space = max(1, content_width - left.cell_len - right.cell_len)

    line = Text(" ", style=style)
    line.append_text(left)
    line.append(" " * space)
    line.append_text(right)
    line.append(" ")
    return line


def header_text(theme: Theme, width: int, repo_path: Path, head_name: str, filter_query: str,
                visible: int, loaded: int) -> Text:
    left = Text()
    left.append("arbor", style=f"bold {theme.accent}")
    left.append(" | ", style=theme.text_dim)
    left.append(str(repo_path), style=theme.text)
    if filter_query:
        left.append(f" /{filter_query}", style=theme.accent_alt)
    if head_name:
        left.append(" ")
        left.append(f" branch {head_name} ", style=f"{theme.highlight_text} on {theme.accent}")

    right = Text(f"{visible} visible | {loaded} loaded", style=theme.text_dim)
    return _spread(left, right, width, style=f"on {theme.bar_background}")


def footer_text(theme: Theme, width: int, position: int, total: int, loaded: int, has_more: bool,
                filter_query: str = "") -> Text:
    status_parts = [f"{position}/{total}", f"loaded {loaded}{'+' if has_more else ''}"]
    if filter_query:
        status_parts.insert(0, f'filter "{filter_query}"')
    status = Text(" | ".join(status_parts), style=theme.accent)

    max_hints = max(0, width - 2 - status.cell_len - 1)
    hints = Text(truncate_text(KEY_HINTS, max_hints), style=theme.text_muted)
    return _spread(hints, status, width, style=f"on {theme.bar_background}")
