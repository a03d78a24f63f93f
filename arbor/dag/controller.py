import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from arbor.dag.errors import DiffUnavailable
from arbor.dag.models import MaterializedEntry
from arbor.dag.sequence import MaterializedSequence

logger = logging.getLogger(__name__)

LOOKAHEAD_ROWS = 5

NO_CHANGES = "(no file changes)"
FILES_UNAVAILABLE = "(unable to load files)"


@dataclass
class FilterState:
    query: str = ""
    indices: List[int] = field(default_factory=list)
    scan_cursor: int = 0

    @property
    def active(self) -> bool:
        return self.query != ""

    def reset(self, query: str = ""):
        self.query = query.strip()
        self.indices = []
        self.scan_cursor = 0

    def scan(self, entries: List[MaterializedEntry]):
        """Tests entries not yet seen by this query, never going back."""
        if not self.active:
            return
        needle = self.query.lower()
        for index in range(self.scan_cursor, len(entries)):
            if entries[index].matches(needle):
                self.indices.append(index)
        self.scan_cursor = max(self.scan_cursor, len(entries))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class ViewportController:
    """Owns the materialized history and everything derived from it for one
    view: active filter, cursor, scroll offset and changed-file cache.

    Every structural change ends with `ensure_visible` + `normalize_position`,
    so the rows the view can show (plus a small look-ahead) always exist.
    """

    def __init__(self, sequence: MaterializedSequence, viewport_height: int = 1, lookahead: int = LOOKAHEAD_ROWS):
        self.sequence = sequence
        self.lookahead = lookahead
        self.filter = FilterState()
        self.cursor = 0
        self.offset = 0
        self._viewport_height = max(1, viewport_height)
        self._files_cache: Dict[str, List[str]] = {}

    @property
    def viewport_height(self) -> int:
        return self._viewport_height

    def has_more(self) -> bool:
        return self.sequence.has_more()

    def loaded(self) -> int:
        return len(self.sequence)

    def list_length(self) -> int:
        if self.filter.active:
            return len(self.filter.indices)
        return len(self.sequence)

    def entry_at(self, position: int) -> Optional[MaterializedEntry]:
        """Entry at a position of the current logical list."""
        if position < 0 or position >= self.list_length():
            return None
        if self.filter.active:
            position = self.filter.indices[position]
        return self.sequence[position]

    def selected(self) -> Optional[MaterializedEntry]:
        return self.entry_at(self.cursor)

    def visible_rows(self) -> List[Tuple[int, MaterializedEntry]]:
        list_len = self.list_length()
        start = min(self.offset, max(0, list_len - 1))
        end = min(start + self._viewport_height, list_len)
        return [(position, self.entry_at(position)) for position in range(start, end)]

    def resize(self, viewport_height: int):
        self._viewport_height = max(1, viewport_height)
        self.ensure_visible()
        self.normalize_position()

    def refresh_filter(self):
        self.filter.scan(self.sequence.entries)

    def ensure_visible(self):
        target = self.offset + self._viewport_height + self.lookahead
        if not self.filter.active:
            self.sequence.ensure(target)
            return

        self.refresh_filter()
        while len(self.filter.indices) <= target and self.sequence.has_more():
            self.sequence.ensure(len(self.sequence))
            self.refresh_filter()

    def apply_filter(self, query: str):
        self.filter.reset(query)
        self.cursor = 0
        self.offset = 0
        if self.filter.active:
            logger.debug("Filtering history on %r", self.filter.query)
            self.refresh_filter()
        self.ensure_visible()
        self.normalize_position()

    def move_cursor(self, delta: int):
        if self.list_length() == 0:
            return
        self.cursor = clamp(self.cursor + delta, 0, self.list_length() - 1)
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + self._viewport_height:
            self.offset = self.cursor - self._viewport_height + 1
        if delta > 0:
            self.ensure_visible()
        self.normalize_position()

    def normalize_position(self):
        list_len = self.list_length()
        if list_len == 0:
            self.cursor = 0
            self.offset = 0
            return
        self.cursor = clamp(self.cursor, 0, list_len - 1)
        self.offset = clamp(self.offset, 0, max(0, list_len - self._viewport_height))
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + self._viewport_height:
            self.offset = self.cursor - self._viewport_height + 1

    def changed_files(self, entry: MaterializedEntry) -> List[str]:
        """Paths touched by `entry` against its first parent, memoized per hash."""
        cached = self._files_cache.get(entry.oid)
        if cached is not None:
            return cached

        if entry.node.is_root:
            files = [NO_CHANGES]
        else:
            try:
                files = sorted(self.sequence.source.diff_paths(entry.oid)) or [NO_CHANGES]
            except DiffUnavailable as e:
                logger.warning("%s", e)
                files = [FILES_UNAVAILABLE]

        self._files_cache[entry.oid] = files
        return files
