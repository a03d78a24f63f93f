import logging
from typing import Iterator, List, Optional

from arbor.dag.columns import ColumnLayout
from arbor.dag.frontier import FrontierTraversal
from arbor.dag.models import MaterializedEntry

logger = logging.getLogger(__name__)


class MaterializedSequence:
    """Append-only list of rendered commits, grown on demand by `ensure`.

    There is no "load everything" call. A single `ensure` runs
    synchronously to completion and may read any number of commits if the
    caller asks for a far index.
    """

    def __init__(self, traversal: FrontierTraversal, layout: Optional[ColumnLayout] = None):
        self.traversal = traversal
        self.layout = layout or ColumnLayout()
        self.entries: List[MaterializedEntry] = []
        self.complete = False

    @property
    def source(self):
        return self.traversal.source

    def has_more(self) -> bool:
        return self.traversal.has_more()

    def ensure(self, index: int):
        """Grows the sequence until `index` exists or history runs out."""
        if index < 0:
            return

        before = len(self.entries)
        while len(self.entries) <= index and self.traversal.has_more():
            node = self.traversal.advance()
            row = self.layout.render(node)
            self.entries.append(MaterializedEntry.build(node, row))

        if len(self.traversal.frontier) == 0 and not self.traversal.limit_reached():
            self.complete = True

        if len(self.entries) != before:
            logger.debug("Materialized %d commits (%d total)", len(self.entries) - before, len(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> MaterializedEntry:
        return self.entries[index]

    def __iter__(self) -> Iterator[MaterializedEntry]:
        return iter(self.entries)
