from typing import Iterable, Iterator, List, Set

from arbor.dag.models import BRANCH, NODE, PASS, CommitNode, GraphCell, RenderedRow


class ColumnList:
    """Ordered hashes of the branch lines currently open in the graph."""

    def __init__(self, oids: Iterable[str] = ()):
        self._oids: List[str] = list(oids)

    def index(self, oid: str) -> int:
        """Column of `oid`, or -1."""
        try:
            return self._oids.index(oid)
        except ValueError:
            return -1

    def insert_at(self, pos: int, oid: str):
        self._oids.insert(pos, oid)

    def remove_at(self, pos: int):
        del self._oids[pos]

    def replace_at(self, pos: int, oid: str):
        self._oids[pos] = oid

    def dedup(self):
        """Drops repeated hashes, keeping each first occurrence in place."""
        seen: Set[str] = set()
        unique = []
        for oid in self._oids:
            if oid in seen:
                continue
            seen.add(oid)
            unique.append(oid)
        self._oids = unique

    def __len__(self) -> int:
        return len(self._oids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._oids)

    def __getitem__(self, pos: int) -> str:
        return self._oids[pos]

    def __repr__(self) -> str:
        return f"ColumnList({self._oids!r})"


class ColumnLayout:
    """Assigns each commit a graph row, in the order commits are visited."""

    def __init__(self):
        self.columns = ColumnList()

    def render(self, commit: CommitNode) -> RenderedRow:
        columns = self.columns
        idx = columns.index(commit.oid)
        if idx == -1:
            # A tip nobody has pointed at yet opens a new line on the left
            columns.insert_at(0, commit.oid)
            idx = 0

        parents = commit.parents
        extra = max(0, len(parents) - 1)
        cells = [GraphCell(PASS, i) for i in range(len(columns) + extra)]
        cells[idx] = GraphCell(NODE, idx)
        for i in range(1, extra + 1):
            cells[idx + i] = GraphCell(BRANCH, idx + i)

        if not parents:
            columns.remove_at(idx)
        else:
            columns.replace_at(idx, parents[0])
            for i, parent in enumerate(parents[1:], start=1):
                columns.insert_at(idx + i, parent)

        # Lines reaching a shared ancestor merge here, one row after the fact
        columns.dedup()
        return tuple(cells)
