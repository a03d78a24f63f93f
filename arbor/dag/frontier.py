import heapq
import logging
from typing import Iterable, List, Set

from arbor.dag.errors import FrontierExhausted, LookupFailed, NoTipsFound
from arbor.dag.models import CommitNode
from arbor.dag.source import HistorySource

logger = logging.getLogger(__name__)


def precedes(a: CommitNode, b: CommitNode) -> bool:
    """True if `a` is visited before `b`: newest committer timestamp first,
    then the greater hash. Total order over distinct commits."""
    if a.timestamp == b.timestamp:
        return a.oid > b.oid
    return a.timestamp > b.timestamp


class _FrontierItem:
    __slots__ = ("node",)

    def __init__(self, node: CommitNode):
        self.node = node

    def __lt__(self, other: "_FrontierItem") -> bool:
        return precedes(self.node, other.node)


class FrontierQueue:
    """Binary heap of pending commits, popped in `precedes` order."""

    def __init__(self):
        self._heap: List[_FrontierItem] = []

    def push(self, node: CommitNode):
        heapq.heappush(self._heap, _FrontierItem(node))

    def pop(self) -> CommitNode:
        return heapq.heappop(self._heap).node

    def __len__(self) -> int:
        return len(self._heap)


class FrontierTraversal:
    """Lazily walks history from a set of tips, most recent activity first.

    This is not a topological sort: with skewed clocks a child can come out
    after one of its parents.
    """

    def __init__(self, source: HistorySource, tips: Iterable[str], limit: int = 0):
        self.source = source
        self.limit = limit
        self.count = 0
        self.seen: Set[str] = set()
        self.frontier = FrontierQueue()

        tips = list(tips)
        if not tips:
            raise NoTipsFound()

        for oid in tips:
            if oid in self.seen:
                continue
            self._discover(oid)

    def _discover(self, oid: str):
        try:
            node = self.source.lookup(oid)
        except LookupFailed as e:
            logger.debug("Skipping unreadable commit: %s", e)
            return
        self.seen.add(oid)
        self.frontier.push(node)

    def limit_reached(self) -> bool:
        return self.limit > 0 and self.count >= self.limit

    def has_more(self) -> bool:
        return len(self.frontier) > 0 and not self.limit_reached()

    def advance(self) -> CommitNode:
        if not self.has_more():
            raise FrontierExhausted("No more commits to visit")

        node = self.frontier.pop()
        self.count += 1

        # Parents past the limit would never be emitted
        if self.limit_reached():
            return node

        for parent in node.parents:
            if parent in self.seen:
                continue
            self._discover(parent)
        return node
