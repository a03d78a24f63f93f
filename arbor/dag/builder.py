import logging
from pathlib import Path
from typing import List, Optional

from arbor.dag.columns import ColumnLayout
from arbor.dag.controller import ViewportController
from arbor.dag.errors import NoTipsFound
from arbor.dag.frontier import FrontierTraversal
from arbor.dag.refs import gather_tips
from arbor.dag.sequence import MaterializedSequence
from arbor.dag.source import HistorySource, RepositorySource

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Wires tips, traversal, layout and sequence into a viewport controller."""

    def __init__(self, git_dir: Path = Path(".git"), include_all: bool = False, limit: int = 0,
                 source: Optional[HistorySource] = None):
        self.git_dir = git_dir
        self.include_all = include_all
        self.limit = limit
        self.source = source or RepositorySource(git_dir)

    def tips(self) -> List[str]:
        return gather_tips(self.git_dir, self.include_all)

    def build(self, viewport_height: int = 1) -> ViewportController:
        tips = self.tips()
        if not tips:
            raise NoTipsFound(f"no commits found in {self.git_dir}")

        logger.info("Traversing history of %s from %d tips", self.git_dir, len(tips))
        traversal = FrontierTraversal(self.source, tips, limit=self.limit)
        sequence = MaterializedSequence(traversal, ColumnLayout())
        sequence.ensure(0)
        return ViewportController(sequence, viewport_height=viewport_height)


def open_session(git_dir: Path, include_all: bool = False, limit: int = 0,
                 viewport_height: int = 1) -> ViewportController:
    return GraphBuilder(git_dir, include_all=include_all, limit=limit).build(viewport_height)
