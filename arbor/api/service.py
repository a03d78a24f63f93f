import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from arbor.api.schemas import CommitDetailResponse, CommitPageResponse, CommitRowResponse, GraphCellResponse
from arbor.dag.builder import GraphBuilder
from arbor.dag.controller import ViewportController
from arbor.dag.models import MaterializedEntry

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 500


class GraphService:
    """One lazily opened graph session per repository, paged over HTTP.

    FastAPI runs the sync endpoints on a thread pool, so every public method
    holds `_lock`: the controller underneath has a single mutator.
    """

    def __init__(self, git_dir: Path = Path(".git"), include_all: bool = False, limit: int = 0):
        self.git_dir = git_dir.resolve()
        self.include_all = include_all
        self.limit = limit
        self.controller: Optional[ViewportController] = None
        self._positions: Dict[str, int] = {}
        self._lock = threading.RLock()

    def reset(self, git_dir: Optional[Path] = None):
        """Drops the session; the next request traverses again from the current refs."""
        with self._lock:
            if git_dir is not None:
                self.git_dir = git_dir.resolve()
            self.controller = None
            self._positions = {}

    def ensure_loaded(self) -> ViewportController:
        with self._lock:
            if self.controller is None:
                # Raises NoTipsFound for an empty repository
                self.controller = GraphBuilder(self.git_dir, self.include_all, self.limit).build()
                logger.info("Opened graph session for %s", self.git_dir)
            return self.controller

    def get_commits(self, offset: int = 0, limit: int = 50, query: str = "") -> CommitPageResponse:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)

        with self._lock:
            controller = self.ensure_loaded()
            if query.strip() != controller.filter.query:
                controller.apply_filter(query)

            # Grows history to cover the requested window plus look-ahead
            controller.offset = offset
            controller.cursor = offset
            controller.resize(limit)

            rows = []
            for position in range(offset, offset + limit):
                entry = controller.entry_at(position)
                if entry is None:
                    break
                rows.append(self._to_row(position, entry))

            return CommitPageResponse(
                rows=rows,
                offset=offset,
                total=controller.list_length(),
                loaded=controller.loaded(),
                has_more=controller.has_more(),
                complete=controller.sequence.complete,
                filter=controller.filter.query,
            )

    def get_commit(self, oid: str) -> Optional[CommitDetailResponse]:
        with self._lock:
            controller = self.ensure_loaded()
            entry = self._find(controller, oid)
            if entry is None:
                return None

            return CommitDetailResponse(
                oid=entry.oid,
                short_oid=entry.short_oid,
                subject=entry.subject,
                author=entry.author,
                timestamp=entry.timestamp,
                message=entry.node.message,
                parent_oids=list(entry.node.parents),
                files=controller.changed_files(entry),
            )

    def _find(self, controller: ViewportController, oid: str) -> Optional[MaterializedEntry]:
        """Looks up an already materialized commit by full or abbreviated hash."""
        sequence = controller.sequence
        for index in range(len(self._positions), len(sequence)):
            self._positions[sequence[index].oid] = index

        if oid in self._positions:
            return sequence[self._positions[oid]]
        if len(oid) >= 4:
            for full_oid, index in self._positions.items():
                if full_oid.startswith(oid):
                    return sequence[index]
        return None

    def _to_row(self, position: int, entry: MaterializedEntry) -> CommitRowResponse:
        return CommitRowResponse(
            index=position,
            oid=entry.oid,
            short_oid=entry.short_oid,
            subject=entry.subject,
            author=entry.author,
            timestamp=entry.timestamp,
            graph=[GraphCellResponse(symbol=cell.symbol, color=cell.color) for cell in entry.graph],
        )
