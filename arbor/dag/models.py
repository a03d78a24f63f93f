from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple

from arbor.git_objects.models import CommitObject

NODE = "*"
PASS = "|"
BRANCH = "\\"

SHORT_OID_LENGTH = 7


@dataclass(frozen=True)
class CommitNode:
    oid: str
    parents: Tuple[str, ...]
    author: str
    subject: str
    timestamp: datetime
    message: str = field(default="", compare=False)

    @classmethod
    def from_object(cls, oid: str, commit: CommitObject) -> "CommitNode":
        return cls(
            oid=oid,
            parents=tuple(commit.parent_oids),
            author=commit.author_signature.name,
            subject=commit.subject,
            timestamp=commit.committer_signature.when,
            message=commit.message,
        )

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class GraphCell:
    symbol: str
    color: int


RenderedRow = Tuple[GraphCell, ...]


@dataclass(frozen=True)
class MaterializedEntry:
    oid: str
    short_oid: str
    subject: str
    author: str
    timestamp: datetime
    graph: RenderedRow
    node: CommitNode

    @classmethod
    def build(cls, node: CommitNode, graph: RenderedRow) -> "MaterializedEntry":
        return cls(
            oid=node.oid,
            short_oid=node.oid[:SHORT_OID_LENGTH],
            subject=node.subject,
            author=node.author,
            timestamp=node.timestamp,
            graph=graph,
            node=node,
        )

    def matches(self, needle: str) -> bool:
        """Case-insensitive match of an already lowercased needle."""
        return needle in self.subject.lower() or needle in self.author.lower()
