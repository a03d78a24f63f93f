import logging
from pathlib import Path
from typing import List, Optional, Protocol

from arbor.dag.errors import DiffUnavailable, LookupFailed
from arbor.dag.models import CommitNode
from arbor.git_objects.models import CommitObject, TreeObject
from arbor.git_objects.parser import read_object

logger = logging.getLogger(__name__)


class HistorySource(Protocol):
    def lookup(self, oid: str) -> CommitNode:
        """Returns the commit for `oid` or raises LookupFailed."""

    def diff_paths(self, oid: str) -> List[str]:
        """Returns paths changed against the first parent or raises DiffUnavailable."""


class RepositorySource:
    """History source backed by a repository's object store."""

    def __init__(self, git_dir: Path = Path(".git")):
        self.git_dir = git_dir

    def _read_commit(self, oid: str) -> CommitObject:
        obj = read_object(oid, self.git_dir, expected_type="commit")
        if not isinstance(obj, CommitObject):
            raise ValueError(f"{oid} is a {obj.type.decode()}, not a commit")
        return obj

    def _read_tree(self, oid: str) -> TreeObject:
        obj = read_object(oid, self.git_dir, expected_type="tree")
        if not isinstance(obj, TreeObject):
            raise ValueError(f"{oid} is a {obj.type.decode()}, not a tree")
        return obj

    def lookup(self, oid: str) -> CommitNode:
        try:
            return CommitNode.from_object(oid, self._read_commit(oid))
        except (ValueError, OSError) as e:
            raise LookupFailed(oid, str(e)) from e

    def diff_paths(self, oid: str) -> List[str]:
        try:
            commit = self._read_commit(oid)
            parent_tree = None
            if commit.parent_oids:
                parent_tree = self._read_commit(commit.parent_oids[0]).tree_oid
            paths = self._diff_trees(parent_tree, commit.tree_oid, "")
        except (ValueError, OSError) as e:
            raise DiffUnavailable(oid, str(e)) from e
        return sorted(paths)

    def _diff_trees(self, old_oid: Optional[str], new_oid: Optional[str], prefix: str) -> List[str]:
        if old_oid == new_oid:
            return []

        old_entries = self._read_tree(old_oid).by_name() if old_oid else {}
        new_entries = self._read_tree(new_oid).by_name() if new_oid else {}

        paths = []
        for name in sorted(set(old_entries) | set(new_entries)):
            old = old_entries.get(name)
            new = new_entries.get(name)
            if old is not None and new is not None and old.oid == new.oid and old.mode == new.mode:
                continue

            path = prefix + name
            old_tree = old.oid if old is not None and old.is_tree else None
            new_tree = new.oid if new is not None and new.is_tree else None
            if old_tree or new_tree:
                paths.extend(self._diff_trees(old_tree, new_tree, path + "/"))
            # A file replaced by a directory (or the reverse) also changes the file path
            if (old is not None and not old.is_tree) or (new is not None and not new.is_tree):
                paths.append(path)
        return paths
