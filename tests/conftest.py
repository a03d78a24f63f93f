from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List

import pytest

from arbor.dag.errors import DiffUnavailable, LookupFailed
from arbor.dag.models import CommitNode
from arbor.git_objects.models import BlobObject, CommitObject, Signature, TreeEntry, TreeObject
from arbor.git_objects.parser import write_object

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def oid(label) -> str:
    """A 40-char hash whose ordering follows `label` (e.g. oid(3) < oid(4))."""
    return str(label).rjust(40, "0")


def at(minutes: int) -> datetime:
    return EPOCH + timedelta(minutes=minutes)


class MemorySource:
    """In-memory history source that records every lookup."""

    def __init__(self):
        self.commits: Dict[str, CommitNode] = {}
        self.paths: Dict[str, List[str]] = {}
        self.lookups: List[str] = []

    def add(self, label, parents=(), minutes=0, subject=None, author="Me", paths=None, message=None) -> str:
        commit_oid = oid(label)
        subject = subject if subject is not None else f"commit {label}"
        self.commits[commit_oid] = CommitNode(
            oid=commit_oid,
            parents=tuple(oid(p) for p in parents),
            author=author,
            subject=subject,
            timestamp=at(minutes),
            message=message if message is not None else subject + "\n",
        )
        if paths is not None:
            self.paths[commit_oid] = paths
        return commit_oid

    def lookup(self, commit_oid: str) -> CommitNode:
        self.lookups.append(commit_oid)
        if commit_oid not in self.commits:
            raise LookupFailed(commit_oid, "missing")
        return self.commits[commit_oid]

    def diff_paths(self, commit_oid: str) -> List[str]:
        if commit_oid not in self.paths:
            raise DiffUnavailable(commit_oid, "no diff recorded")
        return self.paths[commit_oid]


@pytest.fixture
def source():
    return MemorySource()


class RepoWriter:
    """Writes real loose objects and refs into a temporary .git directory."""

    def __init__(self, git_dir: Path):
        self.git_dir = git_dir
        self.clock = EPOCH
        (git_dir / "objects").mkdir(parents=True)
        (git_dir / "refs" / "heads").mkdir(parents=True)
        (git_dir / "HEAD").write_text("ref: refs/heads/main\n")

    def tree(self, files: Dict[str, str]) -> str:
        """Builds nested trees from {"dir/name": content}."""
        blobs = {}
        subdirs: Dict[str, Dict[str, str]] = {}
        for path, content in files.items():
            head, sep, rest = path.partition("/")
            if sep:
                subdirs.setdefault(head, {})[rest] = content
            else:
                blobs[head] = content

        entries = [
            TreeEntry(mode=b"100644", name=name, oid=write_object(BlobObject(content.encode()), self.git_dir))
            for name, content in blobs.items()
        ]
        entries += [
            TreeEntry(mode=b"40000", name=name, oid=self.tree(sub))
            for name, sub in subdirs.items()
        ]
        return write_object(TreeObject(entries=entries), self.git_dir)

    def commit(self, message: str, parents=(), files=None, author: str = "Me") -> str:
        self.clock += timedelta(minutes=1)
        signature = Signature(author, "me@example.com", self.clock).format()
        commit = CommitObject(
            tree_oid=self.tree(files or {}),
            parent_oids=list(parents),
            author=signature,
            committer=signature,
            message=message + "\n",
        )
        return write_object(commit, self.git_dir)

    def set_ref(self, name: str, commit_oid: str):
        path = self.git_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(commit_oid + "\n")


@pytest.fixture
def repo(tmp_path):
    return RepoWriter(tmp_path / ".git")
