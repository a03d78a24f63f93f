from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import binascii
import hashlib
import re

TREE_MODE = b"40000"

# "Name <email> 1700000000 +0100"
_SIGNATURE_RE = re.compile(r"^(?P<name>.*?)\s*<(?P<email>[^>]*)>\s*(?P<epoch>-?\d+)\s*(?P<tz>[+-]\d{4})?\s*$")


@dataclass(frozen=True)
class Signature:
    name: str
    email: str
    when: datetime

    @classmethod
    def parse(cls, raw: str) -> "Signature":
        """Parses an author/committer header value.

        Malformed values keep the raw text as the name and fall back to
        the epoch so that a single odd commit never stops a traversal.
        """
        match = _SIGNATURE_RE.match(raw)
        if not match:
            return cls(name=raw.strip(), email="", when=datetime.fromtimestamp(0, timezone.utc))

        tzinfo = timezone.utc
        tz = match.group("tz")
        if tz:
            sign = -1 if tz[0] == "-" else 1
            try:
                tzinfo = timezone(sign * timedelta(hours=int(tz[1:3]), minutes=int(tz[3:5])))
            except ValueError:
                # Offsets of a day or more are not representable; keep UTC
                pass

        try:
            when = datetime.fromtimestamp(int(match.group("epoch")), tzinfo)
        except (ValueError, OverflowError, OSError):
            when = datetime.fromtimestamp(0, timezone.utc)
        return cls(name=match.group("name"), email=match.group("email"), when=when)

    def format(self) -> str:
        offset = self.when.utcoffset() or timedelta(0)
        minutes = int(offset.total_seconds()) // 60
        sign = "-" if minutes < 0 else "+"
        minutes = abs(minutes)
        return f"{self.name} <{self.email}> {int(self.when.timestamp())} {sign}{minutes // 60:02d}{minutes % 60:02d}"


@dataclass
class GitObject(ABC):
    oid: Optional[str] = field(default=None, init=False)

    @property
    @abstractmethod
    def type(self) -> bytes:
        pass

    @abstractmethod
    def serialize(self) -> bytes:
        pass

    @classmethod
    @abstractmethod
    def deserialize(cls, data: bytes) -> "GitObject":
        pass

    def compute_oid(self) -> str:
        """Computes and sets the SHA-1 hash of the object."""
        data = self.serialize()
        header = f"{self.type.decode()} {len(data)}".encode() + b"\x00"
        self.oid = hashlib.sha1(header + data).hexdigest()
        return self.oid


@dataclass
class BlobObject(GitObject):
    data: bytes

    @property
    def type(self) -> bytes:
        return b"blob"

    def serialize(self) -> bytes:
        return self.data

    @classmethod
    def deserialize(cls, data: bytes) -> "BlobObject":
        return cls(data=data)


@dataclass
class TreeEntry:
    mode: bytes
    name: str
    oid: str

    @property
    def is_tree(self) -> bool:
        # Some writers zero-pad the directory mode
        return self.mode.lstrip(b"0") == TREE_MODE


@dataclass
class TreeObject(GitObject):
    entries: List[TreeEntry] = field(default_factory=list)

    @property
    def type(self) -> bytes:
        return b"tree"

    def serialize(self) -> bytes:
        # Git orders directories as if their name ended with "/"
        def sort_key(entry: TreeEntry) -> bytes:
            name = entry.name.encode()
            return name + b"/" if entry.is_tree else name

        output = b""
        for entry in sorted(self.entries, key=sort_key):
            output += entry.mode + b" " + entry.name.encode() + b"\x00" + binascii.unhexlify(entry.oid)
        return output

    @classmethod
    def deserialize(cls, data: bytes) -> "TreeObject":
        entries = []
        i = 0
        while i < len(data):
            space_idx = data.find(b" ", i)
            if space_idx == -1:
                break
            mode = data[i:space_idx]

            null_idx = data.find(b"\x00", space_idx)
            if null_idx == -1:
                break
            name = data[space_idx + 1:null_idx].decode("utf-8", errors="replace")

            # 20 raw bytes of SHA-1
            oid = binascii.hexlify(data[null_idx + 1:null_idx + 21]).decode()

            entries.append(TreeEntry(mode=mode, name=name, oid=oid))
            i = null_idx + 21

        return cls(entries=entries)

    def by_name(self):
        return {entry.name: entry for entry in self.entries}


@dataclass
class CommitObject(GitObject):
    tree_oid: str
    parent_oids: List[str]
    author: str
    committer: str
    message: str

    @property
    def type(self) -> bytes:
        return b"commit"

    @property
    def author_signature(self) -> Signature:
        return Signature.parse(self.author)

    @property
    def committer_signature(self) -> Signature:
        return Signature.parse(self.committer)

    @property
    def subject(self) -> str:
        lines = self.message.split("\n", 1)
        return lines[0].strip()

    def serialize(self) -> bytes:
        lines = [f"tree {self.tree_oid}".encode()]
        for p in self.parent_oids:
            lines.append(f"parent {p}".encode())
        lines.append(f"author {self.author}".encode())
        lines.append(f"committer {self.committer}".encode())
        lines.append(b"")
        lines.append(self.message.encode())

        return b"\n".join(lines)

    @classmethod
    def deserialize(cls, data: bytes) -> "CommitObject":
        lines = data.decode("utf-8", errors="replace").split("\n")

        tree_oid = ""
        parent_oids = []
        author = ""
        committer = ""

        i = 0
        # Headers end at the first empty line; continuation lines (gpgsig, mergetag) are skipped
        while i < len(lines):
            line = lines[i]
            i += 1
            if not line:
                break

            if line.startswith("tree "):
                tree_oid = line[5:]
            elif line.startswith("parent "):
                parent_oids.append(line[7:])
            elif line.startswith("author "):
                author = line[7:]
            elif line.startswith("committer "):
                committer = line[10:]

        return cls(
            tree_oid=tree_oid,
            parent_oids=parent_oids,
            author=author,
            committer=committer,
            message="\n".join(lines[i:]),
        )
