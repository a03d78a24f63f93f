import logging
import subprocess
import zlib
from pathlib import Path
from typing import Optional

from .models import GitObject, BlobObject, TreeObject, CommitObject

logger = logging.getLogger(__name__)

_OBJECT_TYPES = {
    b"blob": BlobObject,
    b"tree": TreeObject,
    b"commit": CommitObject,
}


def _build_object(obj_type: bytes, content: bytes, oid: str) -> GitObject:
    cls = _OBJECT_TYPES.get(obj_type)
    if cls is None:
        raise ValueError(f"Unknown object type: {obj_type!r}")
    obj = cls.deserialize(content)
    obj.oid = oid
    return obj


def _read_packed_object(oid: str, git_dir: Path, expected_type: Optional[str]) -> GitObject:
    """Reads an object that is not stored loose, by asking git itself."""
    try:
        if expected_type is None:
            type_proc = subprocess.run(
                ["git", "--git-dir", str(git_dir), "cat-file", "-t", oid],
                capture_output=True,
                check=True,
            )
            expected_type = type_proc.stdout.decode().strip()

        # `cat-file <type>` prints the raw object body
        content_proc = subprocess.run(
            ["git", "--git-dir", str(git_dir), "cat-file", expected_type, oid],
            capture_output=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Object {oid} is not loose and git is not available: {e}") from e
    except subprocess.CalledProcessError as e:
        stderr_msg = e.stderr.decode(errors="replace").strip() if e.stderr else "No stderr"
        raise FileNotFoundError(f"Object {oid} not found in {git_dir} or packfiles. Git Error: {stderr_msg}") from e

    return _build_object(expected_type.encode(), content_proc.stdout, oid)


def read_object(oid: str, git_dir: Path = Path(".git"), expected_type: Optional[str] = None) -> GitObject:
    """Read an object from the git directory by its SHA-1 hash.

    Loose objects are inflated directly; anything else is delegated to
    `git cat-file`. Passing `expected_type` saves the type probe for
    packed objects.
    """
    if len(oid) != 40:
        raise ValueError(f"Invalid Object ID: {oid}")

    path = git_dir / "objects" / oid[:2] / oid[2:]
    if not path.exists():
        logger.debug("Object %s is not loose, falling back to git cat-file", oid)
        return _read_packed_object(oid, git_dir, expected_type)

    try:
        raw_data = zlib.decompress(path.read_bytes())
    except zlib.error as e:
        raise ValueError(f"Corrupt object {oid}: {e}") from e

    # format: "type size\0content"
    null_idx = raw_data.find(b"\x00")
    if null_idx == -1:
        raise ValueError("Invalid object format (no null byte)")

    header = raw_data[:null_idx]
    type_str, _, _size = header.partition(b" ")
    return _build_object(type_str, raw_data[null_idx + 1:], oid)


def write_object(obj: GitObject, git_dir: Path) -> str:
    """Stores `obj` as a loose object and returns its OID."""
    data = obj.serialize()
    store = f"{obj.type.decode()} {len(data)}".encode() + b"\x00" + data
    oid = obj.compute_oid()

    path = git_dir / "objects" / oid[:2] / oid[2:]
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(zlib.compress(store))
    return oid
