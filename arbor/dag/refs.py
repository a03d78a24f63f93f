import logging
from pathlib import Path
from typing import Optional, Dict, List

logger = logging.getLogger(__name__)

HEADS = "refs/heads/"
REMOTES = "refs/remotes/"


def find_git_dir(start: Path = Path(".")) -> Optional[Path]:
    """Walks up from `start` looking for a `.git` directory (or worktree file)."""
    start = start.resolve()
    for directory in [start, *start.parents]:
        candidate = directory / ".git"
        if candidate.is_dir():
            return candidate
        if candidate.is_file():
            # Worktrees and submodules: "gitdir: <path>"
            content = candidate.read_text().strip()
            if content.startswith("gitdir: "):
                return (directory / content[8:]).resolve()
    return None


def read_packed_refs(git_dir: Path) -> Dict[str, str]:
    """Returns ref name -> OID from `packed-refs`, skipping peeled tag lines."""
    packed = git_dir / "packed-refs"
    refs: Dict[str, str] = {}
    if not packed.exists():
        return refs

    for line in packed.read_text().splitlines():
        if not line or line.startswith("#") or line.startswith("^"):
            continue
        oid, _, name = line.partition(" ")
        if name:
            refs[name.strip()] = oid.strip()
    return refs


def resolve_ref(git_dir: Path, ref_path: str) -> Optional[str]:
    """Resolves a reference (e.g., 'refs/heads/main') to an OID."""
    full_path = git_dir / ref_path
    if not full_path.is_file():
        return read_packed_refs(git_dir).get(ref_path)

    content = full_path.read_text().strip()
    if content.startswith("ref: "):
        # Recursive resolution (e.g. HEAD -> refs/heads/main)
        return resolve_ref(git_dir, content[5:])
    return content or None


def resolve_head(git_dir: Path = Path(".git")) -> Optional[str]:
    """Resolves HEAD to the current commit OID."""
    return resolve_ref(git_dir, "HEAD")


def _collect_refs(git_dir: Path, namespace: str) -> Dict[str, str]:
    """Short ref name -> OID for loose and packed refs under `namespace`.

    Symbolic refs (like `origin/HEAD`) are not tips of their own and are left out.
    """
    refs = {
        name[len(namespace):]: oid
        for name, oid in read_packed_refs(git_dir).items()
        if name.startswith(namespace)
    }

    base_dir = git_dir / namespace
    if not base_dir.exists():
        return refs

    for path in sorted(base_dir.glob("**/*")):
        if not path.is_file():
            continue
        content = path.read_text().strip()
        if not content or content.startswith("ref: "):
            continue
        # Loose refs take precedence over packed ones
        refs[path.relative_to(base_dir).as_posix()] = content

    return refs


def get_branches(git_dir: Path = Path(".git")) -> Dict[str, str]:
    """Returns a dictionary of branch names and their tip OIDs."""
    return _collect_refs(git_dir, HEADS)


def get_remote_branches(git_dir: Path = Path(".git")) -> Dict[str, str]:
    """Returns remote-tracking branch names (e.g. 'origin/main') and their tip OIDs."""
    return _collect_refs(git_dir, REMOTES)


def head_is_detached(git_dir: Path) -> bool:
    head = git_dir / "HEAD"
    return head.is_file() and not head.read_text().strip().startswith("ref: ")


def gather_tips(git_dir: Path = Path(".git"), include_all: bool = False) -> List[str]:
    """Starting points for history traversal, in a stable order, without duplicates."""
    tips = list(get_branches(git_dir).values())
    if include_all:
        tips.extend(get_remote_branches(git_dir).values())
    if head_is_detached(git_dir):
        head_oid = resolve_head(git_dir)
        if head_oid:
            tips.append(head_oid)

    if not tips:
        head_oid = resolve_head(git_dir)
        if head_oid:
            tips.append(head_oid)

    unique = list(dict.fromkeys(tips))
    logger.debug("Found %d tips in %s", len(unique), git_dir)
    return unique


def head_label(git_dir: Path = Path(".git")) -> str:
    """Short description of HEAD for display: branch name or detached@<hash>."""
    head = git_dir / "HEAD"
    if not head.is_file():
        return ""

    content = head.read_text().strip()
    if content.startswith("ref: "):
        ref = content[5:]
        if ref.startswith(HEADS):
            return ref[len(HEADS):]
        return ref
    if not content:
        return "detached"
    return f"detached@{content[:7]}"
