import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from arbor.dag.refs import find_git_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    git_dir: Optional[Path] = None
    include_all: bool = False
    limit: int = 0
    log_file: Optional[Path] = None
    log_level: str = "WARNING"
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        git_dir = os.getenv("GIT_DIR")
        log_file = os.getenv("ARBOR_LOG_FILE")
        return cls(
            git_dir=Path(git_dir) if git_dir else None,
            include_all=os.getenv("ARBOR_ALL", "").lower() in _TRUTHY,
            limit=int(os.getenv("ARBOR_LIMIT", "0") or 0),
            log_file=Path(log_file) if log_file else None,
            log_level=os.getenv("ARBOR_LOG_LEVEL", "WARNING").upper(),
            allowed_origins=_env_list("ALLOWED_ORIGINS", "*"),
        )

    def resolve_git_dir(self) -> Optional[Path]:
        """The configured repository, or the one enclosing the current directory."""
        if self.git_dir is not None:
            git_dir = self.git_dir
            # Accept a work tree as well as its .git directory
            if (git_dir / ".git").exists():
                return find_git_dir(git_dir)
            return git_dir if git_dir.is_dir() else None
        return find_git_dir(Path.cwd())


def configure_logging(settings: Settings, to_stderr: bool = True):
    """Configures the root logger once per process.

    With `to_stderr=False` (the full-screen UI) records only go to the log
    file, and are dropped when none is configured.
    """
    handlers: List[logging.Handler] = []
    if settings.log_file is not None:
        handlers.append(logging.FileHandler(settings.log_file))
    elif to_stderr:
        handlers.append(logging.StreamHandler())
    else:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, handlers=handlers, force=True)
