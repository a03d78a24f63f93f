"""Creates demo_repo/ with a few branches and merges, then prints its graph.

Run from the project root: `python scripts/setup_demo.py`.
"""
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

from arbor.dag.builder import open_session
from arbor.git_objects.models import BlobObject, CommitObject, Signature, TreeEntry, TreeObject
from arbor.git_objects.parser import write_object

START = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class DemoRepo:
    def __init__(self, git_dir: Path):
        self.git_dir = git_dir
        self.files = {}
        self.clock = START

    def commit(self, message, parents, author="User", files=None):
        self.files.update(files or {})
        entries = [
            TreeEntry(mode=b"100644", name=name, oid=write_object(BlobObject(content.encode()), self.git_dir))
            for name, content in sorted(self.files.items())
        ]
        tree_oid = write_object(TreeObject(entries=entries), self.git_dir)

        self.clock += timedelta(minutes=7)
        signature = Signature(author, f"{author.lower()}@example.com", self.clock).format()
        commit = CommitObject(
            tree_oid=tree_oid,
            parent_oids=list(parents),
            author=signature,
            committer=signature,
            message=message + "\n",
        )
        oid = write_object(commit, self.git_dir)
        print(f"Created {oid[:7]} {message}")
        return oid


def main():
    repo_dir = Path("demo_repo")
    if repo_dir.exists():
        shutil.rmtree(repo_dir)

    git_dir = repo_dir / ".git"
    (git_dir / "objects").mkdir(parents=True)
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")

    print(f"Creating demo repo in {repo_dir}...")
    repo = DemoRepo(git_dir)

    root = repo.commit("Initial commit", [], files={"hello.txt": "Hello World"})
    main_tip = repo.commit("Update text", [root], files={"hello.txt": "Hello Git Graph"})
    feature = repo.commit("Add feature module", [main_tip], author="Ada", files={"feature.py": "pass"})
    main_tip = repo.commit("Fix typo in greeting", [main_tip], files={"hello.txt": "Hello, Git Graph"})
    feature = repo.commit("Fix feature edge case", [feature], author="Ada", files={"feature.py": "x = 1"})
    main_tip = repo.commit("Merge branch 'feature'", [main_tip, feature])
    hotfix = repo.commit("Hotfix for release", [main_tip], author="Lin", files={"RELEASE": "1.0.1"})
    main_tip = repo.commit("Start docs", [main_tip], files={"README": "docs"})

    (git_dir / "refs" / "heads" / "main").write_text(main_tip + "\n")
    (git_dir / "refs" / "heads" / "hotfix").write_text(hotfix + "\n")

    print("\n--- Graph ---")
    controller = open_session(git_dir, viewport_height=20)
    controller.resize(20)
    for _position, entry in controller.visible_rows():
        graph = "".join(cell.symbol for cell in entry.graph)
        print(f"{graph} {entry.short_oid} {entry.subject} - {entry.author}")


if __name__ == "__main__":
    main()
