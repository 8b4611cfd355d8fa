"""Optional git history of the log directory, one commit per rewritten day file."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from dulwich import porcelain
from dulwich.repo import Repo

from daylog.errors import DaylogError, ErrorCode
from daylog.paths import log_filename

logger = logging.getLogger(__name__)


class DayHistory:
    """Commits day files to the git repository inside a log directory.

    The branch tip is remembered when the history is opened, so a write-back
    that fails after its commit can move the branch back with ``undo``.
    """

    def __init__(self, log_dir: Path, repo: Repo) -> None:
        self.log_dir = log_dir
        self.repo = repo
        self.branch, self.opened_at = self._branch_tip()

    @classmethod
    def open(cls, log_dir: Path) -> DayHistory:
        try:
            if (log_dir / ".git").exists():
                repo = Repo(str(log_dir))
            else:
                logger.info("Initializing git history in %s", log_dir)
                repo = porcelain.init(str(log_dir))
            return cls(log_dir, repo)
        except Exception as exc:
            raise DaylogError(
                ErrorCode.GIT_ERROR,
                "Git repository could not be opened.",
                {"path": str(log_dir)},
            ) from exc

    def _branch_tip(self) -> tuple[bytes, bytes | None]:
        refnames, sha = self.repo.refs.follow(b"HEAD")
        return refnames[-1], sha

    def head(self) -> str | None:
        _branch, sha = self._branch_tip()
        return sha.decode("ascii") if sha is not None else None

    def commit_day(self, day: date, operation: str, summary: str) -> str:
        """Stage and commit ``day``'s file; the subject line starts with the day."""
        self.stage_day(day)
        message = f"{day.isoformat()}: {summary}\n\nOperation: {operation}\n"
        commit_sha = porcelain.commit(self.repo, message=message)
        if isinstance(commit_sha, bytes):
            return commit_sha.decode("ascii")
        return str(commit_sha)

    def stage_day(self, day: date) -> None:
        self.repo.get_worktree().stage([log_filename(day)])

    def undo(self, day: date) -> None:
        """Move the branch back to where it was on open and restage ``day``.

        Called after the day file itself has been restored, so the index
        matches the restored content again.
        """
        try:
            if self.opened_at is None:
                if self.branch in self.repo.refs:
                    del self.repo.refs[self.branch]
            else:
                self.repo.refs[self.branch] = self.opened_at
            self.stage_day(day)
        except Exception:
            logger.warning("Could not undo git history for %s in %s", day, self.log_dir)
