"""
History squash service for packindex.

Collapses the store's branch onto its root commit and records the
current working tree as the single commit on top of it. The resulting
history is always exactly two commits deep, so the fork can be
force-pushed as one clean update.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..domain.operation import SquashResult
from ..exit_codes import DetachedState, VcsOperationFailed
from ..infra.git_client import GitClient, GitCommandError, Signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotIdentity:
    """Fixed author/committer of squash commits."""
    name: str
    email: str

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BotIdentity":
        git = config.get("git", {})
        return cls(name=git["bot_name"], email=git["bot_email"])

    def signature(self) -> Signature:
        return Signature(name=self.name, email=self.email)


class HistorySquasher:
    """
    Rewrites a repository's branch as root + one commit.

    The root commit is found by walking the first-parent chain from the
    branch tip on every call, which costs one step per commit of history.
    Index histories stay short because every squash leaves two commits,
    so the root id is never cached.

    Example:
        squasher = HistorySquasher(BotIdentity("GeodeBot", "bot@example.org"))
        result = squasher.squash("/path/to/store", "Add/Update my.mod")
        print(result.commit)
    """

    def __init__(self, identity: BotIdentity, git_client: Optional[GitClient] = None):
        """
        Initialize HistorySquasher.

        Args:
            identity: Author and committer of squash commits
            git_client: GitClient instance (creates new if None)
        """
        self.identity = identity
        self.git = git_client or GitClient()

    def find_root(self, repo_path: str, tip: str = "HEAD") -> str:
        """Follow first parents from tip until a commit without parents."""
        try:
            chain = self.git.first_parent_chain(repo_path, tip)
        except GitCommandError as e:
            raise VcsOperationFailed("walk history", str(e)) from e
        if not chain:
            raise VcsOperationFailed("walk history", f"no commits reachable from {tip}")
        logger.debug(f"History of {repo_path} is {len(chain)} commits deep")
        return chain[-1]

    def squash(self, repo_path: Union[str, Path], message: str) -> SquashResult:
        """
        Commit the working tree as the only child of the root commit.

        Args:
            repo_path: Path to the repository
            message: Commit message

        Returns:
            SquashResult describing the new tip

        Raises:
            DetachedState: HEAD is not a branch
            VcsOperationFailed: any git step failed
        """
        path = str(repo_path)

        try:
            branch = self.git.symbolic_head(path)
        except GitCommandError as e:
            raise VcsOperationFailed("read HEAD", str(e)) from e
        if branch is None:
            raise DetachedState(path)

        try:
            tip = self.git.rev_parse(path, "HEAD")
        except GitCommandError as e:
            raise VcsOperationFailed("resolve the branch tip", str(e)) from e

        root = self.find_root(path, tip)

        try:
            self.git.reset(path, root, mode="mixed")
        except GitCommandError as e:
            raise VcsOperationFailed("refresh repository", str(e)) from e

        # From here on the branch points at root; failures leave the
        # store's index and branch out of step with the working tree.
        try:
            self.git.add_all(path)
            tree = self.git.write_tree(path)
            commit = self.git.commit_tree(
                path, tree, [root], message, self.identity.signature()
            )
            self.git.update_ref(path, branch, commit, old=root)
        except GitCommandError as e:
            logger.error(f"Squash of {path} failed after reset to {root}: {e}")
            raise VcsOperationFailed("commit", str(e), needs_inspection=True) from e

        logger.info(f"Squashed {branch} onto {root[:7]} as {commit[:7]}: {message}")
        return SquashResult(
            branch=branch,
            root=root,
            commit=commit,
            tree=tree,
            message=message,
        )
