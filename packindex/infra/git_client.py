"""
Git client infrastructure for packindex.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git command exited non-zero, timed out or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"git {' '.join(self.args_list)}: {detail}")


@dataclass(frozen=True)
class Signature:
    """Author/committer identity for commits written by the client."""
    name: str
    email: str

    def env(self) -> Dict[str, str]:
        return {
            'GIT_AUTHOR_NAME': self.name,
            'GIT_AUTHOR_EMAIL': self.email,
            'GIT_COMMITTER_NAME': self.name,
            'GIT_COMMITTER_EMAIL': self.email,
        }


@dataclass
class GitCommit:
    """A git commit with metadata."""
    hash: str
    date: datetime
    author: str
    email: str
    message: str


class GitClient:
    """
    Abstraction over git commands.

    Every method raises GitCommandError when the underlying command fails,
    except symbolic_head and remote_url, which return None for a detached
    HEAD or a missing remote.

    Example:
        client = GitClient()
        branch = client.symbolic_head("/path/to/repo")
        if branch is None:
            print("HEAD is detached")
    """

    def __init__(self, timeout: int = 300):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 300)
        """
        self.timeout = timeout

    def _run(
        self,
        args: List[str],
        cwd: Optional[str] = None,
        check: bool = True,
        env: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        Run a git command.

        Args:
            args: Arguments after 'git'
            cwd: Working directory
            check: Raise on non-zero exit
            env: Extra environment variables

        Returns:
            Stripped stdout
        """
        cmd = ['git'] + list(args)
        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        logger.debug(f"Running {' '.join(cmd)} in {cwd or os.getcwd()}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=run_env,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            raise GitCommandError(args, -1, f"timed out after {self.timeout}s") from e
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            raise GitCommandError(args, -1, str(e)) from e

        if check and result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr)

        return result.stdout.strip()

    def clone(self, url: str, dest: str) -> None:
        """Clone url into dest. dest must not exist."""
        self._run(['clone', '--quiet', url, str(dest)])

    def symbolic_head(self, path: str) -> Optional[str]:
        """
        Get the ref HEAD points at, e.g. 'refs/heads/main'.

        Returns:
            The full ref name, or None when HEAD is detached
        """
        try:
            output = self._run(['symbolic-ref', '-q', 'HEAD'], cwd=path)
        except GitCommandError as e:
            if e.returncode == 1:
                return None
            raise
        return output or None

    def rev_parse(self, path: str, rev: str = "HEAD") -> str:
        """Resolve a revision to a full commit id."""
        return self._run(['rev-parse', '--verify', f'{rev}^{{commit}}'], cwd=path)

    def first_parent_chain(self, path: str, rev: str = "HEAD") -> List[str]:
        """
        Walk first-parent ancestry from rev.

        Returns:
            Commit ids ordered from rev back to the root commit
        """
        output = self._run(['rev-list', '--first-parent', rev], cwd=path)
        return output.split('\n') if output else []

    def reset(self, path: str, commit: str, mode: str = "mixed") -> None:
        """Move the current branch (and, unless soft, the index) to commit."""
        self._run(['reset', '--quiet', f'--{mode}', commit], cwd=path)

    def add_all(self, path: str) -> None:
        """Stage every change in the working tree, deletions included."""
        self._run(['add', '--all', '.'], cwd=path)

    def write_tree(self, path: str) -> str:
        """Write the index as a tree object and return its id."""
        return self._run(['write-tree'], cwd=path)

    def commit_tree(
        self,
        path: str,
        tree: str,
        parents: Sequence[str],
        message: str,
        signature: Signature,
    ) -> str:
        """
        Create a commit object for tree without touching any ref.

        Returns:
            The new commit id
        """
        args = ['commit-tree', tree]
        for parent in parents:
            args += ['-p', parent]
        args += ['-m', message]
        return self._run(args, cwd=path, env=signature.env())

    def update_ref(self, path: str, ref: str, commit: str, old: Optional[str] = None) -> None:
        """Point ref at commit, optionally verifying its previous value."""
        args = ['update-ref', ref, commit]
        if old:
            args.append(old)
        self._run(args, cwd=path)

    def commit_count(self, path: str, rev: str = "HEAD") -> int:
        """Number of commits reachable from rev."""
        return int(self._run(['rev-list', '--count', rev], cwd=path))

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get remote URL.

        Returns:
            Remote URL or None if not found
        """
        output = self._run(['config', '--get', f'remote.{remote}.url'], cwd=path, check=False)
        return output or None

    def log(self, path: str, limit: int = 50) -> List[GitCommit]:
        """
        Get commit log.

        Args:
            path: Path to git repository
            limit: Maximum commits to return

        Returns:
            List of GitCommit objects, newest first
        """
        output = self._run(['log', '--format=%H|%aI|%an|%ae|%s', '-n', str(limit)], cwd=path)
        if not output:
            return []

        commits = []
        for line in output.split('\n'):
            parts = line.split('|', 4)
            if len(parts) < 5:
                continue

            commit_hash, date_str, author, email, message = (p.strip() for p in parts)
            try:
                date = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
                if date.tzinfo:
                    date = date.replace(tzinfo=None)
            except (ValueError, AttributeError):
                date = datetime.now()

            commits.append(GitCommit(
                hash=commit_hash,
                date=date,
                author=author,
                email=email,
                message=message
            ))

        return commits
