"""
Operation result domain objects for packindex.

Provides standardized result types for the write operations (export,
remove) that rewrite the store's history.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional


class EntryAction(Enum):
    """What a mutating command did to an entry."""
    EXPORTED = "exported"
    REMOVED = "removed"


@dataclass(frozen=True)
class SquashResult:
    """
    Outcome of collapsing the branch onto its root commit.

    After a squash the branch history is exactly (root, commit).
    """
    branch: str
    root: str
    commit: str
    tree: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'branch': self.branch,
            'root': self.root,
            'commit': self.commit,
            'tree': self.tree,
            'message': self.message,
        }


@dataclass
class EntryOperation:
    """
    Details of a single export or removal.

    Used by the CLI both for the human-readable confirmation and for
    --json output.
    """
    action: EntryAction
    entry: str
    store_path: str
    squash: Optional[SquashResult] = None
    created: bool = False  # export only: entry directory did not exist before
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def push_command(self) -> str:
        """The command the operator runs to publish the rewritten history."""
        return f"git -C {self.store_path} push -f"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'action': self.action.value,
            'entry': self.entry,
            'store': self.store_path,
            'push_command': self.push_command,
        }
        if self.action == EntryAction.EXPORTED:
            result['created'] = self.created
        if self.squash:
            result['commit'] = self.squash.commit
            result['branch'] = self.squash.branch
        if self.metadata:
            result.update(self.metadata)
        return result
