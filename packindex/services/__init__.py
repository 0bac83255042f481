"""
Service layer for packindex.

Services hold the store's business logic and use the infra layer
for git and archive access:
- HistorySquasher: collapses the branch to root + one commit
- RepositoryStore: init, list, export and remove entries
"""

from .squash_service import BotIdentity, HistorySquasher
from .store_service import RepositoryStore

__all__ = [
    'BotIdentity',
    'HistorySquasher',
    'RepositoryStore',
]
