from __future__ import annotations

from typing import ContextManager, Protocol


class TransactionManager(Protocol):
    """Commit-or-rollback boundary used by the services.

    ``DatabaseConnection`` is the MySQL implementation; tests use an in-memory
    one that snapshots repository state.
    """

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError
