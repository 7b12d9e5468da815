"""Database operation helpers to reduce boilerplate in the recorder.

Consolidates the repeated `with self._db.connection() as conn:` pattern.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import Connection, Executable
from sqlalchemy.engine import Row

from textchain.contracts.errors import AuditIntegrityError

if TYPE_CHECKING:
    from textchain.core.ledger.database import LedgerDB

T = TypeVar("T")


class DatabaseOps:
    """Helper for common database operations.

    Centralizes connection management for recorder methods.
    """

    def __init__(self, db: "LedgerDB") -> None:
        self._db = db

    def execute_fetchone(self, query: Executable) -> Row[Any] | None:
        """Execute query and return single row or None."""
        with self._db.connection() as conn:
            result = conn.execute(query)
            return result.fetchone()

    def execute_fetchall(self, query: Executable) -> list[Row[Any]]:
        """Execute query and return all rows."""
        with self._db.connection() as conn:
            result = conn.execute(query)
            return list(result.fetchall())

    def execute_insert(self, stmt: Executable) -> None:
        """Execute insert statement.

        Raises:
            AuditIntegrityError: If zero rows are affected
        """
        with self._db.connection() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                raise AuditIntegrityError("execute_insert: zero rows affected - ledger write failed")

    def execute_update(self, stmt: Executable) -> None:
        """Execute update statement.

        Raises:
            AuditIntegrityError: If zero rows are affected (missing or already terminal record)
        """
        with self._db.connection() as conn:
            require_rows(conn.execute(stmt).rowcount, "execute_update")

    def execute_in_transaction(self, work: Callable[[Connection], T]) -> T:
        """Run several statements in one transaction.

        Everything ``work`` executes commits together or rolls back together.
        """
        with self._db.connection() as conn:
            return work(conn)


def require_rows(rowcount: int, operation: str) -> None:
    """Raise if a guarded write touched no rows.

    Raises:
        AuditIntegrityError: If rowcount is zero
    """
    if rowcount == 0:
        raise AuditIntegrityError(f"{operation}: zero rows affected - target row missing or already terminal")
