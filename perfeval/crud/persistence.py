"""
Parametrized SQL access for the scoring and workflow services.

Every query goes through SQLAlchemy ``text()`` with named bind parameters,
so values from callers are never interpolated into SQL strings.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from perfeval.core.exceptions import CollaboratorError

logger = logging.getLogger(__name__)


def row_to_dict(row: Optional[Row]) -> Optional[Dict[str, Any]]:
    """Convert a SQLAlchemy Row into a plain dictionary."""
    if row is None:
        return None
    return row._asdict()


class Persistence:
    """
    Thin wrapper around a database session.

    Writes are not committed by the individual calls; group them with
    ``unit_of_work()`` so an operation is applied completely or not at all.
    """

    def __init__(self, db: Session):
        self.db = db

    def _execute(self, query: str, params: Optional[Dict[str, Any]] = None):
        try:
            return self.db.execute(text(query), params or {})
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e.__class__.__name__}: {e}")
            raise CollaboratorError(f"Database error: {e.__class__.__name__}") from e

    def fetch_one(self, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Return the first row as a dict, or None when nothing matches."""
        return row_to_dict(self._execute(query, params).first())

    def fetch_all(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [row_to_dict(row) for row in self._execute(query, params).fetchall()]

    def insert_record(self, query: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Execute an INSERT ... RETURNING <pk> statement.

        Returns:
            The identifier of the new row
        """
        result = self._execute(query, params)
        try:
            return int(result.scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Insert did not return an identifier: {e}")
            raise CollaboratorError("Insert did not return an identifier") from e

    def update_record(self, query: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Execute an UPDATE/DELETE statement.

        Returns:
            Exact number of affected rows
        """
        return self._execute(query, params).rowcount

    def rollback(self) -> None:
        """Discard the current transaction (e.g. after a failed read)."""
        self.db.rollback()

    @contextmanager
    def unit_of_work(self) -> Iterator["Persistence"]:
        """
        Commit everything written inside the block, or roll all of it back.
        """
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise CollaboratorError(f"Database error: {e.__class__.__name__}") from e
        except Exception:
            self.db.rollback()
            raise
