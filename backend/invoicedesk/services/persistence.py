"""
Keyed persistence helpers over SQLAlchemy

upsert_by_key issues a single INSERT ... ON CONFLICT statement so that a
table keyed by a unique column never holds more than one row per key.
"""
import enum
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicedesk.services.exceptions import PersistenceError

_log = logging.getLogger(__name__)


class ConflictPolicy(str, enum.Enum):
    OVERWRITE = "overwrite"  # update the supplied fields of the existing row
    IGNORE = "ignore"  # keep the existing row untouched


class Repository:
    """Keyed reads and upserts for any mapped table"""

    def __init__(self, db: Session):
        self.db = db

    def upsert_by_key(
        self,
        table,
        key: str,
        fields: Dict[str, Any],
        conflict_policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
    ) -> None:
        """
        Insert a row or resolve the conflict on ``key`` with ``conflict_policy``

        Args:
            table: Mapped model class or Table
            key: Name of the unique column used for conflict detection
            fields: Column values, must include ``key``
            conflict_policy: What to do when a row with the same key exists

        Raises:
            PersistenceError: If the statement fails
        """
        if key not in fields:
            raise ValueError(f"Upsert fields must include the key column '{key}'")

        target = getattr(table, "__table__", table)
        insert = self._dialect_insert()
        stmt = insert(target).values(**fields)

        update_fields = {name: stmt.excluded[name] for name in fields if name != key}
        if conflict_policy == ConflictPolicy.OVERWRITE and update_fields:
            stmt = stmt.on_conflict_do_update(index_elements=[key], set_=update_fields)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[key])

        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            _log.error(f"Upsert into {target.name} failed for {key}={fields[key]}: {e}")
            raise PersistenceError(f"Failed to save {target.name}: {e}") from e

    def get_by_key(self, table, key: str, value: Any) -> Optional[Any]:
        """Return the single row whose ``key`` equals ``value``, or None"""
        return self.db.query(table).filter(getattr(table, key) == value).one_or_none()

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise PersistenceError(f"Upsert is not supported for dialect '{dialect}'")
        return insert
