"""Columns shared by every mapping table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.enums import DEFAULT_MAPPING_TYPE
from mapping_service.utils.datetime_parsing import utc_now

# SQLite only autoincrements INTEGER PRIMARY KEY
SurrogateKey = BigInteger().with_variant(Integer(), "sqlite")


class MappingColumnsMixin:
    """
    Surrogate key, migration label, provenance and creation time.

    ``id`` increases with insertion order and breaks ties between rows
    created within the same clock tick, which keeps migration-run pages
    stable while the table grows. Equality follows ``__natural_key__``
    (the new-system id for most kinds, the legacy id for activities), not
    the surrogate. Rows without a key compare equal only to themselves.
    """

    __natural_key__: str = ""

    id: Mapped[int] = mapped_column(SurrogateKey, primary_key=True, autoincrement=True)
    label: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    mapping_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_MAPPING_TYPE.value
    )
    when_created: Mapped[datetime] = mapped_column(nullable=False, default=utc_now, index=True)

    def natural_key(self):
        return getattr(self, self.__natural_key__) if self.__natural_key__ else None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        key = self.natural_key()
        return key is not None and key == other.natural_key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.natural_key()))
