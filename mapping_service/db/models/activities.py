"""Activity migration mappings."""

from __future__ import annotations

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.base import Base
from mapping_service.db.models.common import MappingColumnsMixin


class ActivityMigrationMapping(MappingColumnsMixin, Base):
    """
    One NOMIS course activity becomes up to two DPS activities.

    Rows whose ``activity_id`` is still null were deliberately skipped by the
    migration and are excluded from run counts unless asked for.
    """

    __tablename__ = "activity_migration_mappings"
    __natural_key__ = "nomis_course_activity_id"

    nomis_course_activity_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    activity_id: Mapped[int | None] = mapped_column(BigInteger, unique=True, nullable=True)
    activity_id2: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
