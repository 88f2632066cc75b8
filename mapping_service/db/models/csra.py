"""CSRA (cell sharing risk assessment) mappings."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.base import Base
from mapping_service.db.models.common import MappingColumnsMixin


class CsraMapping(MappingColumnsMixin, Base):
    """
    Keyed in NOMIS by booking and sequence.

    ``offender_no`` is denormalized from the booking so prisoner merges and
    booking moves can be applied without calling NOMIS.
    """

    __tablename__ = "csra_mappings"
    __natural_key__ = "dps_csra_id"
    __table_args__ = (
        UniqueConstraint("nomis_booking_id", "nomis_sequence", name="uq_csra_mapping_nomis"),
        Index("idx_csra_mappings_offender", "offender_no"),
    )

    dps_csra_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_booking_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    nomis_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    offender_no: Mapped[str] = mapped_column(String(10), nullable=False)
