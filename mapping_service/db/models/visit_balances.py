"""Visit balance adjustment mappings (short-lived, swept by retention)."""

from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.base import Base
from mapping_service.db.models.common import MappingColumnsMixin


class VisitBalanceAdjustmentMapping(MappingColumnsMixin, Base):
    __tablename__ = "visit_balance_adjustment_mappings"
    __natural_key__ = "dps_id"

    dps_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_visit_balance_adjustment_id: Mapped[int] = mapped_column(
        BigInteger, unique=True, nullable=False
    )
