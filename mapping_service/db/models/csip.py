"""CSIP report aggregate: reports with their plans and reviews."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.base import Base
from mapping_service.db.models.common import MappingColumnsMixin


class CSIPReportMapping(MappingColumnsMixin, Base):
    __tablename__ = "csip_report_mappings"
    __natural_key__ = "dps_csip_report_id"
    __table_args__ = (
        Index("idx_csip_report_mappings_offender", "offender_no"),
    )

    dps_csip_report_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_csip_report_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    offender_no: Mapped[str | None] = mapped_column(String(10), nullable=True)


class CSIPPlanMapping(MappingColumnsMixin, Base):
    __tablename__ = "csip_plan_mappings"
    __natural_key__ = "dps_csip_plan_id"
    __table_args__ = (
        Index("idx_csip_plan_mappings_report", "dps_csip_report_id"),
    )

    dps_csip_plan_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_csip_plan_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    dps_csip_report_id: Mapped[str] = mapped_column(String(64), nullable=False)


class CSIPReviewMapping(MappingColumnsMixin, Base):
    __tablename__ = "csip_review_mappings"
    __natural_key__ = "dps_csip_review_id"
    __table_args__ = (
        Index("idx_csip_review_mappings_report", "dps_csip_report_id"),
    )

    dps_csip_review_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_csip_review_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    dps_csip_report_id: Mapped[str] = mapped_column(String(64), nullable=False)
