"""Court case aggregate: cases, appearances, charges, sentences and terms."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mapping_service.db.base import Base
from mapping_service.db.models.common import MappingColumnsMixin


class CourtCaseMapping(MappingColumnsMixin, Base):
    """Root of the court sentencing aggregate."""

    __tablename__ = "court_case_mappings"
    __natural_key__ = "dps_court_case_id"

    dps_court_case_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_court_case_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)


class CourtAppearanceMapping(MappingColumnsMixin, Base):
    __tablename__ = "court_appearance_mappings"
    __natural_key__ = "dps_court_appearance_id"
    __table_args__ = (
        Index("idx_court_appearance_mappings_case", "dps_court_case_id"),
    )

    dps_court_appearance_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_court_appearance_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    dps_court_case_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class CourtChargeMapping(MappingColumnsMixin, Base):
    __tablename__ = "court_charge_mappings"
    __natural_key__ = "dps_court_charge_id"
    __table_args__ = (
        Index("idx_court_charge_mappings_case", "dps_court_case_id"),
    )

    dps_court_charge_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_court_charge_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    dps_court_case_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class SentenceMapping(MappingColumnsMixin, Base):
    """Sentences are keyed in NOMIS by booking and sentence sequence."""

    __tablename__ = "sentence_mappings"
    __natural_key__ = "dps_sentence_id"
    __table_args__ = (
        UniqueConstraint(
            "nomis_booking_id", "nomis_sentence_sequence", name="uq_sentence_mapping_nomis"
        ),
        Index("idx_sentence_mappings_case", "dps_court_case_id"),
    )

    dps_sentence_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_booking_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    nomis_sentence_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    dps_court_case_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class SentenceTermMapping(MappingColumnsMixin, Base):
    __tablename__ = "sentence_term_mappings"
    __natural_key__ = "dps_term_id"
    __table_args__ = (
        UniqueConstraint(
            "nomis_booking_id",
            "nomis_sentence_sequence",
            "nomis_term_sequence",
            name="uq_sentence_term_mapping_nomis",
        ),
        Index("idx_sentence_term_mappings_case", "dps_court_case_id"),
    )

    dps_term_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nomis_booking_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    nomis_sentence_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    nomis_term_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    dps_court_case_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
