"""Mapping tables - one crosswalk table per entity kind

Revision ID: 0001_mapping_tables
Revises:
Create Date: 2026-10-19

Creates:
- court sentencing: court cases, appearances, charges, sentences, sentence terms
- csip: reports, plans, reviews
- csra, activity migration and visit balance adjustment mappings
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_mapping_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


TABLES = [
    'court_case_mappings',
    'court_appearance_mappings',
    'court_charge_mappings',
    'sentence_mappings',
    'sentence_term_mappings',
    'csip_report_mappings',
    'csip_plan_mappings',
    'csip_review_mappings',
    'csra_mappings',
    'activity_migration_mappings',
    'visit_balance_adjustment_mappings',
]


def _shared_columns() -> list:
    """Surrogate key, label, provenance and creation time."""
    return [
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
        sa.Column('label', sa.String(20), nullable=True),
        sa.Column('mapping_type', sa.String(20), server_default=sa.text("'DPS_CREATED'"), nullable=False),
        sa.Column('when_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _create_mapping_table(name: str, *columns_and_constraints) -> None:
    op.create_table(
        name,
        *_shared_columns(),
        *columns_and_constraints,
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(f'ix_{name}_label', name, ['label'])
    op.create_index(f'ix_{name}_when_created', name, ['when_created'])


def upgrade() -> None:
    # ==========================================================================
    # Court sentencing
    # ==========================================================================
    _create_mapping_table(
        'court_case_mappings',
        sa.Column('dps_court_case_id', sa.String(64), nullable=False),
        sa.Column('nomis_court_case_id', sa.BigInteger(), nullable=False),
        sa.UniqueConstraint('dps_court_case_id', name='uq_court_case_mapping_dps'),
        sa.UniqueConstraint('nomis_court_case_id', name='uq_court_case_mapping_nomis'),
    )

    _create_mapping_table(
        'court_appearance_mappings',
        sa.Column('dps_court_appearance_id', sa.String(64), nullable=False),
        sa.Column('nomis_court_appearance_id', sa.BigInteger(), nullable=False),
        sa.Column('dps_court_case_id', sa.String(64), nullable=True),
        sa.UniqueConstraint('dps_court_appearance_id', name='uq_court_appearance_mapping_dps'),
        sa.UniqueConstraint('nomis_court_appearance_id', name='uq_court_appearance_mapping_nomis'),
    )
    op.create_index('idx_court_appearance_mappings_case', 'court_appearance_mappings', ['dps_court_case_id'])

    _create_mapping_table(
        'court_charge_mappings',
        sa.Column('dps_court_charge_id', sa.String(64), nullable=False),
        sa.Column('nomis_court_charge_id', sa.BigInteger(), nullable=False),
        sa.Column('dps_court_case_id', sa.String(64), nullable=True),
        sa.UniqueConstraint('dps_court_charge_id', name='uq_court_charge_mapping_dps'),
        sa.UniqueConstraint('nomis_court_charge_id', name='uq_court_charge_mapping_nomis'),
    )
    op.create_index('idx_court_charge_mappings_case', 'court_charge_mappings', ['dps_court_case_id'])

    _create_mapping_table(
        'sentence_mappings',
        sa.Column('dps_sentence_id', sa.String(64), nullable=False),
        sa.Column('nomis_booking_id', sa.BigInteger(), nullable=False),
        sa.Column('nomis_sentence_sequence', sa.Integer(), nullable=False),
        sa.Column('dps_court_case_id', sa.String(64), nullable=True),
        sa.UniqueConstraint('dps_sentence_id', name='uq_sentence_mapping_dps'),
        sa.UniqueConstraint('nomis_booking_id', 'nomis_sentence_sequence', name='uq_sentence_mapping_nomis'),
    )
    op.create_index('idx_sentence_mappings_case', 'sentence_mappings', ['dps_court_case_id'])

    _create_mapping_table(
        'sentence_term_mappings',
        sa.Column('dps_term_id', sa.String(64), nullable=False),
        sa.Column('nomis_booking_id', sa.BigInteger(), nullable=False),
        sa.Column('nomis_sentence_sequence', sa.Integer(), nullable=False),
        sa.Column('nomis_term_sequence', sa.Integer(), nullable=False),
        sa.Column('dps_court_case_id', sa.String(64), nullable=True),
        sa.UniqueConstraint('dps_term_id', name='uq_sentence_term_mapping_dps'),
        sa.UniqueConstraint(
            'nomis_booking_id',
            'nomis_sentence_sequence',
            'nomis_term_sequence',
            name='uq_sentence_term_mapping_nomis',
        ),
    )
    op.create_index('idx_sentence_term_mappings_case', 'sentence_term_mappings', ['dps_court_case_id'])

    # ==========================================================================
    # CSIP
    # ==========================================================================
    _create_mapping_table(
        'csip_report_mappings',
        sa.Column('dps_csip_report_id', sa.String(64), nullable=False),
        sa.Column('nomis_csip_report_id', sa.BigInteger(), nullable=False),
        sa.Column('offender_no', sa.String(10), nullable=True),
        sa.UniqueConstraint('dps_csip_report_id', name='uq_csip_report_mapping_dps'),
        sa.UniqueConstraint('nomis_csip_report_id', name='uq_csip_report_mapping_nomis'),
    )
    op.create_index('idx_csip_report_mappings_offender', 'csip_report_mappings', ['offender_no'])

    _create_mapping_table(
        'csip_plan_mappings',
        sa.Column('dps_csip_plan_id', sa.String(64), nullable=False),
        sa.Column('nomis_csip_plan_id', sa.BigInteger(), nullable=False),
        sa.Column('dps_csip_report_id', sa.String(64), nullable=False),
        sa.UniqueConstraint('dps_csip_plan_id', name='uq_csip_plan_mapping_dps'),
        sa.UniqueConstraint('nomis_csip_plan_id', name='uq_csip_plan_mapping_nomis'),
    )
    op.create_index('idx_csip_plan_mappings_report', 'csip_plan_mappings', ['dps_csip_report_id'])

    _create_mapping_table(
        'csip_review_mappings',
        sa.Column('dps_csip_review_id', sa.String(64), nullable=False),
        sa.Column('nomis_csip_review_id', sa.BigInteger(), nullable=False),
        sa.Column('dps_csip_report_id', sa.String(64), nullable=False),
        sa.UniqueConstraint('dps_csip_review_id', name='uq_csip_review_mapping_dps'),
        sa.UniqueConstraint('nomis_csip_review_id', name='uq_csip_review_mapping_nomis'),
    )
    op.create_index('idx_csip_review_mappings_report', 'csip_review_mappings', ['dps_csip_report_id'])

    # ==========================================================================
    # CSRA, activities, visit balance adjustments
    # ==========================================================================
    _create_mapping_table(
        'csra_mappings',
        sa.Column('dps_csra_id', sa.String(64), nullable=False),
        sa.Column('nomis_booking_id', sa.BigInteger(), nullable=False),
        sa.Column('nomis_sequence', sa.Integer(), nullable=False),
        sa.Column('offender_no', sa.String(10), nullable=False),
        sa.UniqueConstraint('dps_csra_id', name='uq_csra_mapping_dps'),
        sa.UniqueConstraint('nomis_booking_id', 'nomis_sequence', name='uq_csra_mapping_nomis'),
    )
    op.create_index('idx_csra_mappings_offender', 'csra_mappings', ['offender_no'])

    _create_mapping_table(
        'activity_migration_mappings',
        sa.Column('nomis_course_activity_id', sa.BigInteger(), nullable=False),
        sa.Column('activity_id', sa.BigInteger(), nullable=True),
        sa.Column('activity_id2', sa.BigInteger(), nullable=True),
        sa.UniqueConstraint('nomis_course_activity_id', name='uq_activity_mapping_nomis'),
        sa.UniqueConstraint('activity_id', name='uq_activity_mapping_dps'),
    )

    _create_mapping_table(
        'visit_balance_adjustment_mappings',
        sa.Column('dps_id', sa.String(64), nullable=False),
        sa.Column('nomis_visit_balance_adjustment_id', sa.BigInteger(), nullable=False),
        sa.UniqueConstraint('dps_id', name='uq_visit_balance_adjustment_mapping_dps'),
        sa.UniqueConstraint(
            'nomis_visit_balance_adjustment_id', name='uq_visit_balance_adjustment_mapping_nomis'
        ),
    )


def downgrade() -> None:
    for name in reversed(TABLES):
        op.drop_table(name)
