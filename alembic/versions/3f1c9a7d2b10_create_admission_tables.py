"""create_admission_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - Add member, record and term tables."""

    op.create_table(
        'members',
        sa.Column('identifier', sa.String(length=10), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('identifier')
    )

    op.create_table(
        'waivers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_identifier', sa.String(length=10), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=False),
        sa.Column('signed_on', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_waivers_member_identifier', 'waivers', ['member_identifier'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_identifier', sa.String(length=10), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('paid_on', sa.DateTime(timezone=True), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_member_identifier', 'payments', ['member_identifier'])

    # At most one warning per member; guards concurrent first unpaid visits
    op.create_table(
        'warnings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_identifier', sa.String(length=10), nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_identifier', name='uq_warning_member')
    )
    op.create_index('ix_warnings_member_identifier', 'warnings', ['member_identifier'])

    op.create_table(
        'sign_ins',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_identifier', sa.String(length=10), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('admitted', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sign_ins_member_identifier', 'sign_ins', ['member_identifier'])
    op.create_index('ix_sign_ins_timestamp', 'sign_ins', ['timestamp'])

    op.create_table(
        'waiver_terms',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'payment_terms',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )


def downgrade() -> None:
    """Downgrade schema - Drop admission tables."""
    op.drop_table('payment_terms')
    op.drop_table('waiver_terms')
    op.drop_index('ix_sign_ins_timestamp', table_name='sign_ins')
    op.drop_index('ix_sign_ins_member_identifier', table_name='sign_ins')
    op.drop_table('sign_ins')
    op.drop_index('ix_warnings_member_identifier', table_name='warnings')
    op.drop_table('warnings')
    op.drop_index('ix_payments_member_identifier', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_waivers_member_identifier', table_name='waivers')
    op.drop_table('waivers')
    op.drop_table('members')
