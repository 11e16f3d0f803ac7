"""add_trigger_claim_fields

Adds the claim/lease columns used by the guarded queued -> processing
transition, and links each report to its trigger.

Revision ID: 8b2f6d0e5a41
Revises: 4e1a9c2d7b30
Create Date: 2025-03-18 14:40:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2f6d0e5a41'
down_revision: Union[str, Sequence[str], None] = '4e1a9c2d7b30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        'CompanyAssessmentTrigger',
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0')
    )
    op.add_column(
        'CompanyAssessmentTrigger',
        sa.Column('claimed_at', sa.DateTime(), nullable=True)
    )
    op.add_column(
        'CompanyAssessmentTrigger',
        sa.Column('last_error', sa.String(), nullable=True)
    )
    op.add_column(
        'CompanyAssessmentTrigger',
        sa.Column('completed_at', sa.DateTime(), nullable=True)
    )
    op.add_column(
        'CompanyAssessments',
        sa.Column('trigger_id', sa.Integer(), nullable=True)
    )
    op.create_foreign_key(
        'fk_CompanyAssessments_trigger_id',
        'CompanyAssessments', 'CompanyAssessmentTrigger',
        ['trigger_id'], ['id'],
    )
    op.create_unique_constraint(
        'uq_CompanyAssessments_trigger_id', 'CompanyAssessments', ['trigger_id']
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('uq_CompanyAssessments_trigger_id', 'CompanyAssessments', type_='unique')
    op.drop_constraint('fk_CompanyAssessments_trigger_id', 'CompanyAssessments', type_='foreignkey')
    op.drop_column('CompanyAssessments', 'trigger_id')
    op.drop_column('CompanyAssessmentTrigger', 'completed_at')
    op.drop_column('CompanyAssessmentTrigger', 'last_error')
    op.drop_column('CompanyAssessmentTrigger', 'claimed_at')
    op.drop_column('CompanyAssessmentTrigger', 'attempts')
