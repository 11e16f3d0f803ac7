"""Create assessment trigger, report and audit tables

Revision ID: 4e1a9c2d7b30
Revises:
Create Date: 2025-03-04 09:12:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4e1a9c2d7b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'CompanyAssessmentTrigger',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='queued'),
        sa.Column('investor_name', sa.String(), nullable=True),
        sa.Column('investor_site', sa.String(), nullable=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('company_url', sa.String(), nullable=True),
        sa.Column('context', sa.Text(), nullable=True),
        sa.Column('supplemental_links', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_CompanyAssessmentTrigger_status'), 'CompanyAssessmentTrigger', ['status'], unique=False)

    op.create_table(
        'CompanyAssessments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('investor_name', sa.String(), nullable=True),
        sa.Column('investor_site', sa.String(), nullable=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('company_url', sa.String(), nullable=True),
        sa.Column('context', sa.Text(), nullable=True),
        sa.Column('report_json', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'AuditLogs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('source_url', sa.String(), nullable=True),
        sa.Column('confidence_score', sa.Integer(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('AuditLogs')
    op.drop_table('CompanyAssessments')
    op.drop_index(op.f('ix_CompanyAssessmentTrigger_status'), table_name='CompanyAssessmentTrigger')
    op.drop_table('CompanyAssessmentTrigger')
