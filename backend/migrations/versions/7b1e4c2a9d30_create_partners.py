"""create partners table

Revision ID: 7b1e4c2a9d30
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7b1e4c2a9d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'partners',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('partner_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum('CPO', 'EMSP', name='partner_type', native_enum=False, length=8), nullable=False),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'INACTIVE', 'SUSPENDED', name='partner_status', native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('credentials_token', sa.String(length=255), nullable=False),
        sa.Column('credentials_url', sa.String(length=2048), nullable=False),
        sa.Column('credentials_version', sa.String(length=16), nullable=False),
        sa.Column('credentials_version_url', sa.String(length=2048), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_partners')),
        sa.UniqueConstraint('partner_id', name='uq_partners_partner_id'),
        sa.UniqueConstraint('token', name='uq_partners_token'),
    )
    op.create_index('ix_partners_status', 'partners', ['status'], unique=False)


def downgrade():
    op.drop_index('ix_partners_status', table_name='partners')
    op.drop_table('partners')
