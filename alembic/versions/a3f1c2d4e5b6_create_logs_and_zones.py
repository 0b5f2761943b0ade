"""create_logs_and_zones

Revision ID: a3f1c2d4e5b6
Revises:
Create Date: 2026-10-18 09:12:44.120331

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a3f1c2d4e5b6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('zones',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('account_id', sa.Text(), nullable=False),
        sa.Column('synced_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('zones_account_id_idx', 'zones', ['account_id'])
    op.create_index('zones_name_idx', 'zones', ['name'])

    op.create_table('logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dataset', sa.String(length=50), nullable=False),
        sa.Column('scope', sa.String(length=10), nullable=False),
        sa.Column('zone_id', sa.Text(), nullable=True),
        sa.Column('account_id', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ray_id', sa.Text(), nullable=True),
        sa.Column('client_ip', sa.Text(), nullable=True),
        sa.Column('data', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('logs_dataset_idx', 'logs', ['dataset'])
    op.create_index('logs_zone_id_idx', 'logs', ['zone_id'])
    op.create_index('logs_account_id_idx', 'logs', ['account_id'])
    op.create_index('logs_timestamp_idx', 'logs', ['timestamp'])
    op.create_index('logs_ray_id_idx', 'logs', ['ray_id'])
    op.create_index('logs_client_ip_idx', 'logs', ['client_ip'])
    op.create_index('logs_dataset_timestamp_idx', 'logs', ['dataset', 'timestamp'])
    op.create_index('logs_dataset_zone_timestamp_idx', 'logs', ['dataset', 'zone_id', 'timestamp'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('zones')
