"""Create log_performance and performance_site_settings

Revision ID: 3d9a6f1c2e84
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from perfaudit.config import TABLE_PREFIX


# revision identifiers, used by Alembic.
revision: str = '3d9a6f1c2e84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # log_action belongs to the host and already exists
    op.create_table(f'{TABLE_PREFIX}log_performance',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('idsite', sa.Integer(), nullable=False),
        sa.Column('emulated_device', sa.Integer(), nullable=False),
        sa.Column('idaction', sa.Integer(), nullable=False),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('min', sa.Integer(), nullable=False),
        sa.Column('median', sa.Integer(), nullable=False),
        sa.Column('max', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_log_performance_site_action', f'{TABLE_PREFIX}log_performance',
                    ['idsite', 'idaction'])

    op.create_table(f'{TABLE_PREFIX}performance_site_settings',
        sa.Column('idsite', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('run_count', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('emulated_device', sa.Text(), nullable=False, server_default='both'),
        sa.Column('has_extra_http_header', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('extra_http_header_key', sa.Text(), nullable=True),
        sa.Column('extra_http_header_value', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('idsite'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table(f'{TABLE_PREFIX}performance_site_settings')
    op.drop_index('ix_log_performance_site_action', table_name=f'{TABLE_PREFIX}log_performance')
    op.drop_table(f'{TABLE_PREFIX}log_performance')
