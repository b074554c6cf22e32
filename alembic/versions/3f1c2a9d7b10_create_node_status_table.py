"""create node_status table

Revision ID: 3f1c2a9d7b10
Revises: 
Create Date: 2026-10-19 09:12:41.208114+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'node_status',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('node_name', sa.String(length=100), nullable=False, comment='Network node (site) that reported the reading'),
        sa.Column('base_station_name', sa.String(length=100), nullable=True, comment='Base station the reading belongs to, when reported'),
        sa.Column('time', sa.DateTime(timezone=True), nullable=False, comment='Time the sample was taken'),
        sa.Column('status_comments', sa.String(length=500), nullable=True, comment='Free-text status reported by the site'),
        sa.Column('forward_power', sa.Float(), nullable=True, comment='Forward power in W'),
        sa.Column('reflected_power', sa.Float(), nullable=True, comment='Reflected power in W'),
        sa.Column('temperature', sa.Float(), nullable=True, comment='Equipment temperature in °C'),
        sa.Column('voltage', sa.Float(), nullable=True, comment='Supply voltage in V (Analog1)'),
        sa.Column('current', sa.Float(), nullable=True, comment='Supply current in A (Analog2)'),
        sa.Column('power', sa.Float(), nullable=True, comment='Consumed power in W (Analog3)'),
        sa.Column('digital1_value', sa.Boolean(), nullable=True),
        sa.Column('digital1_alarm', sa.Boolean(), nullable=True),
        sa.Column('digital2_value', sa.Boolean(), nullable=True),
        sa.Column('digital2_alarm', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_node_status_id'), 'node_status', ['id'], unique=False)
    op.create_index(op.f('ix_node_status_node_name'), 'node_status', ['node_name'], unique=False)
    op.create_index(op.f('ix_node_status_base_station_name'), 'node_status', ['base_station_name'], unique=False)
    op.create_index(op.f('ix_node_status_time'), 'node_status', ['time'], unique=False)
    op.create_index('idx_node_status_node_station_time', 'node_status', ['node_name', 'base_station_name', 'time'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_node_status_node_station_time', table_name='node_status')
    op.drop_index(op.f('ix_node_status_time'), table_name='node_status')
    op.drop_index(op.f('ix_node_status_base_station_name'), table_name='node_status')
    op.drop_index(op.f('ix_node_status_node_name'), table_name='node_status')
    op.drop_index(op.f('ix_node_status_id'), table_name='node_status')
    op.drop_table('node_status')
