"""Create messages table

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the messages table and its lookup indexes."""
    op.create_table('messages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('target', sa.String(length=320), nullable=False),
        sa.Column('sender', sa.String(length=320), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('publication_timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('urgent', sa.Boolean(), nullable=False),
        sa.Column('extra_attributes', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_messages_target'), 'messages', ['target'])
    op.create_index(op.f('ix_messages_sender'), 'messages', ['sender'])
    op.create_index(op.f('ix_messages_urgent'), 'messages', ['urgent'])
    op.create_index('idx_message_publication_order', 'messages', ['publication_timestamp', 'id'])


def downgrade() -> None:
    """Drop the messages table."""
    op.drop_index('idx_message_publication_order', table_name='messages')
    op.drop_index(op.f('ix_messages_urgent'), table_name='messages')
    op.drop_index(op.f('ix_messages_sender'), table_name='messages')
    op.drop_index(op.f('ix_messages_target'), table_name='messages')
    op.drop_table('messages')
