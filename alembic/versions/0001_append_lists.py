"""Baseline migration - append lists, members, notifications

Revision ID: 0001_append_lists
Revises:
Create Date: 2026-10-19

Members of all three list types live in one append_list_people table,
discriminated by the partition column.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_append_lists'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create list, member, and notification tables."""

    # ==========================================================================
    # Append lists
    # ==========================================================================
    op.create_table(
        'append_lists',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('list_type', sa.String(20), nullable=True),
        sa.Column('owner_id', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_append_lists'),
    )
    op.create_index(
        'idx_append_lists_owner_created', 'append_lists', ['owner_id', 'created_at']
    )

    # ==========================================================================
    # Members (plain / github / others partitions)
    # ==========================================================================
    op.create_table(
        'append_list_people',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('list_id', sa.Uuid(), nullable=False),
        sa.Column('partition', sa.String(20), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('email_key', sa.String(320), nullable=True),
        sa.Column('register_number', sa.String(20), nullable=True),
        sa.Column('github_username', sa.String(100), nullable=True),
        sa.Column('inputs', sa.JSON(), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_append_list_people'),
        sa.ForeignKeyConstraint(
            ['list_id'], ['append_lists.id'],
            name='fk_append_list_people_list_id_append_lists',
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint('list_id', 'email_key', name='uq_append_list_people_email'),
        sa.UniqueConstraint('list_id', 'display_name', name='uq_append_list_people_name'),
    )
    op.create_index(
        'idx_append_list_people_joined', 'append_list_people', ['list_id', 'joined_at']
    )

    # ==========================================================================
    # Notifications
    # ==========================================================================
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_by_email', sa.String(320), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
    )
    op.create_index('idx_notifications_created', 'notifications', ['created_at'])

    op.create_table(
        'notification_acks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('notification_id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.String(255), nullable=False),
        sa.Column('acknowledged_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_notification_acks'),
        sa.ForeignKeyConstraint(
            ['notification_id'], ['notifications.id'],
            name='fk_notification_acks_notification_id_notifications',
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint(
            'viewer_id', 'notification_id', name='uq_notification_acks_viewer'
        ),
    )

    op.create_table(
        'push_subscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.String(255), nullable=False),
        sa.Column('endpoint', sa.Text(), nullable=False),
        sa.Column('p256dh', sa.Text(), nullable=False),
        sa.Column('auth', sa.Text(), nullable=False),
        sa.Column('expiration_time', sa.BigInteger(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_push_subscriptions'),
        sa.UniqueConstraint('endpoint', name='uq_push_subscriptions_endpoint'),
    )
    op.create_index('idx_push_subscriptions_viewer', 'push_subscriptions', ['viewer_id'])


def downgrade() -> None:
    op.drop_table('push_subscriptions')
    op.drop_table('notification_acks')
    op.drop_table('notifications')
    op.drop_table('append_list_people')
    op.drop_table('append_lists')
