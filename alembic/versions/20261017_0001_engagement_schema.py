"""Engagement and gamification schema

Revision ID: 0001
Revises: 
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Learners: one row per student, counters only
    op.create_table(
        'learners',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_login_xp_date', sa.Date(), nullable=True),
        sa.Column('login_streak_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('login_streak_longest', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('login_streak_last_date', sa.Date(), nullable=True),
        sa.Column('lesson_streak_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lesson_streak_longest', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lesson_streak_last_date', sa.Date(), nullable=True),
        sa.Column('daily_lessons_target', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('daily_lessons_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('daily_logins_target', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('daily_logins_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('daily_goal_reset_date', sa.Date(), nullable=True),
        sa.Column('engagement_total_seconds', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('engagement_sessions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('engagement_visual_seconds', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('engagement_verbal_seconds', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('engagement_audio_seconds', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('last_active_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Engagement logs (append-only)
    op.create_table(
        'engagement_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resource_id', sa.String(255), nullable=False),
        sa.Column('resource_type', sa.String(50), nullable=False, server_default='Visual'),
        sa.Column('seconds', sa.Integer(), nullable=False),
        sa.Column('channel', sa.String(20), nullable=False, server_default='sync'),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_engagement_logs_learner_timestamp', 'engagement_logs', ['learner_id', 'timestamp'])
    op.create_index('ix_engagement_logs_resource', 'engagement_logs', ['resource_id'])

    # Badge definitions
    op.create_table(
        'badge_definitions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('badge_id', sa.String(100), unique=True, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('icon', sa.String(100), nullable=False, server_default='fas fa-medal'),
        sa.Column('criteria', sa.JSON(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Awarded badges: at most one per (learner, badge)
    op.create_table(
        'awarded_badges',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('badge_id', sa.String(100), nullable=False),
        sa.Column('awarded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=False),
        sa.UniqueConstraint('learner_id', 'badge_id', name='uq_awarded_badges_learner_badge'),
    )

    # Material interactions
    op.create_table(
        'material_interactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('material_id', sa.String(255), nullable=False),
        sa.Column('course_id', sa.String(255), nullable=True),
        sa.Column('category', sa.String(50), nullable=False, server_default='Video'),
        sa.Column('format', sa.String(50), nullable=False, server_default='Visual'),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_viewed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_viewed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('learner_id', 'material_id', name='uq_material_interactions_learner_material'),
    )
    op.create_index(
        'ix_material_interactions_learner_completed',
        'material_interactions',
        ['learner_id', 'completed'],
    )


def downgrade() -> None:
    op.drop_index('ix_material_interactions_learner_completed', table_name='material_interactions')
    op.drop_table('material_interactions')
    op.drop_table('awarded_badges')
    op.drop_table('badge_definitions')
    op.drop_index('ix_engagement_logs_resource', table_name='engagement_logs')
    op.drop_index('ix_engagement_logs_learner_timestamp', table_name='engagement_logs')
    op.drop_table('engagement_logs')
    op.drop_table('learners')
