"""initial viralforge schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('locale', sa.String(5), server_default='tr', nullable=False),
        sa.Column('niche', sa.String(100), nullable=True),
        sa.Column('plan', sa.String(10), server_default='FREE', nullable=False),
        sa.Column('comped_until', sa.Date(), nullable=True),
        sa.Column('is_disabled', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('analysis_credit_balance', sa.Integer(), server_default='0', nullable=False),
        sa.Column('xp_balance', sa.Integer(), server_default='0', nullable=False),
        sa.Column('stripe_customer_id', sa.String(), nullable=True),
        sa.Column('subscription_status', sa.String(30), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('analysis_credit_balance >= 0', name='ck_profiles_analysis_credit_non_negative'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'])
    op.create_index('ix_profiles_stripe_customer_id', 'profiles', ['stripe_customer_id'], unique=True)

    op.create_table(
        'usage_daily',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('feature', sa.String(40), nullable=False),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'usage_date', 'feature', name='uq_usage_daily_user_date_feature'),
    )
    op.create_index('ix_usage_daily_user_id', 'usage_daily', ['user_id'])

    op.create_table(
        'ab_tests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('test_type', sa.String(20), nullable=False),
        sa.Column('option_a', sa.Text(), nullable=False),
        sa.Column('option_b', sa.Text(), nullable=False),
        sa.Column('locale', sa.String(5), server_default='tr', nullable=False),
        sa.Column('winner', sa.String(1), nullable=True),
        sa.Column('confidence', sa.Integer(), nullable=True),
        sa.Column('result', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_ab_tests_user_id', 'ab_tests', ['user_id'])

    op.create_table(
        'video_analyses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('platform', sa.String(20), server_default='tiktok', nullable=False),
        sa.Column('category_slug', sa.String(100), nullable=True),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('engagement_score', sa.Integer(), nullable=True),
        sa.Column('result', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('used_credit', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_video_analyses_user_id', 'video_analyses', ['user_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=True),
        sa.Column('entity_id', sa.String(100), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('locale', sa.String(5), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])

    op.create_table(
        'daily_suggestions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('suggestion_date', sa.Date(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('hook', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('locale', sa.String(5), server_default='tr', nullable=False),
        sa.Column('is_used', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('generation_id', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_daily_suggestions_user_id', 'daily_suggestions', ['user_id'])
    op.create_index('ix_daily_suggestions_suggestion_date', 'daily_suggestions', ['suggestion_date'])

    op.create_table(
        'weekly_insights',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('highlights', sa.JSON(), nullable=True),
        sa.Column('recommendations', sa.JSON(), nullable=True),
        sa.Column('activity_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('stats', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_weekly_insights_user_id', 'weekly_insights', ['user_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('group', sa.String(20), nullable=False),
        sa.Column('name_tr', sa.String(100), nullable=False),
        sa.Column('name_en', sa.String(100), nullable=False),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)
    op.create_index('ix_categories_group', 'categories', ['group'])

    op.create_table(
        'processed_webhook_events',
        sa.Column('event_id', sa.String(255), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    # Index for cleanup queries (delete events older than X days)
    op.create_index(
        'ix_processed_webhook_events_processed_at',
        'processed_webhook_events',
        ['processed_at'],
    )


def downgrade() -> None:
    op.drop_table('processed_webhook_events')
    op.drop_table('categories')
    op.drop_table('weekly_insights')
    op.drop_table('daily_suggestions')
    op.drop_table('activity_logs')
    op.drop_table('video_analyses')
    op.drop_table('ab_tests')
    op.drop_table('usage_daily')
    op.drop_table('profiles')
