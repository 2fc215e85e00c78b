"""initial schema: tenancy, field mappings, events, webhooks and unified objects

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-10-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _unified_columns():
    return [
        sa.Column('remote_id', sa.String(), nullable=False),
        sa.Column('connection_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('identification_strategy', sa.String(), nullable=False),
        sa.Column('reset_token', sa.String(length=64), nullable=True),
        sa.Column('reset_token_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reset_token'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sync_mode', sa.String(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_projects_user_id', 'projects', ['user_id'], unique=False)

    op.create_table(
        'api_keys',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('api_key_hash', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('api_key_hash'),
    )
    op.create_index('idx_api_keys_project_id', 'api_keys', ['project_id'], unique=False)

    op.create_table(
        'linked_users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('linked_user_origin_id', sa.String(), nullable=False),
        sa.Column('alias', sa.String(), nullable=True),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'linked_user_origin_id', name='uq_linked_users_project_origin'),
    )
    op.create_index('idx_linked_users_project_id', 'linked_users', ['project_id'], unique=False)

    op.create_table(
        'connections',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('provider_slug', sa.String(), nullable=False),
        sa.Column('vertical', sa.String(), nullable=False),
        sa.Column('token_type', sa.String(length=20), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('account_url', sa.String(), nullable=True),
        sa.Column('expiration_timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('connection_token', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('linked_user_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['linked_user_id'], ['linked_users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('linked_user_id', 'provider_slug', 'vertical', name='uq_connections_linked_user_provider'),
    )
    op.create_index('ix_connections_connection_token', 'connections', ['connection_token'], unique=True)

    op.create_table(
        'attributes',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('resource_owner_type', sa.String(), nullable=False),
        sa.Column('data_type', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('remote_id', sa.String(), nullable=True),
        sa.Column('source', sa.String(), nullable=True),
        sa.Column('linked_user_id', sa.UUID(), nullable=True),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status in ('defined','mapped')", name='ck_attributes_status'),
        sa.ForeignKeyConstraint(['linked_user_id'], ['linked_users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_attributes_lookup', 'attributes', ['source', 'linked_user_id', 'resource_owner_type'], unique=False)

    op.create_table(
        'entities',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('resource_owner_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('resource_owner_id'),
    )

    op.create_table(
        'values',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('attribute_id', sa.UUID(), nullable=False),
        sa.Column('entity_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['attribute_id'], ['attributes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['entity_id'], ['entities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entity_id', 'attribute_id', name='uq_values_entity_attribute'),
    )

    op.create_table(
        'remote_data',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('resource_owner_id', sa.UUID(), nullable=False),
        sa.Column('format', sa.String(length=10), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('resource_owner_id'),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('provider', sa.String(), nullable=True),
        sa.Column('direction', sa.String(length=1), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('linked_user_id', sa.UUID(), nullable=True),
        sa.Column('project_id', sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(['linked_user_id'], ['linked_users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_project_id_timestamp', 'events', ['project_id', 'timestamp'], unique=False)
    op.create_index('ix_events_type', 'events', ['type'], unique=False)

    op.create_table(
        'webhook_endpoints',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('secret', sa.String(length=128), nullable=False),
        sa.Column('scope', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_update', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_webhook_endpoints_project_id', 'webhook_endpoints', ['project_id'], unique=False)

    op.create_table(
        'webhook_deliveries',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('endpoint_id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=True),
        sa.Column('event_type', sa.String(), nullable=False),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('attempt_count', sa.Integer(), nullable=False),
        sa.Column('http_status', sa.Integer(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('next_retry_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['endpoint_id'], ['webhook_endpoints.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_webhook_deliveries_status_next_retry', 'webhook_deliveries', ['status', 'next_retry_at'], unique=False)

    # Unified objects
    op.create_table(
        'ats_interviews',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=True),
        sa.Column('application_id', sa.String(), nullable=True),
        sa.Column('job_interview_stage_id', sa.String(), nullable=True),
        sa.Column('organized_by', sa.String(), nullable=True),
        sa.Column('interviewers', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_updated_at', sa.DateTime(timezone=True), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_ats_interviews_remote'),
    )
    op.create_index('ix_ats_interviews_connection_created', 'ats_interviews', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'ats_scorecards',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('overall_recommendation', sa.String(length=30), nullable=True),
        sa.Column('application_id', sa.String(), nullable=True),
        sa.Column('interview_id', sa.UUID(), nullable=True),
        sa.Column('remote_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_ats_scorecards_remote'),
    )
    op.create_index('ix_ats_scorecards_connection_created', 'ats_scorecards', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'ats_candidate_attachments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('file_name', sa.String(), nullable=True),
        sa.Column('file_type', sa.String(length=50), nullable=True),
        sa.Column('candidate_id', sa.String(), nullable=True),
        sa.Column('remote_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_was_deleted', sa.Boolean(), nullable=False),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_ats_attachments_remote'),
    )
    op.create_index('ix_ats_attachments_connection_created', 'ats_candidate_attachments', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'tcg_tickets',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('type', sa.String(length=30), nullable=True),
        sa.Column('parent_ticket', sa.UUID(), nullable=True),
        sa.Column('collections', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=True),
        sa.Column('assigned_to', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_tickets_remote'),
    )
    op.create_index('ix_tcg_tickets_connection_created', 'tcg_tickets', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'tcg_comments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('html_body', sa.Text(), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=True),
        sa.Column('creator_type', sa.String(length=20), nullable=True),
        sa.Column('ticket_id', sa.UUID(), nullable=True),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('contact_id', sa.UUID(), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ticket_id'], ['tcg_tickets.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_comments_remote'),
    )
    op.create_index('ix_tcg_comments_connection_created', 'tcg_comments', ['connection_id', 'created_at'], unique=False)
    op.create_index('ix_tcg_comments_ticket_id', 'tcg_comments', ['ticket_id'], unique=False)

    op.create_table(
        'tcg_users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email_address', sa.String(), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_users_remote'),
    )

    op.create_table(
        'tcg_collections',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('collection_type', sa.String(length=20), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_collections_remote'),
    )

    op.create_table(
        'tcg_tags',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('ticket_id', sa.UUID(), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ticket_id'], ['tcg_tickets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_tcg_tags_remote'),
    )

    op.create_table(
        'fs_folders',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('size', sa.BigInteger(), nullable=True),
        sa.Column('folder_url', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('drive_id', sa.String(), nullable=True),
        sa.Column('parent_folder_id', sa.UUID(), nullable=True),
        sa.Column('shared_link', sa.Text(), nullable=True),
        sa.Column('permission', sa.String(), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_fs_folders_remote'),
    )
    op.create_index('ix_fs_folders_connection_created', 'fs_folders', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'fs_groups',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('users', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('remote_was_deleted', sa.Boolean(), nullable=False),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_fs_groups_remote'),
    )
    op.create_index('ix_fs_groups_connection_created', 'fs_groups', ['connection_id', 'created_at'], unique=False)

    op.create_table(
        'ma_actions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=True),
        *_unified_columns(),
        sa.ForeignKeyConstraint(['connection_id'], ['connections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('connection_id', 'remote_id', name='uq_ma_actions_remote'),
    )
    op.create_index('ix_ma_actions_connection_created', 'ma_actions', ['connection_id', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_ma_actions_connection_created', table_name='ma_actions')
    op.drop_table('ma_actions')
    op.drop_index('ix_fs_groups_connection_created', table_name='fs_groups')
    op.drop_table('fs_groups')
    op.drop_index('ix_fs_folders_connection_created', table_name='fs_folders')
    op.drop_table('fs_folders')
    op.drop_table('tcg_tags')
    op.drop_table('tcg_collections')
    op.drop_table('tcg_users')
    op.drop_index('ix_tcg_comments_ticket_id', table_name='tcg_comments')
    op.drop_index('ix_tcg_comments_connection_created', table_name='tcg_comments')
    op.drop_table('tcg_comments')
    op.drop_index('ix_tcg_tickets_connection_created', table_name='tcg_tickets')
    op.drop_table('tcg_tickets')
    op.drop_index('ix_ats_attachments_connection_created', table_name='ats_candidate_attachments')
    op.drop_table('ats_candidate_attachments')
    op.drop_index('ix_ats_scorecards_connection_created', table_name='ats_scorecards')
    op.drop_table('ats_scorecards')
    op.drop_index('ix_ats_interviews_connection_created', table_name='ats_interviews')
    op.drop_table('ats_interviews')
    op.drop_index('ix_webhook_deliveries_status_next_retry', table_name='webhook_deliveries')
    op.drop_table('webhook_deliveries')
    op.drop_index('idx_webhook_endpoints_project_id', table_name='webhook_endpoints')
    op.drop_table('webhook_endpoints')
    op.drop_index('ix_events_type', table_name='events')
    op.drop_index('ix_events_project_id_timestamp', table_name='events')
    op.drop_table('events')
    op.drop_table('remote_data')
    op.drop_table('values')
    op.drop_table('entities')
    op.drop_index('idx_attributes_lookup', table_name='attributes')
    op.drop_table('attributes')
    op.drop_index('ix_connections_connection_token', table_name='connections')
    op.drop_table('connections')
    op.drop_index('idx_linked_users_project_id', table_name='linked_users')
    op.drop_table('linked_users')
    op.drop_index('idx_api_keys_project_id', table_name='api_keys')
    op.drop_table('api_keys')
    op.drop_index('idx_projects_user_id', table_name='projects')
    op.drop_table('projects')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
