"""Initial schema: churches, memberships and church-scoped tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

subscription_tier = sa.Enum('FREE', 'BASIC', 'STANDARD', 'PREMIUM', 'ENTERPRISE', name='subscriptiontier')
subscription_status = sa.Enum('TRIAL', 'ACTIVE', 'PAST_DUE', 'CANCELLED', 'EXPIRED', name='subscriptionstatus')
church_role = sa.Enum('OWNER', 'ADMIN', 'PASTOR', 'STAFF', 'VOLUNTEER', 'MEMBER', name='churchrole')
membership_status = sa.Enum('VISITOR', 'REGULAR', 'MEMBER', 'INACTIVE', name='membershipstatus')
event_category = sa.Enum('SERVICE', 'MEETING', 'CLASS', 'YOUTH', 'OUTREACH', 'SOCIAL', 'OTHER', name='eventcategory')
group_category = sa.Enum('SMALL_GROUP', 'MINISTRY', 'CLASS', 'TEAM', 'OTHER', name='groupcategory')
check_in_method = sa.Enum('MANUAL', 'KIOSK', 'MOBILE', name='checkinmethod')
payment_method = sa.Enum('CASH', 'CHECK', 'CARD', 'BANK_TRANSFER', 'ONLINE', 'OTHER', name='paymentmethod')
payment_status = sa.Enum('PENDING', 'COMPLETED', 'FAILED', 'REFUNDED', name='paymentstatus')
prayer_request_status = sa.Enum('ACTIVE', 'ANSWERED', 'ARCHIVED', name='prayerrequeststatus')
communication_channel = sa.Enum('EMAIL', 'SMS', 'PUSH', name='communicationchannel')
communication_status = sa.Enum('DRAFT', 'SCHEDULED', 'SENDING', 'SENT', 'FAILED', name='communicationstatus')
recipient_type = sa.Enum('ALL', 'VOLUNTEERS', 'GROUP', name='recipienttype')

# Tables carrying church_id, in creation order
CHURCH_SCOPED_TABLES = [
    'church_users',
    'members',
    'groups',
    'group_members',
    'events',
    'event_registrations',
    'attendance',
    'check_ins',
    'donation_funds',
    'donations',
    'volunteer_roles',
    'volunteers',
    'communications',
    'web_pages',
    'prayer_requests',
    'push_subscriptions',
    'notifications',
    'activity_logs',
]


def _id():
    return sa.Column('id', sa.Uuid(), primary_key=True)


def _church_id():
    return sa.Column('church_id', sa.Uuid(), sa.ForeignKey('churches.id'), nullable=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    op.create_table(
        'churches',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('postal_code', sa.String(20), nullable=True),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        sa.Column('primary_color', sa.String(20), nullable=True),
        sa.Column('subscription_tier', subscription_tier, nullable=False),
        sa.Column('subscription_status', subscription_status, nullable=False),
        sa.Column('trial_ends_at', sa.DateTime(), nullable=True),
        sa.Column('enabled_modules', sa.JSON(), nullable=True),
        sa.Column('max_members', sa.Integer(), nullable=False),
        sa.Column('max_storage', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_churches_slug', 'churches', ['slug'], unique=True)
    op.create_index('ix_churches_name', 'churches', ['name'])
    op.create_index('ix_churches_subscription_status', 'churches', ['subscription_status'])

    op.create_table(
        'church_users',
        _id(),
        _church_id(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role', church_role, nullable=False),
        *_timestamps(),
    )
    # One church per user
    op.create_index('ix_church_users_user_id', 'church_users', ['user_id'], unique=True)

    op.create_table(
        'members',
        _id(),
        _church_id(),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('photo', sa.String(500), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('membership_status', membership_status, nullable=False),
        sa.Column('joined_at', sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'email', name='uq_members_church_email'),
    )
    op.create_index('ix_members_membership_status', 'members', ['membership_status'])

    op.create_table(
        'groups',
        _id(),
        _church_id(),
        sa.Column('leader_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category', group_category, nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('meeting_day', sa.String(20), nullable=True),
        sa.Column('meeting_time', sa.String(20), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_groups_is_active', 'groups', ['is_active'])

    op.create_table(
        'group_members',
        _id(),
        _church_id(),
        sa.Column('group_id', sa.Uuid(), sa.ForeignKey('groups.id'), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('group_id', 'member_id', name='uq_group_members_group_member'),
    )
    op.create_index('ix_group_members_group_id', 'group_members', ['group_id'])
    op.create_index('ix_group_members_member_id', 'group_members', ['member_id'])

    op.create_table(
        'events',
        _id(),
        _church_id(),
        sa.Column('group_id', sa.Uuid(), sa.ForeignKey('groups.id'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('category', event_category, nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('is_all_day', sa.Boolean(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('publish_to_website', sa.Boolean(), nullable=False),
        sa.Column('enable_check_in', sa.Boolean(), nullable=False),
        sa.Column('check_in_code', sa.String(16), nullable=True),
        sa.Column('is_live_stream', sa.Boolean(), nullable=False),
        sa.Column('stream_url', sa.String(500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('check_in_code', name='uq_events_check_in_code'),
    )
    op.create_index('ix_events_category', 'events', ['category'])
    op.create_index('ix_events_start_date', 'events', ['start_date'])

    op.create_table(
        'event_registrations',
        _id(),
        _church_id(),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('guest_name', sa.String(200), nullable=True),
        sa.Column('guest_email', sa.String(255), nullable=True),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_event_registrations_event_id', 'event_registrations', ['event_id'])
    op.create_index('ix_event_registrations_member_id', 'event_registrations', ['member_id'])

    op.create_table(
        'attendance',
        _id(),
        _church_id(),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id'), nullable=True),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_attendance_member_id', 'attendance', ['member_id'])
    op.create_index('ix_attendance_event_id', 'attendance', ['event_id'])
    op.create_index('ix_attendance_attendance_date', 'attendance', ['attendance_date'])

    op.create_table(
        'check_ins',
        _id(),
        _church_id(),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id'), nullable=True),
        sa.Column('check_in_time', sa.DateTime(), nullable=False),
        sa.Column('check_in_date', sa.Date(), nullable=False),
        sa.Column('check_out_time', sa.DateTime(), nullable=True),
        sa.Column('checked_out_by_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('check_in_method', check_in_method, nullable=False),
        sa.Column('is_child_check_in', sa.Boolean(), nullable=False),
        sa.Column('security_code', sa.String(16), nullable=True),
        sa.Column('parent_name', sa.String(200), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('member_id', 'event_id', 'check_in_date', name='uq_check_ins_member_event_day'),
        sa.UniqueConstraint('church_id', 'check_in_date', 'security_code', name='uq_check_ins_security_code'),
    )
    op.create_index('ix_check_ins_member_id', 'check_ins', ['member_id'])
    op.create_index('ix_check_ins_event_id', 'check_ins', ['event_id'])
    op.create_index('ix_check_ins_check_in_date', 'check_ins', ['check_in_date'])
    op.create_index('ix_check_ins_is_child_check_in', 'check_ins', ['is_child_check_in'])

    op.create_table(
        'donation_funds',
        _id(),
        _church_id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('goal', sa.Numeric(12, 2), nullable=True),
        sa.Column('raised', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_donation_funds_is_active', 'donation_funds', ['is_active'])

    op.create_table(
        'donations',
        _id(),
        _church_id(),
        sa.Column('fund_id', sa.Uuid(), sa.ForeignKey('donation_funds.id'), nullable=False),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('donor_name', sa.String(200), nullable=True),
        sa.Column('donor_email', sa.String(255), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('recurring_frequency', sa.String(20), nullable=True),
        sa.Column('transaction_id', sa.String(255), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('donated_at', sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_donations_fund_id', 'donations', ['fund_id'])
    op.create_index('ix_donations_member_id', 'donations', ['member_id'])
    op.create_index('ix_donations_payment_status', 'donations', ['payment_status'])
    op.create_index('ix_donations_donated_at', 'donations', ['donated_at'])

    op.create_table(
        'volunteer_roles',
        _id(),
        _church_id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('ministry', sa.String(255), nullable=True),
        sa.Column('requires_background_check', sa.Boolean(), nullable=False),
        sa.Column('required_training', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'name', name='uq_volunteer_roles_church_name'),
    )
    op.create_index('ix_volunteer_roles_is_active', 'volunteer_roles', ['is_active'])

    op.create_table(
        'volunteers',
        _id(),
        _church_id(),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('availability', sa.JSON(), nullable=True),
        sa.Column('preferred_roles', sa.JSON(), nullable=False),
        sa.Column('background_check', sa.Boolean(), nullable=False),
        sa.Column('background_check_date', sa.Date(), nullable=True),
        sa.Column('training_completed', sa.JSON(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'member_id', name='uq_volunteers_church_member'),
    )
    op.create_index('ix_volunteers_member_id', 'volunteers', ['member_id'])
    op.create_index('ix_volunteers_is_active', 'volunteers', ['is_active'])

    op.create_table(
        'communications',
        _id(),
        _church_id(),
        sa.Column('group_id', sa.Uuid(), sa.ForeignKey('groups.id'), nullable=True),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('channel', communication_channel, nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('content', sa.String(), nullable=False),
        sa.Column('recipient_type', recipient_type, nullable=False),
        sa.Column('recipient_count', sa.Integer(), nullable=False),
        sa.Column('status', communication_status, nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_communications_channel', 'communications', ['channel'])
    op.create_index('ix_communications_status', 'communications', ['status'])

    op.create_table(
        'web_pages',
        _id(),
        _church_id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('template', sa.String(50), nullable=False),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('meta_title', sa.String(255), nullable=True),
        sa.Column('meta_description', sa.String(500), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('is_home_page', sa.Boolean(), nullable=False),
        sa.Column('show_in_nav', sa.Boolean(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'slug', name='uq_web_pages_church_slug'),
    )
    op.create_index('ix_web_pages_is_published', 'web_pages', ['is_published'])

    op.create_table(
        'prayer_requests',
        _id(),
        _church_id(),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('requester_name', sa.String(200), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('status', prayer_request_status, nullable=False),
        sa.Column('prayer_count', sa.Integer(), nullable=False),
        sa.Column('answered_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_prayer_requests_status', 'prayer_requests', ['status'])

    op.create_table(
        'push_subscriptions',
        _id(),
        _church_id(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('endpoint', sa.String(1000), nullable=False),
        sa.Column('p256dh', sa.String(255), nullable=False),
        sa.Column('auth', sa.String(255), nullable=False),
        sa.Column('user_agent', sa.String(500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'endpoint', name='uq_push_subscriptions_user_endpoint'),
    )
    op.create_index('ix_push_subscriptions_user_id', 'push_subscriptions', ['user_id'])

    op.create_table(
        'notifications',
        _id(),
        _church_id(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])

    op.create_table(
        'activity_logs',
        _id(),
        _church_id(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])
    op.create_index('ix_activity_logs_entity_id', 'activity_logs', ['entity_id'])
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])

    # Every church-scoped table is filtered by church_id on every query
    for table in CHURCH_SCOPED_TABLES:
        op.create_index(f'ix_{table}_church_id', table, ['church_id'])


def downgrade():
    for table in CHURCH_SCOPED_TABLES:
        op.drop_index(f'ix_{table}_church_id', table)

    for table in reversed(CHURCH_SCOPED_TABLES):
        op.drop_table(table)
    op.drop_table('churches')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (
        recipient_type, communication_status, communication_channel,
        prayer_request_status, payment_status, payment_method, check_in_method,
        group_category, event_category, membership_status, church_role,
        subscription_status, subscription_tier,
    ):
        enum.drop(bind, checkfirst=True)
