"""Initial schema: users, profiles, rooms and requests

Revision ID: a1c9e2f40b17
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c9e2f40b17'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


profile_role = sa.Enum('tenant', 'owner', name='profile_role')
room_type = sa.Enum('student', 'family', 'both', name='room_type')
request_status = sa.Enum('pending', 'accepted', 'rejected', name='request_status')


def upgrade() -> None:
    # Identities
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    # One profile per identity; role never changes after creation
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', profile_role, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'], unique=True)
    op.create_index('ix_profiles_role', 'profiles', ['role'])
    op.create_index('ix_profiles_created_at', 'profiles', ['created_at'])

    # Listings
    op.create_table(
        'rooms',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('address_line', sa.Text(), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('district', sa.String(100), nullable=False),
        sa.Column('taluka', sa.String(100), nullable=False),
        sa.Column('state', sa.String(100), nullable=False),
        sa.Column('pincode', sa.String(6), nullable=False),
        sa.Column('landmark', sa.String(255), nullable=True),
        sa.Column('rent', sa.Float(), nullable=False),
        sa.Column('room_type', room_type, nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.CheckConstraint('rent > 0', name='ck_rooms_rent_positive'),
    )
    op.create_index('ix_rooms_owner_id', 'rooms', ['owner_id'])
    op.create_index('ix_rooms_city', 'rooms', ['city'])
    op.create_index('ix_rooms_is_active', 'rooms', ['is_active'])
    op.create_index('ix_rooms_created_at', 'rooms', ['created_at'])
    op.create_index('ix_rooms_active_rent', 'rooms', ['is_active', 'rent'])

    # Tenant interest in a room; decided at most once
    op.create_table(
        'requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('room_id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', request_status, nullable=False, server_default='pending'),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id']),
        sa.ForeignKeyConstraint(['tenant_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id']),
    )
    op.create_index('ix_requests_room_id', 'requests', ['room_id'])
    op.create_index('ix_requests_tenant_id', 'requests', ['tenant_id'])
    op.create_index('ix_requests_owner_id', 'requests', ['owner_id'])
    op.create_index('ix_requests_status', 'requests', ['status'])
    op.create_index('ix_requests_created_at', 'requests', ['created_at'])
    op.create_index('ix_requests_owner_status', 'requests', ['owner_id', 'status'])
    op.create_index('ix_requests_tenant_room', 'requests', ['tenant_id', 'room_id'])


def downgrade() -> None:
    op.drop_table('requests')
    op.drop_table('rooms')
    op.drop_table('profiles')
    op.drop_table('users')
    request_status.drop(op.get_bind(), checkfirst=True)
    room_type.drop(op.get_bind(), checkfirst=True)
    profile_role.drop(op.get_bind(), checkfirst=True)
