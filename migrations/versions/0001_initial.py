"""Initial schema: users, spaces, bookings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    user_role_enum = sa.Enum('student', 'admin', name='userrole')
    space_status_enum = sa.Enum('available', 'reserved', name='spacestatus')
    booking_status_enum = sa.Enum('booked', 'cancelled', name='bookingstatus')

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=255), nullable=False, unique=True),
        sa.Column('role', user_role_enum, nullable=False, server_default='student'),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'spaces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255)),
        sa.Column('status', space_status_enum, nullable=False, server_default='available'),
        sa.Column('start_time', sa.DateTime()),
        sa.Column('end_time', sa.DateTime()),
        sa.Column('usage_notes', sa.String(length=1024)),
        sa.Column('image_url', sa.String(length=1024)),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_spaces_status', 'spaces', ['status'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('space_id', sa.Integer(), sa.ForeignKey('spaces.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', booking_status_enum, nullable=False, server_default='booked'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_bookings_space_id', 'bookings', ['space_id'])
    op.create_index('ix_bookings_start_time', 'bookings', ['start_time'])
    op.create_index('ix_bookings_end_time', 'bookings', ['end_time'])


def downgrade() -> None:
    op.drop_index('ix_bookings_end_time', table_name='bookings')
    op.drop_index('ix_bookings_start_time', table_name='bookings')
    op.drop_index('ix_bookings_space_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_spaces_status', table_name='spaces')
    op.drop_table('spaces')
    op.drop_table('users')

    sa.Enum(name='bookingstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='spacestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
