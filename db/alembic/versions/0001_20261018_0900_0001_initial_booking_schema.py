"""Initial booking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create admins table
    op.create_table('admins',
        sa.Column('admin_id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('admin_id')
    )
    op.create_index(op.f('ix_admins_email'), 'admins', ['email'], unique=True)

    # Create travelers table
    op.create_table('travelers',
        sa.Column('traveler_id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(email) > 0', name='ck_traveler_email_not_empty'),
        sa.PrimaryKeyConstraint('traveler_id')
    )
    op.create_index(op.f('ix_travelers_email'), 'travelers', ['email'], unique=True)
    op.create_index(op.f('ix_travelers_is_active'), 'travelers', ['is_active'], unique=False)
    # Emails are stored lowercased; the functional index backs case-insensitive lookup
    op.create_index('ix_travelers_email_lower', 'travelers', [sa.text('lower(email)')], unique=True)

    # Create agents table
    op.create_table('agents',
        sa.Column('agent_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('contact', sa.String(length=50), nullable=True),
        sa.Column('commission_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('agent_id')
    )
    op.create_index(op.f('ix_agents_email'), 'agents', ['email'], unique=True)

    # Create packages table
    op.create_table('packages',
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('no_of_days', sa.Integer(), nullable=False),
        sa.Column('base_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('is_template', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('no_of_days > 0', name='ck_package_days_positive'),
        sa.CheckConstraint("status IN ('draft', 'published')", name='ck_package_status'),
        sa.ForeignKeyConstraint(['created_by'], ['admins.admin_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('package_id')
    )
    op.create_index(op.f('ix_packages_title'), 'packages', ['title'], unique=False)
    op.create_index(op.f('ix_packages_status'), 'packages', ['status'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('traveler_id', sa.Uuid(), nullable=False),
        sa.Column('agent_id', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('no_of_travelers', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('traveler_notes', sa.Text(), nullable=True),
        sa.Column('confirmation_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmed_by', sa.Uuid(), nullable=True),
        sa.Column('booking_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('no_of_travelers >= 1', name='ck_booking_travelers_positive'),
        sa.CheckConstraint('total_amount IS NULL OR total_amount >= 0', name='ck_booking_amount_non_negative'),
        sa.CheckConstraint(
            "status IN ('temporary', 'confirmed', 'in_progress', 'completed', 'cancelled')",
            name='ck_booking_status'
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'partial', 'paid', 'refunded')",
            name='ck_booking_payment_status'
        ),
        sa.ForeignKeyConstraint(['package_id'], ['packages.package_id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['traveler_id'], ['travelers.traveler_id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['agent_id'], ['agents.agent_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['confirmed_by'], ['admins.admin_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('booking_id')
    )
    op.create_index(op.f('ix_bookings_package_id'), 'bookings', ['package_id'], unique=False)
    op.create_index(op.f('ix_bookings_traveler_id'), 'bookings', ['traveler_id'], unique=False)
    op.create_index(op.f('ix_bookings_agent_id'), 'bookings', ['agent_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_payment_status'), 'bookings', ['payment_status'], unique=False)
    op.create_index(op.f('ix_bookings_booking_date'), 'bookings', ['booking_date'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('bookings')
    op.drop_table('packages')
    op.drop_table('agents')
    op.drop_index('ix_travelers_email_lower', table_name='travelers')
    op.drop_table('travelers')
    op.drop_table('admins')
