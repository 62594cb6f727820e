"""Track when a traveler was given usable credentials

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 14:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: str | None = '0001'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.add_column(
        'travelers',
        sa.Column('credentials_issued_at', sa.DateTime(timezone=True), nullable=True),
    )
    # Anyone who has logged in evidently knows their password.
    # Active accounts that never logged in stay NULL and get credentials on their next confirmation.
    op.execute(
        "UPDATE travelers SET credentials_issued_at = last_login WHERE last_login IS NOT NULL"
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_column('travelers', 'credentials_issued_at')
