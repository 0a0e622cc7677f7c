"""Initial schema: placeholder table proving the database is writable.

Revision ID: 001
Revises:
Create Date: 2024-01-01

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the _migration_test table and seed a single row."""
    migration_test = op.create_table(
        "_migration_test",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "created_at",
            sa.DateTime,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    op.bulk_insert(migration_test, [{"id": 1}])


def downgrade() -> None:
    """Drop the _migration_test table."""
    op.drop_table("_migration_test")
