"""add_user_federations

Add the user_federations table linking local users to upstream identities.

Revision ID: add_user_federations
Revises:
Create Date: 2026-03-02

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_user_federations"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create user_federations keyed by (user_id, provider_id)."""
    op.create_table(
        "user_federations",
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("provider_id", sa.Text(), nullable=False),
        sa.Column("federation_uid", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "provider_id", name="user_federations_pk"),
    )


def downgrade() -> None:
    """Drop user_federations."""
    op.drop_table("user_federations")
