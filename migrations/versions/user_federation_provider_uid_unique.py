"""user_federation_provider_uid_unique

Make (provider_id, federation_uid) unique so one upstream identity maps to at
most one local account. Existing duplicates are removed first, keeping one
row per upstream identity.

Revision ID: user_federation_provider_uid_unique
Revises: add_user_federations
Create Date: 2026-03-09

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "user_federation_provider_uid_unique"
down_revision: Union[str, Sequence[str], None] = "add_user_federations"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INDEX_NAME = "user_federations_provider_id_federation_uid_uindex"

# SQLite keeps the oldest row of each group
_DEDUPE_SQLITE = """
DELETE FROM user_federations
WHERE rowid NOT IN (
    SELECT MIN(rowid)
    FROM user_federations
    GROUP BY provider_id, federation_uid
)
"""

# PostgreSQL keeps the first row of each group by (user_id, provider_id)
_DEDUPE_POSTGRES = """
DELETE FROM user_federations uf
USING (
    SELECT ctid
    FROM (
        SELECT ctid,
               ROW_NUMBER() OVER (
                   PARTITION BY provider_id, federation_uid
                   ORDER BY user_id, provider_id
               ) AS rn
        FROM user_federations
    ) dedupe
    WHERE dedupe.rn > 1
) del
WHERE uf.ctid = del.ctid
"""


def upgrade() -> None:
    """Drop duplicate upstream identities, then add the unique index."""
    dialect = op.get_bind().dialect.name
    if dialect == "sqlite":
        op.execute(_DEDUPE_SQLITE)
    elif dialect == "postgresql":
        op.execute(_DEDUPE_POSTGRES)
    else:
        raise NotImplementedError(f"No dedupe statement for dialect {dialect!r}")

    op.create_index(
        INDEX_NAME,
        "user_federations",
        ["provider_id", "federation_uid"],
        unique=True,
    )


def downgrade() -> None:
    """Drop the unique index. Removed duplicates are not restored."""
    op.drop_index(INDEX_NAME, table_name="user_federations")
