from sqlalchemy import Column, Index, MetaData, PrimaryKeyConstraint, Table, Text

metadata = MetaData()


# ============================================================================
# USER FEDERATIONS TABLE
# ============================================================================
user_federations_table = Table(
    "user_federations",
    metadata,
    Column("user_id", Text, nullable=False),
    Column("provider_id", Text, nullable=False),
    Column("federation_uid", Text, nullable=False),  # Subject id issued by the provider
    PrimaryKeyConstraint("user_id", "provider_id", name="user_federations_pk"),
)

# One upstream identity maps to at most one local account
Index(
    "user_federations_provider_id_federation_uid_uindex",
    user_federations_table.c.provider_id,
    user_federations_table.c.federation_uid,
    unique=True,
)
