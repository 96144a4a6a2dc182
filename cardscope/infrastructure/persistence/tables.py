"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import Boolean, Column, Index, Integer, MetaData, String, Table, Text, false
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.types import JSON

metadata = MetaData()

# Native text arrays on PostgreSQL, JSON lists elsewhere
TextArray = JSON(none_as_null=True).with_variant(ARRAY(Text), "postgresql")

ARRAY_COLUMNS = ("primary_types", "symbols", "keywords", "subtypes")

# ============================================================================
# CARDS TABLE
# ============================================================================
cards_table = Table(
    "cards",
    metadata,
    Column("card_id", String, primary_key=True),
    Column("name", Text, nullable=False),
    Column("set", String, nullable=True),
    Column("set_sort", Integer, nullable=True),  # Catalog ordering of sets
    Column("card_location", String, nullable=True),
    Column("effect", Text, nullable=True),
    Column("highlight_effect", Text, nullable=True),
    Column("cost", Integer, nullable=True),
    Column("xp_value", Integer, nullable=True),
    Column("xp_is_variable", Boolean, nullable=False, server_default=false()),
    Column("wcs_tier", Integer, nullable=True),
    Column("attack_count", Integer, nullable=True),
    Column("primary_types", TextArray, nullable=True),
    Column("symbols", TextArray, nullable=True),
    Column("keywords", TextArray, nullable=True),
    Column("subtypes", TextArray, nullable=True),
    Column("extra", JSON(none_as_null=True), nullable=True),  # Attributes without a column
)

Index("idx_cards_set_sort_card_id", cards_table.c.set_sort, cards_table.c.card_id)
Index("idx_cards_name", cards_table.c.name)
