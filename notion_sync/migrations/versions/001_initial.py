"""Initial sync schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None

RECORD_TABLES = (
    "person",
    "media",
    "todo",
    "finance_asset",
    "finance_place",
    "finance_investment",
    "tracking_entry",
)


def _record_columns() -> list:
    """Columns shared by every synced record table."""
    return [
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("tenant_id", sa.String(100), sa.ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=False),
        sa.Column("external_database_id", sa.String(64), nullable=False),
        sa.Column("overflow_properties", sa.JSON, nullable=False),
        sa.Column("asset_url", sa.Text),
        sa.Column("last_synced_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _record_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])
    op.create_index(f"ix_{table}_external_id", table, ["external_id"])
    op.create_index(f"ix_{table}_external_database_id", table, ["external_database_id"])


def upgrade() -> None:
    # Tenant (auth subject)
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("name", sa.String(200)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Tenant database link
    op.create_table(
        "tenant_database_link",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("tenant_id", sa.String(100), sa.ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False),
        sa.Column("external_database_id", sa.String(64), nullable=False),
        sa.Column("database_key", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(255)),
        sa.Column("type_tag", sa.String(50)),
        sa.Column("period", sa.String(20)),
        sa.Column("logical_type", sa.String(50)),
        sa.Column("declared_schema", sa.JSON, nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("tenant_id", "database_key", name="uq_link_tenant_database"),
    )
    op.create_index("ix_tenant_database_link_tenant_id", "tenant_database_link", ["tenant_id"])
    op.create_index("ix_tenant_database_link_database_key", "tenant_database_link", ["database_key"])
    op.create_index("ix_tenant_database_link_logical_type", "tenant_database_link", ["logical_type"])

    # People
    op.create_table(
        "person",
        *_record_columns(),
        sa.Column("name", sa.String(255)),
        sa.Column("origin_of_connection", sa.JSON),
        sa.Column("star_sign", sa.String(50)),
        sa.Column("image", sa.JSON),
        sa.Column("currently_at", sa.Text),
        sa.Column("age", sa.Float),
        sa.Column("tier", sa.JSON),
        sa.Column("occupation", sa.Text),
        sa.Column("birthday", sa.String(40)),
        sa.Column("contact_freq", sa.String(100)),
        sa.Column("from_location", sa.Text),
        sa.Column("birth_date", sa.String(40)),
        sa.Column("nicknames", sa.JSON),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_person_tenant_external"),
    )

    # Media
    op.create_table(
        "media",
        *_record_columns(),
        sa.Column("name", sa.String(500)),
        sa.Column("category", sa.String(100)),
        sa.Column("status", sa.String(100)),
        sa.Column("url", sa.Text),
        sa.Column("by", sa.JSON),
        sa.Column("topic", sa.JSON),
        sa.Column("thumbnail", sa.JSON),
        sa.Column("ai_synopsis", sa.Text),
        sa.Column("created", sa.String(40)),
        sa.Column("related_external_ids", sa.JSON),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_media_tenant_external"),
    )

    # To-dos
    op.create_table(
        "todo",
        *_record_columns(),
        sa.Column("title", sa.String(500)),
        sa.Column("status", sa.String(100)),
        sa.Column("priority", sa.String(50)),
        sa.Column("do_date", sa.String(40)),
        sa.Column("due_date", sa.String(40)),
        sa.Column("mega_tags", sa.JSON),
        sa.Column("assignee", sa.JSON),
        sa.Column("gcal_id", sa.Text),
        sa.Column("duration_hours", sa.Float),
        sa.Column("start_date", sa.String(40)),
        sa.Column("end_date", sa.String(40)),
        sa.Column("projects", sa.JSON),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_todo_tenant_external"),
    )

    # Finances
    op.create_table(
        "finance_asset",
        *_record_columns(),
        sa.Column("name", sa.String(255)),
        sa.Column("symbol", sa.String(50)),
        sa.Column("current_price", sa.Float),
        sa.Column("summary", sa.Text),
        sa.Column("currency", sa.String(20)),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_finance_asset_tenant_external"),
    )
    op.create_table(
        "finance_place",
        *_record_columns(),
        sa.Column("name", sa.String(255)),
        sa.Column("place_type", sa.String(100)),
        sa.Column("balance", sa.Float),
        sa.Column("total_value", sa.Float),
        sa.Column("currency", sa.String(20)),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_finance_place_tenant_external"),
    )
    op.create_table(
        "finance_investment",
        *_record_columns(),
        sa.Column("name", sa.String(255)),
        sa.Column("quantity", sa.Float),
        sa.Column("purchase_price", sa.Float),
        sa.Column("purchase_date", sa.String(40)),
        sa.Column("current_value", sa.Float),
        sa.Column("current_price", sa.Float),
        sa.Column("asset_external_id", sa.String(64)),
        sa.Column("place_external_id", sa.String(64)),
        sa.Column("asset_id", sa.Uuid, sa.ForeignKey("finance_asset.id", ondelete="SET NULL")),
        sa.Column("place_id", sa.Uuid, sa.ForeignKey("finance_place.id", ondelete="SET NULL")),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_finance_investment_tenant_external"),
    )

    # Tracking (daily .. yearly share one table)
    op.create_table(
        "tracking_entry",
        *_record_columns(),
        sa.Column("period", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500)),
        sa.Column("entry_date", sa.String(40)),
        sa.UniqueConstraint("tenant_id", "external_id", name="uq_tracking_tenant_external"),
    )
    op.create_index("ix_tracking_entry_period", "tracking_entry", ["period"])

    for table in RECORD_TABLES:
        _record_indexes(table)


def downgrade() -> None:
    for table in reversed(RECORD_TABLES):
        op.drop_table(table)
    op.drop_table("tenant_database_link")
    op.drop_table("tenant")
