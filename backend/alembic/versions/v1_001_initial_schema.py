"""Initial schema: users, halls, pricing, media, host applications

Revision ID: v1_001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "v1_001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())]
    if with_updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()))
    return cols


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("phone_number", sa.String(50), unique=True),
        sa.Column("role", sa.String(50), server_default="CLIENT"),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("avatar_url", sa.String(500)),
        *_timestamps(),
    )

    op.create_table(
        "halls",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("gerant_id", UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("capacity", sa.Integer),
        sa.Column("description", sa.Text),
        sa.Column("cancellation_policy", sa.Text),
        sa.Column("is_premium", sa.Boolean, server_default=sa.false()),
        sa.Column("status", sa.String(20), server_default="DRAFT"),
        *_timestamps(),
    )
    op.create_index("ix_halls_city_status", "halls", ["city", "status"])

    op.create_table(
        "hall_user_roles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", UUID(as_uuid=True), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        *_timestamps(with_updated=False),
    )
    # One OWNER row per hall
    op.create_index(
        "uq_hall_user_roles_owner",
        "hall_user_roles",
        ["hall_id"],
        unique=True,
        postgresql_where=sa.text("role = 'OWNER'"),
    )

    op.create_table(
        "hall_products",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", UUID(as_uuid=True), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("category", sa.String(50)),
        sa.Column("description", sa.Text),
        sa.Column("is_primary", sa.Boolean, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_hall_products_hall_id", "hall_products", ["hall_id"])

    op.create_table(
        "hall_product_rates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hall_product_id", UUID(as_uuid=True),
            sa.ForeignKey("hall_products.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("label", sa.String(150), nullable=False),
        sa.Column("currency", sa.String(10), server_default="USD"),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("billing_unit", sa.String(20), nullable=False),
        sa.Column("min_hours", sa.Integer),
        sa.Column("max_hours", sa.Integer),
        sa.Column("extra_unit_price", sa.Numeric(12, 2)),
        sa.Column("day_of_week_mask", sa.String(50)),
        sa.Column("season_start", sa.Date),
        sa.Column("season_end", sa.Date),
        sa.Column("is_default", sa.Boolean, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_hall_product_rates_default", "hall_product_rates", ["hall_product_id", "is_default"])
    op.create_index(
        "ix_hall_product_rates_season", "hall_product_rates",
        ["hall_product_id", "season_start", "season_end"],
    )

    op.create_table(
        "hall_addons",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", UUID(as_uuid=True), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("pricing_model", sa.String(30), nullable=False),
        sa.Column("currency", sa.String(10), server_default="USD"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("pack_size", sa.Integer),
        sa.Column("redevance_amount", sa.Numeric(12, 2)),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_hall_addons_hall_id", "hall_addons", ["hall_id"])

    op.create_table(
        "hall_blocked_dates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", UUID(as_uuid=True), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date),
        sa.Column("reason", sa.Text),
        sa.Column("created_by_user_id", UUID(as_uuid=True)),
        *_timestamps(with_updated=False),
    )
    op.create_index("ix_hall_blocked_dates_range", "hall_blocked_dates", ["hall_id", "start_date", "end_date"])

    op.create_table(
        "media",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("hall_id", UUID(as_uuid=True), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("storage_provider", sa.String(50), server_default="LOCAL"),
        sa.Column("file_url", sa.String(500), nullable=False),
        sa.Column("original_filename", sa.String(255)),
        sa.Column("mime_type", sa.String(100)),
        sa.Column("size_bytes", sa.BigInteger),
        sa.Column("width", sa.Integer),
        sa.Column("height", sa.Integer),
        sa.Column("media_type", sa.String(20), server_default="IMAGE"),
        sa.Column("sort_order", sa.Integer),
        *_timestamps(),
    )
    op.create_index("ix_media_hall_type", "media", ["hall_id", "media_type"])

    op.create_table(
        "media_tag_types",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text),
        *_timestamps(with_updated=False),
    )
    op.create_index(
        "uq_media_tag_types_name_lower",
        "media_tag_types",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "media_tags",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("media_id", UUID(as_uuid=True), sa.ForeignKey("media.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tag_type_id", UUID(as_uuid=True), sa.ForeignKey("media_tag_types.id"), nullable=False),
        sa.Column("is_primary", sa.Boolean, server_default=sa.false()),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint("media_id", "tag_type_id", name="uq_media_tag"),
    )

    op.create_table(
        "host_applications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("applicant_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("hall_name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("capacity", sa.Integer),
        sa.Column("description", sa.Text),
        sa.Column("additional_details", sa.Text),
        sa.Column("contact_name", sa.String(150), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(50)),
        sa.Column("contact_whatsapp", sa.String(50)),
        sa.Column("status", sa.String(50), server_default="NEW"),
        sa.Column("admin_notes", sa.Text),
        sa.Column("reviewed_by_user_id", UUID(as_uuid=True)),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_host_applications_status_created", "host_applications", ["status", "created_at"])


def downgrade() -> None:
    op.drop_table("host_applications")
    op.drop_table("media_tags")
    op.drop_table("media_tag_types")
    op.drop_table("media")
    op.drop_table("hall_blocked_dates")
    op.drop_table("hall_addons")
    op.drop_table("hall_product_rates")
    op.drop_table("hall_products")
    op.drop_table("hall_user_roles")
    op.drop_table("halls")
    op.drop_table("users")
