from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "3b7f2c91d4a0"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String, unique=True),
        sa.Column("first_name", sa.String),
        sa.Column("last_name", sa.String),
        sa.Column("role", sa.String(16), nullable=False, server_default="tenant"),
        sa.Column("language", sa.String(4), nullable=False, server_default="de"),
        sa.Column("badge_paid_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "properties",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("owner_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("slug", sa.String(16), nullable=False, unique=True),
        sa.Column("address", sa.Text, nullable=False),
        sa.Column("rent_chf", sa.Numeric(10, 2), nullable=False),
        sa.Column("notice_months", sa.Integer, server_default="3"),
        sa.Column("earliest_exit", sa.Date),
        sa.Column("key_count", sa.Integer, server_default="1"),
        sa.Column("main_photo_url", sa.String),
        sa.Column("closed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "candidates",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("property_id", sa.Uuid, sa.ForeignKey("properties.id"), nullable=False, index=True),
        sa.Column("tenant_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("score_tier", sa.String(16), nullable=False, server_default="incomplete"),
        sa.Column("score_reason", sa.Text),
        sa.Column("status", sa.String(32), nullable=False, server_default="dossier_submitted"),
        sa.Column("landlord_decision", sa.String(16)),
        sa.Column("badge_flag", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cover_letter", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "property_id", name="uq_candidates_user_property"),
    )
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("property_id", sa.Uuid, sa.ForeignKey("properties.id")),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("url", sa.String, nullable=False),
        sa.Column("filename", sa.String),
        sa.Column("mime_type", sa.String(128)),
        sa.Column("is_valid", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("confidence", sa.Float, nullable=False, server_default="0"),
        sa.Column("validation_reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_documents_user_property", "documents", ["user_id", "property_id"])
    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("property_id", sa.Uuid, sa.ForeignKey("properties.id"), nullable=False, index=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("due_date", sa.Date),
        sa.Column("mandatory", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "visit_slots",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("property_id", sa.Uuid, sa.ForeignKey("properties.id"), nullable=False, index=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_min", sa.Integer, nullable=False, server_default="30"),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("seats_left", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity >= 1", name="ck_visit_slots_capacity"),
        sa.CheckConstraint("seats_left >= 0 AND seats_left <= capacity", name="ck_visit_slots_seats_left"),
    )
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount_chf", sa.Numeric(10, 2), nullable=False),
        sa.Column("stripe_session_id", sa.String),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("property_id", sa.Uuid, sa.ForeignKey("properties.id"), index=True),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("payload_json", postgresql.JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table("events")
    op.drop_table("payments")
    op.drop_table("visit_slots")
    op.drop_table("tasks")
    op.drop_index("ix_documents_user_property", table_name="documents")
    op.drop_table("documents")
    op.drop_table("candidates")
    op.drop_table("properties")
    op.drop_table("users")
