"""Companies and their calendar events."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202501150001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp_columns():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("shareable_url", sa.String(length=200), nullable=False, unique=True),
        *_timestamp_columns(),
        sa.CheckConstraint("length(name) >= 2", name="ck_companies_name_length"),
        sa.CheckConstraint(
            "length(shareable_url) >= 10", name="ck_companies_shareable_url_length"
        ),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "company_id",
            sa.String(length=36),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamp_columns(),
        sa.CheckConstraint("start_at < end_at", name="ck_events_valid_times"),
        sa.CheckConstraint("length(title) >= 3", name="ck_events_title_length"),
    )
    op.create_index("ix_events_company_id", "events", ["company_id"])
    op.create_index(
        "ix_events_company_public_start",
        "events",
        ["company_id", "is_public", "start_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_events_company_public_start", table_name="events")
    op.drop_index("ix_events_company_id", table_name="events")
    op.drop_table("events")
    op.drop_table("companies")
