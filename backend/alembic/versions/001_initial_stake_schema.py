"""Initial schema: tournament, bird_type, stake, reservation, admin_session.

Revision ID: 001_initial_stake_schema
Revises:
"""

from alembic import op
import sqlalchemy as sa


revision = "001_initial_stake_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # -----------------------------------------------------------------------
    # 1. tournament - at most one row with is_active = true
    # -----------------------------------------------------------------------
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("stake_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tournament_is_active", "tournament", ["is_active"])

    # -----------------------------------------------------------------------
    # 2. bird_type - category of stakes within a tournament
    # -----------------------------------------------------------------------
    op.create_table(
        "bird_type",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tournament_id", sa.Integer(), sa.ForeignKey("tournament.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tournament_id", "name", name="uq_tournament_bird_type"),
    )
    op.create_index("ix_bird_type_tournament_id", "bird_type", ["tournament_id"])

    # -----------------------------------------------------------------------
    # 3. stake - numbered slot, status available|pending|confirmed
    # -----------------------------------------------------------------------
    op.create_table(
        "stake",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bird_type_id", sa.Integer(), sa.ForeignKey("bird_type.id"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="available"),
        sa.Column("reservant_name", sa.String(), nullable=True),
        sa.Column("reservant_phone", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("bird_type_id", "number", name="uq_bird_type_stake_number"),
    )
    op.create_index("ix_stake_bird_type_id", "stake", ["bird_type_id"])
    op.create_index("ix_stake_status", "stake", ["status"])

    # -----------------------------------------------------------------------
    # 4. reservation - one live (non-cancelled) row per stake
    # -----------------------------------------------------------------------
    op.create_table(
        "reservation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stake_id", sa.Integer(), sa.ForeignKey("stake.id"), nullable=False),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("customer_phone", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("amount_paid", sa.Numeric(10, 2), nullable=True),
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
    )
    op.create_index("ix_reservation_stake_id", "reservation", ["stake_id"])
    op.create_index(
        "uq_reservation_live_stake",
        "reservation",
        ["stake_id"],
        unique=True,
        sqlite_where=sa.text("payment_status != 'cancelled'"),
        postgresql_where=sa.text("payment_status != 'cancelled'"),
    )

    # -----------------------------------------------------------------------
    # 5. admin_session - hashed bearer tokens
    # -----------------------------------------------------------------------
    op.create_table(
        "admin_session",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_admin_session_token_hash", "admin_session", ["token_hash"], unique=True)


def downgrade():
    op.drop_index("ix_admin_session_token_hash", table_name="admin_session")
    op.drop_table("admin_session")
    op.drop_index("uq_reservation_live_stake", table_name="reservation")
    op.drop_index("ix_reservation_stake_id", table_name="reservation")
    op.drop_table("reservation")
    op.drop_index("ix_stake_status", table_name="stake")
    op.drop_index("ix_stake_bird_type_id", table_name="stake")
    op.drop_table("stake")
    op.drop_index("ix_bird_type_tournament_id", table_name="bird_type")
    op.drop_table("bird_type")
    op.drop_index("ix_tournament_is_active", table_name="tournament")
    op.drop_table("tournament")
