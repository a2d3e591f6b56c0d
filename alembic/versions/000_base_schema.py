"""Base schema: domains (roots and groups), links, clicks, profiles."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "000_base"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) domains (links and groups depend on it)
    op.create_table(
        "domains",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("domain", sa.Text(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "primary_domain_id",
            sa.String(36),
            sa.ForeignKey("domains.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("verification_method", sa.String(8), nullable=True),
        sa.Column("txt_record_value", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "domain", name="uq_domains_user_domain"),
        sa.CheckConstraint(
            "verification_method IS NULL OR verification_method IN ('TXT', 'FILE')",
            name="ck_domains_verification_method",
        ),
    )
    op.create_index("ix_domains_user_id", "domains", ["user_id", "created_at"], unique=False, if_not_exists=True)
    op.create_index(
        "ix_domains_primary_domain_id", "domains", ["primary_domain_id"], unique=False, if_not_exists=True
    )

    # 2) links
    op.create_table(
        "links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("domain_id", sa.String(36), sa.ForeignKey("domains.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("destination_url", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("redirect_type", sa.String(3), nullable=False, server_default="307"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("epc", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_broken", sa.Boolean(), nullable=True),
        sa.Column("last_checked_broken", sa.DateTime(timezone=True), nullable=True),
        sa.Column("utm_params", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("domain_id", "slug", name="uq_links_domain_slug"),
        sa.CheckConstraint("status IN ('active', 'draft', 'archived', 'expired')", name="ck_links_status"),
        sa.CheckConstraint("redirect_type IN ('301', '307')", name="ck_links_redirect_type"),
    )
    op.create_index("ix_links_user_created", "links", ["user_id", "created_at"], unique=False, if_not_exists=True)

    # 3) clicks (written by the log-click app only)
    op.create_table(
        "clicks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("link_id", sa.String(36), sa.ForeignKey("links.id", ondelete="CASCADE"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("device", sa.String(32), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("country", sa.String(128), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("is_broken", sa.Boolean(), nullable=True),
        sa.Column("browser", sa.String(64), nullable=True),
        sa.Column("os", sa.String(64), nullable=True),
    )
    op.create_index(
        "ix_clicks_link_timestamp", "clicks", ["link_id", "timestamp"], unique=False, if_not_exists=True
    )

    # 4) profiles (id = auth user id)
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("username", sa.String(255), nullable=True, unique=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("link_limit", sa.Integer(), nullable=True),
        sa.Column("click_limit", sa.Integer(), nullable=True),
        sa.Column("retention_limit", sa.Integer(), nullable=True),
        sa.Column("plan", sa.String(16), nullable=True, server_default="free"),
        sa.Column("stripe_customer_id", sa.Text(), nullable=True),
        sa.Column("stripe_subscription_id", sa.Text(), nullable=True),
        sa.Column("trial_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("billing_status", sa.String(16), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'user')", name="ck_profiles_role"),
        sa.CheckConstraint("plan IS NULL OR plan IN ('free', 'pro', 'business')", name="ck_profiles_plan"),
    )


def downgrade() -> None:
    op.drop_table("profiles")
    op.drop_index("ix_clicks_link_timestamp", table_name="clicks", if_exists=True)
    op.drop_table("clicks")
    op.drop_index("ix_links_user_created", table_name="links", if_exists=True)
    op.drop_table("links")
    op.drop_index("ix_domains_primary_domain_id", table_name="domains", if_exists=True)
    op.drop_index("ix_domains_user_id", table_name="domains", if_exists=True)
    op.drop_table("domains")
