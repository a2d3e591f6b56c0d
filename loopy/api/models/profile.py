"""profiles model. id equals the auth user id."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loopy.api.models.base import Base, utcnow


class Profile(Base):
    """Display info plus plan/billing metadata. Limits are stored, not enforced."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_profiles_role"),
        CheckConstraint("plan IS NULL OR plan IN ('free', 'pro', 'business')", name="ck_profiles_plan"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")
    link_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    click_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    retention_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    plan: Mapped[str | None] = mapped_column(String(16), nullable=True, default="free")
    stripe_customer_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    billing_status: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
