"""links model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loopy.api.models.base import Base, new_id, utcnow

LINK_STATUSES = ("active", "draft", "archived", "expired")
REDIRECT_TYPES = ("301", "307")


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (
        Index("ix_links_user_created", "user_id", "created_at"),
        UniqueConstraint("domain_id", "slug", name="uq_links_domain_slug"),
        CheckConstraint("status IN ('active', 'draft', 'archived', 'expired')", name="ck_links_status"),
        CheckConstraint("redirect_type IN ('301', '307')", name="ck_links_redirect_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    domain_id: Mapped[str] = mapped_column(String(36), ForeignKey("domains.id", ondelete="RESTRICT"), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    destination_url: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    redirect_type: Mapped[str] = mapped_column(String(3), nullable=False, default="307")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    epc: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expire_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_broken: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    last_checked_broken: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    utm_params: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    domain = relationship("Domain", lazy="joined")
    clicks = relationship("Click", back_populates="link", cascade="all, delete-orphan", passive_deletes=True)
