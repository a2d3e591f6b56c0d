"""domains model. Root domains and path-based groups share one table."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loopy.api.models.base import Base, new_id, utcnow


class Domain(Base):
    """A hostname the user controls (is_primary) or a group path under one (primary_domain_id set)."""

    __tablename__ = "domains"
    __table_args__ = (
        Index("ix_domains_user_id", "user_id", "created_at"),
        UniqueConstraint("user_id", "domain", name="uq_domains_user_domain"),
        CheckConstraint(
            "verification_method IS NULL OR verification_method IN ('TXT', 'FILE')",
            name="ck_domains_verification_method",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str] = mapped_column(Text, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    primary_domain_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("domains.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    verification_method: Mapped[str | None] = mapped_column(String(8), nullable=True)
    txt_record_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    groups = relationship("Domain", back_populates="primary_domain", order_by="Domain.created_at")
    primary_domain = relationship("Domain", back_populates="groups", remote_side=[id])
