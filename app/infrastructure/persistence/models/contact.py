"""Contact and contact-list membership ORM models backing the CRM ports."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    SoftDeleteMultiTenantModel,
)


class Contact(SoftDeleteMultiTenantModel, Base):
    """Contact. Table: contact. Free-form attributes are merged into the evaluation record."""

    __tablename__ = "contact"

    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="active", server_default="active"
    )
    attributes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


class ContactListMember(MultiTenantModel, Base):
    """Membership of a contact in a list. Table: contact_list_member."""

    __tablename__ = "contact_list_member"

    list_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    contact_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("contact.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("list_id", "contact_id", name="uq_contact_list_member"),
    )
