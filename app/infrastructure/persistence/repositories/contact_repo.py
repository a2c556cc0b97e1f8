"""Contact repository: CRM read, contact mutation and list membership.

Implements IContactRepository, IContactMutator and IListService over the
contact and contact_list_member tables. All queries are scoped to the
tenant the repository was built for. Writes run inside a savepoint so a
rejected write (constraint violation, missing row) leaves the shared
session usable for the rest of the run.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update as sql_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.contact import Contact, ContactListMember
from app.shared.utils.generators import generate_cuid

# Columns update_contact may write directly; anything else lands in attributes.
_CONTACT_COLUMNS = frozenset({"email", "phone", "first_name", "last_name", "status"})


def _to_record(c: Contact) -> dict[str, Any]:
    """Flatten a contact into the record conditions are evaluated against."""
    return {
        **(c.attributes or {}),
        "id": c.id,
        "email": c.email,
        "phone": c.phone,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "status": c.status,
        "attributes": dict(c.attributes or {}),
    }


class ContactRepository:
    """Contact store for one tenant."""

    def __init__(
        self, db: AsyncSession, tenant_id: str, *, autocommit: bool = False
    ) -> None:
        self.db = db
        self.tenant_id = tenant_id
        self._autocommit = autocommit

    async def _persist(self) -> None:
        if self._autocommit:
            await self.db.commit()
        else:
            await self.db.flush()

    async def _get_row(self, contact_id: str) -> Contact | None:
        result = await self.db.execute(
            select(Contact)
            .where(
                Contact.id == contact_id,
                Contact.tenant_id == self.tenant_id,
                Contact.deleted_at.is_(None),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_contact(self, contact_id: str) -> dict[str, Any] | None:
        row = await self._get_row(contact_id)
        if row is None:
            return None
        return {**_to_record(row), "lists": await self.list_ids_for(contact_id)}

    async def update(self, contact_id: str, fields: dict[str, Any]) -> None:
        """Write known columns directly and merge the rest into attributes."""
        row = await self._get_row(contact_id)
        if row is None:
            raise ResourceNotFoundException("contact", contact_id)
        columns: dict[str, Any] = {}
        extra = dict(row.attributes or {})
        for key, value in fields.items():
            if key in _CONTACT_COLUMNS:
                columns[key] = value
            else:
                extra[key] = value
        async with self.db.begin_nested():
            await self.db.execute(
                sql_update(Contact)
                .where(Contact.id == contact_id, Contact.tenant_id == self.tenant_id)
                .values(**columns, attributes=extra)
                .execution_options(synchronize_session=False)
            )
        await self._persist()

    async def add_member(self, contact_id: str, list_id: str) -> None:
        if await self._get_row(contact_id) is None:
            raise ResourceNotFoundException("contact", contact_id)
        async with self.db.begin_nested():
            await self.db.execute(
                pg_insert(ContactListMember)
                .values(
                    id=generate_cuid(),
                    tenant_id=self.tenant_id,
                    list_id=list_id,
                    contact_id=contact_id,
                )
                .on_conflict_do_nothing(constraint="uq_contact_list_member")
            )
        await self._persist()

    async def remove_member(self, contact_id: str, list_id: str) -> None:
        async with self.db.begin_nested():
            await self.db.execute(
                delete(ContactListMember).where(
                    ContactListMember.tenant_id == self.tenant_id,
                    ContactListMember.list_id == list_id,
                    ContactListMember.contact_id == contact_id,
                )
            )
        await self._persist()

    async def list_ids_for(self, contact_id: str) -> list[str]:
        """Return the lists a contact belongs to (ordered by list id)."""
        result = await self.db.execute(
            select(ContactListMember.list_id)
            .where(
                ContactListMember.tenant_id == self.tenant_id,
                ContactListMember.contact_id == contact_id,
            )
            .order_by(ContactListMember.list_id)
        )
        return list(result.scalars().all())
