"""Service interfaces (ports) for the application layer.

Protocols for the side-effecting collaborators the action dispatcher calls.
Implementations live in app.infrastructure (HTTP adapters, SQL repositories).
"""

from __future__ import annotations

from typing import Any, Protocol


# Channel senders (email / SMS / WhatsApp)
class IChannelSender(Protocol):
    """Protocol for message channel delivery. No retry is expected from callers."""

    async def send_email(self, contact_id: str, config: dict[str, Any]) -> bool:
        """Send an email to the contact; return True on accepted delivery."""

    async def send_sms(self, contact_id: str, config: dict[str, Any]) -> bool:
        """Send an SMS to the contact; return True on accepted delivery."""

    async def send_whatsapp(self, contact_id: str, config: dict[str, Any]) -> bool:
        """Send a WhatsApp message to the contact; return True on accepted delivery."""


# List membership
class IListService(Protocol):
    """Protocol for contact list membership changes."""

    async def add_member(self, contact_id: str, list_id: str) -> None:
        """Add contact to list (idempotent)."""

    async def remove_member(self, contact_id: str, list_id: str) -> None:
        """Remove contact from list (no-op when not a member)."""


# Contact mutation
class IContactMutator(Protocol):
    """Protocol for updating contact fields."""

    async def update(self, contact_id: str, fields: dict[str, Any]) -> None:
        """Update the given fields; raise ResourceNotFoundException when the contact is missing."""


# Outbound webhooks
class IWebhookClient(Protocol):
    """Protocol for outbound webhook calls. Timeouts and non-2xx responses raise."""

    async def post(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> int:
        """Send payload as JSON and return the HTTP status code."""
