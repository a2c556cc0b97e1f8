"""Executes one configured workflow action against external collaborators.

Each action type maps to exactly one side-effecting call. Failures of
that call are returned as a failed ActionResult, never raised. The only
exception that escapes is UnknownActionTypeException, which means the
stored definition is corrupt.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any

from app.application.dtos.workflow import ActionResult
from app.application.interfaces.services import (
    IChannelSender,
    IContactMutator,
    IListService,
    IWebhookClient,
)
from app.application.services.workflow_definition_validator import parse_action_config
from app.domain.entities.workflow import (
    Action,
    ActionConfig,
    ListMembershipConfig,
    SendMessageConfig,
    UpdateContactConfig,
    WaitConfig,
    WebhookConfig,
)
from app.domain.exceptions import UnknownActionTypeException
from app.shared.enums import ActionResultStatus, ActionType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_Handler = Callable[[Any, str, Mapping[str, Any] | None], Awaitable[dict[str, Any]]]


class ActionRejectedError(Exception):
    """A collaborator reported failure without raising (e.g. channel send returned False)."""


class ActionDispatcher:
    """Maps action types to collaborator calls and wraps outcomes in ActionResult."""

    def __init__(
        self,
        channel_sender: IChannelSender,
        list_service: IListService,
        contact_mutator: IContactMutator,
        webhook_client: IWebhookClient,
        *,
        webhook_timeout_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._channels = channel_sender
        self._lists = list_service
        self._contacts = contact_mutator
        self._webhooks = webhook_client
        self._webhook_timeout = webhook_timeout_seconds
        self._clock = clock
        self._handlers: dict[ActionType, _Handler] = {
            ActionType.SEND_EMAIL: self._send_email,
            ActionType.SEND_SMS: self._send_sms,
            ActionType.SEND_WHATSAPP: self._send_whatsapp,
            ActionType.ADD_TO_LIST: self._add_to_list,
            ActionType.REMOVE_FROM_LIST: self._remove_from_list,
            ActionType.UPDATE_CONTACT: self._update_contact,
            ActionType.WAIT: self._wait,
            ActionType.WEBHOOK: self._webhook,
        }

    @traced("workflow.action.execute")
    async def execute(
        self,
        action: Action,
        contact_id: str,
        event_payload: Mapping[str, Any] | None = None,
    ) -> ActionResult:
        """Run action for contact_id and return its result.

        Raises:
            UnknownActionTypeException: action.type is not a known action type.
        """
        action_type = action.known_type
        handler = self._handlers.get(action_type) if action_type else None
        if action_type is None or handler is None:
            raise UnknownActionTypeException(action.type)

        started_at = self._clock()
        try:
            config: ActionConfig = parse_action_config(action_type, action.config)
            detail = await handler(config, contact_id, event_payload)
        except Exception as e:
            logger.warning(
                "Action %s failed for contact %s: %s",
                action_type.value,
                contact_id,
                e,
            )
            return ActionResult(
                type=action_type.value,
                status=ActionResultStatus.FAILED,
                detail={
                    "contact_id": contact_id,
                    "error": str(e) or e.__class__.__name__,
                    "error_type": e.__class__.__name__,
                },
                started_at=started_at,
            )
        return ActionResult(
            type=action_type.value,
            status=ActionResultStatus.COMPLETED,
            detail={"contact_id": contact_id, **detail},
            started_at=started_at,
        )

    # ---- channel sends ----

    async def _send(
        self,
        send: Callable[[str, dict[str, Any]], Awaitable[bool]],
        channel: str,
        config: SendMessageConfig,
        contact_id: str,
    ) -> dict[str, Any]:
        accepted = await send(contact_id, config.params)
        if not accepted:
            raise ActionRejectedError(f"{channel} channel rejected the message")
        return {"channel": channel, "template_id": config.template_id}

    async def _send_email(
        self, config: SendMessageConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return await self._send(self._channels.send_email, "email", config, contact_id)

    async def _send_sms(
        self, config: SendMessageConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return await self._send(self._channels.send_sms, "sms", config, contact_id)

    async def _send_whatsapp(
        self, config: SendMessageConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return await self._send(
            self._channels.send_whatsapp, "whatsapp", config, contact_id
        )

    # ---- CRM ----

    async def _add_to_list(
        self, config: ListMembershipConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        await self._lists.add_member(contact_id, config.list_id)
        return {"list_id": config.list_id}

    async def _remove_from_list(
        self, config: ListMembershipConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        await self._lists.remove_member(contact_id, config.list_id)
        return {"list_id": config.list_id}

    async def _update_contact(
        self, config: UpdateContactConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        await self._contacts.update(contact_id, config.fields)
        return {"updated_fields": sorted(config.fields)}

    # ---- flow control / outbound ----

    async def _wait(
        self, config: WaitConfig, contact_id: str, _payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        # Resolves immediately; a real delay would need a persisted resumption point.
        return {"duration_seconds": config.duration_seconds, "deferred": False}

    async def _webhook(
        self, config: WebhookConfig, contact_id: str, payload: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        status_code = await self._webhooks.post(
            config.url,
            {
                "workflow_action": ActionType.WEBHOOK.value,
                "contact_id": contact_id,
                "trigger_data": dict(payload) if payload else None,
                "data": config.data,
            },
            method=config.method,
            headers=config.headers,
            timeout=config.timeout_seconds or self._webhook_timeout,
        )
        return {"url": config.url, "status_code": status_code}
