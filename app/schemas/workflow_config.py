"""Workflow configuration models: conditions, trigger configs, action configs.

The one rule set for definitions. The request schemas in
app.schemas.workflow extend the trigger models with their tag, and the
definition validator runs submitted configs through the same models.
Keys are accepted in snake_case or camelCase.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from app.domain.entities.workflow import (
    ApiTrigger,
    Condition,
    ConditionBasedTrigger,
    EventBasedTrigger,
    ListMembershipConfig,
    ManualTrigger,
    SendMessageConfig,
    TimeBasedTrigger,
    UpdateContactConfig,
    WaitConfig,
    WebhookConfig,
)
from app.shared.enums import ConditionOperator
from app.shared.utils.cron import CronSchedule, load_timezone


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase keys; dumps snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Conditions ----


class ConditionIn(BaseModel):
    """Single field/operator/value predicate."""

    field: str = Field(..., min_length=1, max_length=255)
    operator: ConditionOperator
    value: Any = Field(default=None, validate_default=True)

    @field_validator("value")
    @classmethod
    def _list_operators_need_arrays(cls, value: Any, info: ValidationInfo) -> Any:
        operator = info.data.get("operator")
        if operator in (ConditionOperator.IN, ConditionOperator.NOT_IN):
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"operator '{operator.value}' requires an array value")
            return list(value)
        return value

    def to_condition(self) -> Condition:
        return Condition(field=self.field, operator=self.operator.value, value=self.value)


# ---- Trigger configs ----


class TimeBasedTriggerConfig(CamelModel):
    schedule: str = Field(..., min_length=1)
    timezone: str = Field(..., min_length=1)

    @field_validator("schedule")
    @classmethod
    def _valid_cron(cls, value: str) -> str:
        CronSchedule.parse(value)
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        load_timezone(value)
        return value

    def to_trigger(self) -> TimeBasedTrigger:
        return TimeBasedTrigger(schedule=self.schedule, timezone=self.timezone)


class EventBasedTriggerConfig(CamelModel):
    event_type: str = Field(..., min_length=1)
    event_source: str = Field(..., min_length=1)

    def to_trigger(self) -> EventBasedTrigger:
        return EventBasedTrigger(event_type=self.event_type, event_source=self.event_source)


class ConditionBasedTriggerConfig(CamelModel):
    conditions: list[ConditionIn]

    def to_trigger(self) -> ConditionBasedTrigger:
        return ConditionBasedTrigger(
            conditions=tuple(c.to_condition() for c in self.conditions)
        )


class ManualTriggerConfig(CamelModel):
    def to_trigger(self) -> ManualTrigger:
        return ManualTrigger()


class ApiTriggerConfig(CamelModel):
    endpoint: str = Field(..., min_length=1)
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def to_trigger(self) -> ApiTrigger:
        return ApiTrigger(endpoint=self.endpoint, method=self.method)


# ---- Action configs ----


class SendMessageConfigIn(CamelModel):
    """Template id plus channel-owned parameters (passed through unchanged)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    template_id: str | None = None

    def to_config(self, raw: dict[str, Any]) -> SendMessageConfig:
        return SendMessageConfig(template_id=self.template_id, params=dict(raw))


class ListConfigIn(CamelModel):
    list_id: str = Field(..., min_length=1)

    def to_config(self, raw: dict[str, Any]) -> ListMembershipConfig:
        return ListMembershipConfig(list_id=self.list_id)


class UpdateContactConfigIn(BaseModel):
    fields: dict[str, Any] = Field(..., min_length=1)

    def to_config(self, raw: dict[str, Any]) -> UpdateContactConfig:
        return UpdateContactConfig(fields=dict(self.fields))


class WaitConfigIn(CamelModel):
    duration_seconds: float = Field(default=0, ge=0)

    def to_config(self, raw: dict[str, Any]) -> WaitConfig:
        return WaitConfig(duration_seconds=self.duration_seconds)


class WebhookConfigIn(CamelModel):
    url: str = Field(..., pattern=r"^https?://.+")
    method: Literal["POST", "PUT", "PATCH"] = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    data: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("data", "payload")
    )
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def to_config(self, raw: dict[str, Any]) -> WebhookConfig:
        return WebhookConfig(
            url=self.url,
            method=self.method,
            headers=dict(self.headers),
            data=dict(self.data),
            timeout_seconds=self.timeout_seconds,
        )
