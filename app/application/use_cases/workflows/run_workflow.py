"""Run controller: one workflow execution for one contact.

Order is fixed: load definition, active gate, trigger check, condition
check, create RUNNING execution, dispatch actions in order, single
terminal write. Skips never create an execution row.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from app.application.dtos.workflow import ActionResult, ExecutionResult, ExecutionUpdate
from app.application.interfaces.repositories import (
    IContactRepository,
    IWorkflowExecutionRepository,
    IWorkflowRepository,
)
from app.application.services.action_dispatcher import ActionDispatcher
from app.application.services.condition_evaluator import ConditionEvaluator
from app.application.services.trigger_classifier import TriggerClassifier
from app.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from app.domain.exceptions import ResourceNotFoundException
from app.shared.enums import (
    ActionFailurePolicy,
    RunOutcome,
    SkipReason,
    WorkflowExecutionStatus,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

# Rows an operator has not already finalized; the terminal write applies only to these.
_WRITABLE = (WorkflowExecutionStatus.RUNNING, WorkflowExecutionStatus.PAUSED)


class WorkflowRunController:
    """Orchestrates trigger check, condition check and sequential action dispatch."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        execution_repo: IWorkflowExecutionRepository,
        contact_repo: IContactRepository,
        dispatcher: ActionDispatcher,
        *,
        trigger_classifier: TriggerClassifier | None = None,
        condition_evaluator: ConditionEvaluator | None = None,
        default_failure_policy: ActionFailurePolicy = ActionFailurePolicy.CONTINUE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._workflows = workflow_repo
        self._executions = execution_repo
        self._contacts = contact_repo
        self._dispatcher = dispatcher
        self._conditions = condition_evaluator or ConditionEvaluator()
        self._triggers = trigger_classifier or TriggerClassifier(
            condition_evaluator=self._conditions, clock=clock
        )
        self._default_policy = default_failure_policy
        self._clock = clock

    @traced("workflow.run")
    async def run(
        self,
        workflow_id: str,
        contact_id: str,
        trigger_payload: Mapping[str, Any] | None = None,
        *,
        tenant_id: str | None = None,
    ) -> ExecutionResult:
        """Run workflow_id for contact_id.

        Args:
            workflow_id: Definition id.
            contact_id: Contact the actions target.
            trigger_payload: Event data; merged over the contact record for conditions.
            tenant_id: When given, the definition must belong to this tenant.

        Returns:
            Skipped result (no execution row) or the finished execution with per-action results.

        Raises:
            ResourceNotFoundException: Workflow or contact does not exist.
            UnknownActionTypeException: A stored action has an unknown type;
                the execution is recorded FAILED before this propagates.
        """
        definition = await self._workflows.get_definition(workflow_id, tenant_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", workflow_id)

        if not definition.is_active:
            return self._skip(definition, contact_id, SkipReason.INACTIVE)

        if not self._triggers.is_eligible(definition, trigger_payload):
            return self._skip(definition, contact_id, SkipReason.TRIGGER_NOT_MET)

        contact = await self._contacts.get_contact(contact_id)
        if contact is None:
            raise ResourceNotFoundException("contact", contact_id)
        record = {**contact, **(trigger_payload or {})}
        if not self._conditions.evaluate_all(definition.conditions, record):
            return self._skip(definition, contact_id, SkipReason.CONDITIONS_NOT_MET)

        execution = await self._executions.create_execution(
            WorkflowExecution(
                id=generate_cuid(),
                tenant_id=definition.tenant_id,
                workflow_id=definition.id,
                contact_id=contact_id,
                status=WorkflowExecutionStatus.RUNNING,
                context={
                    "trigger_data": dict(trigger_payload) if trigger_payload else None,
                    "contact_id": contact_id,
                },
                started_at=self._clock(),
            )
        )
        add_span_attributes(execution_id=execution.id)
        logger.info(
            "Workflow %s execution %s started for contact %s",
            definition.id,
            execution.id,
            contact_id,
        )

        policy = definition.failure_policy or self._default_policy
        results: list[ActionResult] = []
        try:
            for action in definition.actions:
                result = await self._dispatcher.execute(
                    action, contact_id, trigger_payload
                )
                results.append(result)
                if not result.succeeded and policy is ActionFailurePolicy.ABORT:
                    break
        except Exception as e:
            logger.exception(
                "Workflow %s execution %s failed", definition.id, execution.id
            )
            await self._finish(
                execution,
                results,
                WorkflowExecutionStatus.FAILED,
                error_message=str(e) or e.__class__.__name__,
            )
            raise

        failed = next((r for r in results if not r.succeeded), None)
        if failed is not None and policy is ActionFailurePolicy.ABORT:
            error = failed.detail.get("error", "action failed")
            execution = await self._finish(
                execution,
                results,
                WorkflowExecutionStatus.FAILED,
                error_message=f"Action {len(results)} ({failed.type}) failed: {error}",
            )
            return ExecutionResult(
                status=RunOutcome.FAILED, execution=execution, results=results
            )

        execution = await self._finish(
            execution, results, WorkflowExecutionStatus.COMPLETED
        )
        return ExecutionResult(
            status=RunOutcome.COMPLETED, execution=execution, results=results
        )

    def _skip(
        self, definition: WorkflowDefinition, contact_id: str, reason: SkipReason
    ) -> ExecutionResult:
        logger.info(
            "Workflow %s skipped for contact %s: %s",
            definition.id,
            contact_id,
            reason.value,
        )
        return ExecutionResult.skipped(reason)

    async def _finish(
        self,
        execution: WorkflowExecution,
        results: list[ActionResult],
        status: WorkflowExecutionStatus,
        *,
        error_message: str | None = None,
    ) -> WorkflowExecution:
        """Write the terminal status once; leave rows an operator already finalized."""
        completed_at = self._clock()
        context = {**execution.context, "result": [r.to_dict() for r in results]}
        applied = await self._executions.update_execution(
            execution.id,
            ExecutionUpdate(
                status=status,
                completed_at=completed_at,
                context=context,
                error_message=error_message,
            ),
            expected=_WRITABLE,
        )
        if not applied:
            logger.warning(
                "Execution %s was finalized externally; %s not recorded",
                execution.id,
                status.value,
            )
            current = await self._executions.get_execution(execution.id)
            return current or execution

        logger.info("Execution %s finished with status %s", execution.id, status.value)
        execution.status = status
        execution.completed_at = completed_at
        execution.context = context
        execution.error_message = error_message
        return execution
