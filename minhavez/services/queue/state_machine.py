"""Legal status transitions for queue entries, checked before any write."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from minhavez.core.exceptions import CancellationReasonRequiredError, InvalidTransitionError
from minhavez.models.queue_entry import QueueStatus


class QueueAction(str, Enum):
    """Staff (and customer self-cancel) actions on a queue entry."""
    CALL = "call"
    ATTEND = "attend"
    COMPLETE = "complete"
    CANCEL = "cancel"
    NO_SHOW = "no_show"


@dataclass(frozen=True)
class TransitionRule:
    action: str
    sources: FrozenSet[str]
    target: str
    timestamp_field: Optional[str] = None
    requires_reason: bool = False


QUEUE_TRANSITIONS: Dict[QueueAction, TransitionRule] = {
    QueueAction.CALL: TransitionRule(
        QueueAction.CALL.value,
        frozenset({QueueStatus.WAITING.value}),
        QueueStatus.CALLED.value,
        "called_at",
    ),
    QueueAction.ATTEND: TransitionRule(
        QueueAction.ATTEND.value,
        frozenset({QueueStatus.CALLED.value}),
        QueueStatus.ATTENDING.value,
        "attended_at",
    ),
    QueueAction.COMPLETE: TransitionRule(
        QueueAction.COMPLETE.value,
        frozenset({QueueStatus.ATTENDING.value}),
        QueueStatus.COMPLETED.value,
        "completed_at",
    ),
    QueueAction.CANCEL: TransitionRule(
        QueueAction.CANCEL.value,
        frozenset({QueueStatus.WAITING.value, QueueStatus.CALLED.value}),
        QueueStatus.CANCELLED.value,
        requires_reason=True,
    ),
    QueueAction.NO_SHOW: TransitionRule(
        QueueAction.NO_SHOW.value,
        frozenset({QueueStatus.WAITING.value, QueueStatus.CALLED.value}),
        QueueStatus.NO_SHOW.value,
    ),
}


def can_transition(rules: Dict[Any, TransitionRule], current_status, action) -> bool:
    rule = rules.get(action)
    return rule is not None and _value(current_status) in rule.sources


def build_transition_changes(
    rules: Dict[Any, TransitionRule],
    current_status,
    action,
    *,
    now: datetime,
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Validate an action against the table and return the column updates.

    Raises InvalidTransitionError or CancellationReasonRequiredError before
    anything is written. Never touches `position`.
    """
    rule = rules.get(action)
    if rule is None:
        raise InvalidTransitionError(f"Unknown action '{_value(action)}'")

    status = _value(current_status)
    if status not in rule.sources:
        raise InvalidTransitionError(
            f"Cannot {rule.action} an entry that is {status}"
        )

    changes: Dict[str, Any] = {"status": rule.target}
    if rule.timestamp_field:
        changes[rule.timestamp_field] = now.isoformat()
    if rule.requires_reason:
        cleaned = (reason or "").strip()
        if not cleaned:
            raise CancellationReasonRequiredError("A cancellation reason is required")
        changes["cancellation_reason"] = cleaned
    return changes


def allowed_actions(rules: Dict[Any, TransitionRule], current_status):
    """Actions available from a status, in table order. Used to render dashboard buttons."""
    status = _value(current_status)
    return [action for action, rule in rules.items() if status in rule.sources]


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)
