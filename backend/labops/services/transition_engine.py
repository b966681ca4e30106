"""
Manufacturing Transition Engine

The lifecycle as explicit data: each trigger maps to exactly one
(source status, target status, patch builder) rule. A patch builder
validates the payload for its transition and returns the fields to
write; the engine adds the new status and applies everything through
the item store in a single write guarded by the expected source status.

The table is checked when this module is imported, so a missing or
ambiguous rule fails at startup rather than as a silent no-op.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from labops.core.appliance_rules import item_requires_cementation
from labops.core.status_config import (
    INSPECTION_CHECKLIST_FIELDS,
    NON_TERMINAL_STATUSES,
    TERMINAL_STATUSES,
    ChecklistResult,
    InspectionStatus,
    ManufacturingStatus,
    ManufacturingTrigger,
    inspection_outcome,
)
from labops.exceptions import (
    InvalidTransitionError,
    MissingRequiredFieldError,
    ValidationError,
)
from labops.logging_config import get_logger
from labops.models.manufacturing_item import ManufacturingItem
from labops.services.store import ManufacturingItemStore

logger = get_logger(__name__)

PatchBuilder = Callable[[ManufacturingItem, Mapping[str, Any]], Dict[str, Any]]

ATTRIBUTION_FIELDS: Tuple[str, ...] = (
    "completion_date",
    "completion_time",
    "completed_by",
    "completed_by_name",
)


@dataclass(frozen=True)
class TransitionRule:
    trigger: str
    source: str
    target: str
    required_fields: Tuple[str, ...]
    build_patch: PatchBuilder


# =============================================================================
# Payload helpers
# =============================================================================

def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def normalize_payload(payload: Optional[Any]) -> Dict[str, Any]:
    """Accept a dict or a pydantic model; strip strings, unwrap enums, drop blanks."""
    if payload is None:
        return {}
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump()
    normalized = {}
    for key, value in dict(payload).items():
        value = _plain(value)
        if value is not None:
            normalized[key] = value
    return normalized


def _require(payload: Mapping[str, Any], *fields: str) -> None:
    for field in fields:
        if payload.get(field) in (None, ""):
            raise MissingRequiredFieldError(field)


def _as_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("Expected a date formatted YYYY-MM-DD", field=field, value=value)


def _as_time(value: Any, field: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("Expected a time formatted HH:MM", field=field, value=value)


def _completion_moment(payload: Mapping[str, Any]) -> datetime:
    _require(payload, *ATTRIBUTION_FIELDS)
    return datetime.combine(
        _as_date(payload["completion_date"], "completion_date"),
        _as_time(payload["completion_time"], "completion_time"),
    )


def _one_of(payload: Mapping[str, Any], field: str, enum_cls) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValidationError(
            f"'{field}' must be one of {', '.join(allowed)}", field=field, value=value
        )
    return value


# =============================================================================
# Patch builders, one per trigger
# =============================================================================

def _no_fields(item: ManufacturingItem, payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {}


def _milling_patch(item: ManufacturingItem, payload: Mapping[str, Any]) -> Dict[str, Any]:
    _require(payload, "milling_location")
    if item_requires_cementation(item):
        _require(payload, "cementation")
    return {
        "milling_location": payload["milling_location"],
        "gingiva_color": payload.get("gingiva_color"),
        "stained_and_glazed": payload.get("stained_and_glazed"),
        "cementation": payload.get("cementation"),
        "additional_notes": payload.get("additional_notes"),
    }


def _printing_completion_patch(item: ManufacturingItem, payload: Mapping[str, Any]) -> Dict[str, Any]:
    completed_at = _completion_moment(payload)
    return {
        "printing_completed_at": completed_at,
        "printing_completed_by": payload["completed_by"],
        "printing_completed_by_name": payload["completed_by_name"],
    }


def _shipping_patch(item: ManufacturingItem, payload: Mapping[str, Any]) -> Dict[str, Any]:
    _require(payload, "tracking_number")
    return {
        "tracking_number": payload["tracking_number"],
        "tracking_link": payload.get("tracking_link"),
    }


def _inspection_completion_patch(item: ManufacturingItem, payload: Mapping[str, Any]) -> Dict[str, Any]:
    _require(payload, *INSPECTION_CHECKLIST_FIELDS)
    _require(payload, "inspection_status")
    checklist = {
        field: _one_of(payload, field, ChecklistResult) for field in INSPECTION_CHECKLIST_FIELDS
    }
    status = _one_of(payload, "inspection_status", InspectionStatus)
    expected = inspection_outcome(checklist.values())
    if status != expected:
        raise ValidationError(
            f"Inspection status '{status}' contradicts the checklist (expected '{expected}')",
            field="inspection_status",
            value=status,
        )
    completed_at = _completion_moment(payload)
    return {
        **checklist,
        "inspection_status": status,
        "inspection_completed_at": completed_at,
        "inspection_completed_by": payload["completed_by"],
        "inspection_completed_by_name": payload["completed_by_name"],
    }


# =============================================================================
# Transition table
# =============================================================================

_S = ManufacturingStatus
_T = ManufacturingTrigger

TRANSITION_RULES: List[TransitionRule] = [
    TransitionRule(
        _T.START_PRINTING.value, _S.PENDING_PRINTING.value, _S.PRINTING.value,
        (), _no_fields,
    ),
    TransitionRule(
        _T.START_MILLING.value, _S.PENDING_MILLING.value, _S.MILLING.value,
        ("milling_location",), _milling_patch,
    ),
    TransitionRule(
        _T.COMPLETE_PRINTING.value, _S.PRINTING.value, _S.COMPLETED.value,
        ATTRIBUTION_FIELDS, _printing_completion_patch,
    ),
    TransitionRule(
        _T.SHIP_BY_LAB.value, _S.MILLING.value, _S.IN_TRANSIT.value,
        ("tracking_number",), _shipping_patch,
    ),
    TransitionRule(
        _T.START_INSPECTION.value, _S.IN_TRANSIT.value, _S.INSPECTION.value,
        (), _no_fields,
    ),
    TransitionRule(
        _T.COMPLETE_INSPECTION.value, _S.INSPECTION.value, _S.COMPLETED.value,
        tuple(INSPECTION_CHECKLIST_FIELDS) + ("inspection_status",) + ATTRIBUTION_FIELDS,
        _inspection_completion_patch,
    ),
]


def _build_table(rules: List[TransitionRule]) -> Dict[str, TransitionRule]:
    """Index rules by trigger and verify the table covers the whole lifecycle."""
    statuses = {s.value for s in ManufacturingStatus}
    table: Dict[str, TransitionRule] = {}
    for rule in rules:
        if rule.trigger in table:
            raise RuntimeError(f"Duplicate transition rule for trigger '{rule.trigger}'")
        if rule.source not in statuses or rule.target not in statuses:
            raise RuntimeError(f"Transition '{rule.trigger}' references an unknown status")
        if rule.source in TERMINAL_STATUSES:
            raise RuntimeError(f"Transition '{rule.trigger}' leaves terminal status '{rule.source}'")
        table[rule.trigger] = rule

    missing_triggers = {t.value for t in ManufacturingTrigger} - set(table)
    if missing_triggers:
        raise RuntimeError(f"No transition rule for triggers: {sorted(missing_triggers)}")

    dead_ends = NON_TERMINAL_STATUSES - {rule.source for rule in rules}
    if dead_ends:
        raise RuntimeError(f"Non-terminal statuses without an outbound trigger: {sorted(dead_ends)}")
    return table


TRANSITIONS: Dict[str, TransitionRule] = _build_table(TRANSITION_RULES)


def get_rule(trigger: str) -> TransitionRule:
    try:
        return TRANSITIONS[ManufacturingTrigger(trigger).value]
    except ValueError:
        raise ValidationError(f"Unknown trigger '{trigger}'", field="trigger", value=trigger)


def allowed_rules(status: str) -> List[TransitionRule]:
    """Rules that can fire from a status (empty for completed)."""
    return [rule for rule in TRANSITION_RULES if rule.source == status]


def allowed_triggers(status: str) -> List[str]:
    return [rule.trigger for rule in allowed_rules(status)]


# =============================================================================
# Engine
# =============================================================================

def plan_transition(
    item: ManufacturingItem,
    trigger: str,
    payload: Optional[Any] = None,
) -> Tuple[TransitionRule, Dict[str, Any]]:
    """
    Validate a trigger against an item and compute the full patch, without writing.

    Raises:
        InvalidTransitionError: Trigger does not apply to the item's status
        MissingRequiredFieldError: A field the transition needs is absent
        ValidationError: A supplied value is malformed
    """
    rule = get_rule(trigger)
    if item.status != rule.source:
        raise InvalidTransitionError(
            rule.trigger, item.status, allowed_triggers=allowed_triggers(item.status)
        )
    patch = rule.build_patch(item, normalize_payload(payload))
    patch["status"] = rule.target
    patch["updated_at"] = datetime.utcnow()
    return rule, patch


def apply_transition(
    item_store: ManufacturingItemStore,
    item_id: str,
    trigger: str,
    payload: Optional[Any] = None,
    *,
    actor: Optional[str] = None,
) -> ManufacturingItem:
    """
    Run one lifecycle transition end to end.

    Args:
        item_store: Store holding the item
        item_id: Item to transition
        trigger: One of ManufacturingTrigger
        payload: Trigger fields (dict or pydantic model)
        actor: Requesting user, for the log

    Returns:
        The updated item

    Raises:
        NotFoundError, InvalidTransitionError, MissingRequiredFieldError,
        ValidationError, ConflictError, StoreWriteError
    """
    trigger = getattr(trigger, "value", trigger)
    item = item_store.get(item_id)
    old_status = item.status
    try:
        rule, patch = plan_transition(item, trigger, payload)
    except ValidationError as e:
        logger.warning(
            f"Item {item_id}: {trigger} rejected - {e.message}",
            extra={"item_id": item_id, "trigger": trigger, "actor": actor, "error_code": e.error_code},
        )
        raise
    except InvalidTransitionError as e:
        logger.warning(
            f"Item {item_id}: {e.message}",
            extra={"item_id": item_id, "trigger": trigger, "actor": actor, "error_code": e.error_code},
        )
        raise

    updated = item_store.update(item_id, patch, expected_status=rule.source)

    logger.info(
        f"Item {item_id}: {old_status} → {rule.target}",
        extra={"item_id": item_id, "trigger": rule.trigger, "actor": actor},
    )
    return updated
