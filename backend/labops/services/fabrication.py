"""
Fabrication Workflows

Task-level operations behind the manufacturing dashboard buttons. Each
one is a thin wrapper around the transition engine that adds whatever
the step needs on top of the status change:

- Start Printing / Start Inspection: status change only
- Start Milling: milling fields + immutable milling form snapshot, in one transaction
- Complete Printing: completion attribution on the item
- Complete Inspection: checklist, derived approved/rejected outcome, attribution
"""
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from labops.core.config import settings
from labops.core.status_config import (
    INSPECTION_CHECKLIST_FIELDS,
    ChecklistResult,
    ManufacturingMethod,
    ManufacturingStatus,
    ManufacturingTrigger,
    inspection_outcome,
)
from labops.db.session import unit_of_work
from labops.exceptions import (
    BusinessRuleError,
    InvalidStateError,
    MissingRequiredFieldError,
    ValidationError,
)
from labops.logging_config import get_logger
from labops.models.manufacturing_item import ManufacturingItem
from labops.models.milling_form import MillingForm
from labops.schemas.manufacturing import (
    InspectionCompletionRequest,
    PrintingCompletionRequest,
    StartMillingRequest,
)
from labops.services.milling_locations import is_active_location
from labops.services.store import ManufacturingItemStore, MillingFormStore
from labops.services.transition_engine import (
    apply_transition,
    normalize_payload,
    plan_transition,
)

logger = get_logger(__name__)

# Statuses an item on the milling path can be in once milling has started
_MILLED_STATUSES = frozenset({
    ManufacturingStatus.MILLING.value,
    ManufacturingStatus.IN_TRANSIT.value,
    ManufacturingStatus.INSPECTION.value,
    ManufacturingStatus.COMPLETED.value,
})

_SNAPSHOT_FIELDS = (
    "patient_name",
    "milling_location",
    "gingiva_color",
    "stained_and_glazed",
    "cementation",
    "additional_notes",
    "upper_appliance_type",
    "lower_appliance_type",
    "upper_appliance_number",
    "lower_appliance_number",
    "shade",
    "screw",
    "material",
    "arch_type",
)


def start_printing(db: Session, item_id: str, actor: Optional[str] = None) -> ManufacturingItem:
    """pending-printing → printing"""
    return apply_transition(
        ManufacturingItemStore(db), item_id, ManufacturingTrigger.START_PRINTING, actor=actor
    )


def start_inspection(db: Session, item_id: str, actor: Optional[str] = None) -> ManufacturingItem:
    """in-transit → inspection"""
    return apply_transition(
        ManufacturingItemStore(db), item_id, ManufacturingTrigger.START_INSPECTION, actor=actor
    )


# =============================================================================
# Milling
# =============================================================================

def build_milling_snapshot(item: ManufacturingItem) -> Dict[str, Any]:
    """Milling form record copied from the item's current fields."""
    record = {field: getattr(item, field) for field in _SNAPSHOT_FIELDS}
    record["manufacturing_item_id"] = item.id
    return record


def start_milling(
    db: Session,
    item_id: str,
    request: StartMillingRequest,
    actor: Optional[str] = None,
) -> ManufacturingItem:
    """
    pending-milling → milling, and record the milling form.

    The status patch and the snapshot insert commit together; if either
    fails neither is kept.

    Raises:
        MissingRequiredFieldError: milling_location blank, or cementation
            missing on a tie-bar superstructure case
        ValidationError: location not in the registry (when enforced)
        InvalidTransitionError: item is not pending-milling
    """
    item_store = ManufacturingItemStore(db)
    form_store = MillingFormStore(db)

    if settings.ENFORCE_MILLING_LOCATION_REGISTRY:
        # Status and required fields are reported before the registry check
        _, patch = plan_transition(item_store.get(item_id), ManufacturingTrigger.START_MILLING, request)
        location = patch["milling_location"]
        if not is_active_location(db, location):
            raise ValidationError(
                f"Unknown or inactive milling location '{location}'",
                field="milling_location",
                value=location,
            )

    with unit_of_work(db, "start milling"):
        item = apply_transition(
            item_store, item_id, ManufacturingTrigger.START_MILLING, request, actor=actor
        )
        form = form_store.create(build_milling_snapshot(item))

    logger.info(
        f"Milling started for item {item_id} at {item.milling_location}",
        extra={"item_id": item_id, "milling_form_id": form.id, "actor": actor},
    )
    return item


def ensure_milling_form(db: Session, item_id: str) -> MillingForm:
    """
    Return the item's milling form, creating it from the item if it is missing.

    Repairs items that reached milling without a snapshot (e.g. written
    before both writes shared a transaction).
    """
    item = ManufacturingItemStore(db).get(item_id)
    if item.manufacturing_method != ManufacturingMethod.MILLING.value:
        raise BusinessRuleError(
            "Only milling items have a milling form",
            rule="milling_path_only",
            details={"item_id": item_id, "manufacturing_method": item.manufacturing_method},
        )
    if item.status not in _MILLED_STATUSES:
        raise InvalidStateError(
            "Milling has not started for this item",
            current_state=item.status,
            allowed_states=sorted(_MILLED_STATUSES),
        )
    if not item.milling_location:
        raise MissingRequiredFieldError(
            "milling_location",
            message="Item has no milling location to snapshot",
        )

    form_store = MillingFormStore(db)
    existing = form_store.get_by_item(item_id)
    if existing is not None:
        return existing

    logger.warning(f"Item {item_id} is in {item.status} without a milling form, recreating it")
    return form_store.create(build_milling_snapshot(item))


# =============================================================================
# Completion
# =============================================================================

def complete_printing(
    db: Session,
    item_id: str,
    request: PrintingCompletionRequest,
    actor: Optional[str] = None,
) -> ManufacturingItem:
    """printing → completed, recording who finished the print and when"""
    return apply_transition(
        ManufacturingItemStore(db), item_id, ManufacturingTrigger.COMPLETE_PRINTING, request, actor=actor
    )


def derive_inspection_status(checklist: Mapping[str, Any]) -> str:
    """
    approved iff every checklist entry is pass, else rejected.

    Raises:
        MissingRequiredFieldError: If any of the four entries is absent
        ValidationError: If an entry is neither pass nor fail
    """
    results = []
    for field in INSPECTION_CHECKLIST_FIELDS:
        value = checklist.get(field)
        if value is None or value == "":
            raise MissingRequiredFieldError(field)
        value = getattr(value, "value", value)
        if value not in (ChecklistResult.PASS.value, ChecklistResult.FAIL.value):
            raise ValidationError(f"'{field}' must be pass or fail", field=field, value=value)
        results.append(value)

    return inspection_outcome(results)


def complete_inspection(
    db: Session,
    item_id: str,
    request: InspectionCompletionRequest,
    actor: Optional[str] = None,
) -> ManufacturingItem:
    """
    inspection → completed with the checklist outcome.

    A caller-supplied inspection_status is treated as a confirmation and
    must match the derived one.
    """
    payload = normalize_payload(request)
    # An incomplete checklist or a contradicting confirmation is reported
    # by the engine, after the status check
    if "inspection_status" not in payload and all(
        payload.get(field) for field in INSPECTION_CHECKLIST_FIELDS
    ):
        payload["inspection_status"] = derive_inspection_status(payload)

    return apply_transition(
        ManufacturingItemStore(db), item_id, ManufacturingTrigger.COMPLETE_INSPECTION, payload, actor=actor
    )
