"""Status Configuration and Transition Rules

Defines the manufacturing item status values, the triggers that move an
item between them, and the dashboard buckets derived from status.

The values here are part of the persisted contract and must match what
is already stored in ``manufacturing_items``.
"""
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List


# =============================================================================
# Manufacturing Item Status
# =============================================================================

class ManufacturingStatus(str, Enum):
    """Valid status values for manufacturing items"""
    PENDING_PRINTING = "pending-printing"
    PENDING_MILLING = "pending-milling"
    PRINTING = "printing"
    MILLING = "milling"
    IN_TRANSIT = "in-transit"
    INSPECTION = "inspection"
    COMPLETED = "completed"


TERMINAL_STATUSES: FrozenSet[str] = frozenset({ManufacturingStatus.COMPLETED.value})

NON_TERMINAL_STATUSES: FrozenSet[str] = frozenset(
    s.value for s in ManufacturingStatus if s.value not in TERMINAL_STATUSES
)


class ManufacturingTrigger(str, Enum):
    """User actions that request a status change"""
    START_PRINTING = "start-printing"
    START_MILLING = "start-milling"
    COMPLETE_PRINTING = "complete-printing"
    SHIP_BY_LAB = "ship-by-lab"
    START_INSPECTION = "start-inspection"
    COMPLETE_INSPECTION = "complete-inspection"


# Display labels used by list views and exports
TRIGGER_LABELS: Dict[str, str] = {
    ManufacturingTrigger.START_PRINTING.value: "Start Printing",
    ManufacturingTrigger.START_MILLING.value: "Start Milling",
    ManufacturingTrigger.COMPLETE_PRINTING.value: "Complete Printing",
    ManufacturingTrigger.SHIP_BY_LAB.value: "Shipped by Lab",
    ManufacturingTrigger.START_INSPECTION.value: "Start Inspection",
    ManufacturingTrigger.COMPLETE_INSPECTION.value: "Complete Inspection",
}

STATUS_LABELS: Dict[str, str] = {
    ManufacturingStatus.PENDING_PRINTING.value: "New Script",
    ManufacturingStatus.PENDING_MILLING.value: "New Script",
    ManufacturingStatus.PRINTING.value: "Printing",
    ManufacturingStatus.MILLING.value: "Milling",
    ManufacturingStatus.IN_TRANSIT.value: "In Transit",
    ManufacturingStatus.INSPECTION.value: "Inspection",
    ManufacturingStatus.COMPLETED.value: "Completed",
}


# =============================================================================
# Case descriptor vocabularies
# =============================================================================

class ManufacturingMethod(str, Enum):
    """Fabrication path, fixed when the item is created"""
    PRINTING = "printing"
    MILLING = "milling"


INITIAL_STATUS_BY_METHOD: Dict[str, str] = {
    ManufacturingMethod.PRINTING.value: ManufacturingStatus.PENDING_PRINTING.value,
    ManufacturingMethod.MILLING.value: ManufacturingStatus.PENDING_MILLING.value,
}


def initial_status_for(method: str) -> str:
    """Initial status of a newly created item for its manufacturing method"""
    method = ManufacturingMethod(method).value
    return INITIAL_STATUS_BY_METHOD[method]


class ArchType(str, Enum):
    UPPER = "upper"
    LOWER = "lower"
    DUAL = "dual"


class YesNo(str, Enum):
    YES = "yes"
    NO = "no"


class GingivaColor(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    CUSTOM = "custom"


class ChecklistResult(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class InspectionStatus(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


# Persisted column names of the four inspection checklist entries
INSPECTION_CHECKLIST_FIELDS: List[str] = [
    "print_quality",
    "physical_defects",
    "screw_access_channel",
    "mua_platform",
]


def inspection_outcome(results: Iterable[str]) -> str:
    """approved iff every checklist result is pass, else rejected"""
    if all(result == ChecklistResult.PASS.value for result in results):
        return InspectionStatus.APPROVED.value
    return InspectionStatus.REJECTED.value


# =============================================================================
# Dashboard Buckets
# =============================================================================

class Bucket(str, Enum):
    """Named groupings shown as count cards on the manufacturing dashboard"""
    NEW_SCRIPT = "new-script"
    PRINTING = "printing"
    MILLING = "milling"
    IN_TRANSIT = "in-transit"
    INSPECTION = "inspection"
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"
    ALL = "all"


BUCKET_STATUSES: Dict[str, FrozenSet[str]] = {
    Bucket.NEW_SCRIPT.value: frozenset({
        ManufacturingStatus.PENDING_PRINTING.value,
        ManufacturingStatus.PENDING_MILLING.value,
    }),
    Bucket.PRINTING.value: frozenset({ManufacturingStatus.PRINTING.value}),
    Bucket.MILLING.value: frozenset({ManufacturingStatus.MILLING.value}),
    Bucket.IN_TRANSIT.value: frozenset({ManufacturingStatus.IN_TRANSIT.value}),
    Bucket.INSPECTION.value: frozenset({ManufacturingStatus.INSPECTION.value}),
    Bucket.INCOMPLETE.value: NON_TERMINAL_STATUSES,
    Bucket.COMPLETED.value: TERMINAL_STATUSES,
    Bucket.ALL.value: frozenset(s.value for s in ManufacturingStatus),
}
