"""
Manufacturing Items API Endpoints

Dashboard list/count views and one endpoint per lifecycle trigger.
Errors raised by the services are LabOpsException subclasses and are
rendered by the application-level exception handler.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from labops.api.v1.deps import CurrentUser, get_current_user, get_db
from labops.core.status_config import TERMINAL_STATUSES, TRIGGER_LABELS, Bucket
from labops.exceptions import NotFoundError
from labops.schemas.manufacturing import (
    InspectionCompletionRequest,
    ManufacturingItemCreate,
    ManufacturingItemResponse,
    MillingFormResponse,
    PrintingCompletionRequest,
    ShippingRequest,
    StartMillingRequest,
    TransitionOption,
    TransitionOptionsResponse,
)
from labops.schemas.manufacturing_view import (
    BucketCountsResponse,
    FilterOptionCountsResponse,
    ManufacturingFilters,
    SortDirection,
    SortField,
    SortSpec,
)
from labops.schemas.report import ManufacturingReport
from labops.services import fabrication, shipping
from labops.services.manufacturing_items import (
    create_manufacturing_item,
    delete_manufacturing_item,
)
from labops.services.manufacturing_view import (
    count_by_bucket,
    filter_and_sort,
    filter_option_counts,
)
from labops.services.report import build_manufacturing_report
from labops.services.store import ManufacturingItemStore, MillingFormStore
from labops.services.transition_engine import allowed_rules

router = APIRouter()


# ============================================================================
# List / Dashboard
# ============================================================================

@router.get("", response_model=List[ManufacturingItemResponse])
def list_manufacturing_items(
    status: List[str] = Query(default=[]),
    arch_type: List[str] = Query(default=[]),
    appliance_type: List[str] = Query(default=[]),
    material: List[str] = Query(default=[]),
    shade: List[str] = Query(default=[]),
    manufacturing_method: List[str] = Query(default=[]),
    milling_location: List[str] = Query(default=[]),
    inspection_status: List[str] = Query(default=[]),
    search: Optional[str] = Query(None, description="Patient name contains"),
    bucket: Optional[Bucket] = Query(None, description="Dashboard tab"),
    sort_by: SortField = Query(SortField.CREATED_AT),
    direction: SortDirection = Query(SortDirection.DESC),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Filtered, sorted manufacturing items."""
    filters = ManufacturingFilters(
        status=status,
        arch_type=arch_type,
        appliance_type=appliance_type,
        material=material,
        shade=shade,
        manufacturing_method=manufacturing_method,
        milling_location=milling_location,
        inspection_status=inspection_status,
        search=search,
        bucket=bucket,
    )
    items = ManufacturingItemStore(db).list()
    return filter_and_sort(items, filters, SortSpec(sort_by=sort_by, direction=direction))


@router.get("/counts", response_model=BucketCountsResponse)
def get_bucket_counts(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Count cards for the dashboard."""
    return BucketCountsResponse(counts=count_by_bucket(ManufacturingItemStore(db).list()))


@router.get("/filter-options", response_model=FilterOptionCountsResponse)
def get_filter_options(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Values present per filter category, with counts."""
    return FilterOptionCountsResponse(options=filter_option_counts(ManufacturingItemStore(db).list()))


@router.post("", response_model=ManufacturingItemResponse, status_code=201)
def create_item(
    request: ManufacturingItemCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Register an item from a converted lab script."""
    return create_manufacturing_item(db, request)


@router.get("/{item_id}", response_model=ManufacturingItemResponse)
def get_item(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ManufacturingItemStore(db).get(item_id)


@router.delete("/{item_id}", status_code=204)
def delete_item(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete an item that has no milling form."""
    delete_manufacturing_item(db, item_id)


@router.get("/{item_id}/transitions", response_model=TransitionOptionsResponse)
def get_item_transitions(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Actions available from the item's current status."""
    item = ManufacturingItemStore(db).get(item_id)
    return TransitionOptionsResponse(
        item_id=item.id,
        status=item.status,
        is_terminal=item.status in TERMINAL_STATUSES,
        transitions=[
            TransitionOption(
                trigger=rule.trigger,
                label=TRIGGER_LABELS[rule.trigger],
                target_status=rule.target,
                required_fields=list(rule.required_fields),
            )
            for rule in allowed_rules(item.status)
        ],
    )


# ============================================================================
# Lifecycle Triggers
# ============================================================================

@router.post("/{item_id}/start-printing", response_model=ManufacturingItemResponse)
def start_printing(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return fabrication.start_printing(db, item_id, actor=current_user.label)


@router.post("/{item_id}/start-milling", response_model=ManufacturingItemResponse)
def start_milling(
    item_id: str,
    request: StartMillingRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return fabrication.start_milling(db, item_id, request, actor=current_user.label)


@router.post("/{item_id}/complete-printing", response_model=ManufacturingItemResponse)
def complete_printing(
    item_id: str,
    request: PrintingCompletionRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return fabrication.complete_printing(db, item_id, request, actor=current_user.label)


@router.post("/{item_id}/ship", response_model=ManufacturingItemResponse)
def ship_item(
    item_id: str,
    request: ShippingRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return shipping.ship_by_lab(db, item_id, request, actor=current_user.label)


@router.post("/{item_id}/start-inspection", response_model=ManufacturingItemResponse)
def start_inspection(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return fabrication.start_inspection(db, item_id, actor=current_user.label)


@router.post("/{item_id}/complete-inspection", response_model=ManufacturingItemResponse)
def complete_inspection(
    item_id: str,
    request: InspectionCompletionRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return fabrication.complete_inspection(db, item_id, request, actor=current_user.label)


# ============================================================================
# Milling Form / Report
# ============================================================================

@router.get("/{item_id}/milling-form", response_model=MillingFormResponse)
def get_milling_form(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    ManufacturingItemStore(db).get(item_id)
    form = MillingFormStore(db).get_by_item(item_id)
    if form is None:
        raise NotFoundError("Milling form for manufacturing item", item_id)
    return form


@router.post("/{item_id}/milling-form/repair", response_model=MillingFormResponse)
def repair_milling_form(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Recreate a missing milling form from the item's milling fields."""
    return fabrication.ensure_milling_form(db, item_id)


@router.get("/{item_id}/report", response_model=ManufacturingReport)
def get_report(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    item = ManufacturingItemStore(db).get(item_id)
    return build_manufacturing_report(item, MillingFormStore(db).get_by_item(item_id))
