"""
Manufacturing Item Pydantic Schemas

Request payloads for each lifecycle trigger and the item/milling form
responses. Trigger payload fields are optional at the schema level so
the transition engine can report exactly which required field is
missing for the item at hand.
"""
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, Field

from labops.core.status_config import (
    ArchType,
    ChecklistResult,
    GingivaColor,
    InspectionStatus,
    ManufacturingMethod,
    YesNo,
)


# ============================================================================
# Item Schemas
# ============================================================================

class ManufacturingItemCreate(BaseModel):
    """Case data produced by lab script conversion"""
    patient_name: str = Field(..., min_length=1, max_length=255)
    arch_type: ArchType
    upper_appliance_type: Optional[str] = Field(None, max_length=100)
    lower_appliance_type: Optional[str] = Field(None, max_length=100)
    upper_appliance_number: Optional[str] = Field(None, max_length=50)
    lower_appliance_number: Optional[str] = Field(None, max_length=50)
    is_nightguard_needed: YesNo = YesNo.NO
    upper_nightguard_number: Optional[str] = Field(None, max_length=50)
    lower_nightguard_number: Optional[str] = Field(None, max_length=50)
    shade: str = Field(..., min_length=1, max_length=50)
    material: Optional[str] = Field(None, max_length=100)
    screw: Optional[str] = Field(None, max_length=100)
    manufacturing_method: ManufacturingMethod
    lab_script_id: Optional[str] = None
    lab_report_card_id: Optional[str] = None
    patient_id: Optional[str] = None


class ManufacturingItemResponse(BaseModel):
    """Full manufacturing item"""
    id: str
    lab_script_id: Optional[str] = None
    lab_report_card_id: Optional[str] = None
    patient_id: Optional[str] = None
    patient_name: str
    arch_type: str
    upper_appliance_type: Optional[str] = None
    lower_appliance_type: Optional[str] = None
    upper_appliance_number: Optional[str] = None
    lower_appliance_number: Optional[str] = None
    is_nightguard_needed: str
    upper_nightguard_number: Optional[str] = None
    lower_nightguard_number: Optional[str] = None
    shade: str
    material: Optional[str] = None
    screw: Optional[str] = None
    manufacturing_method: str
    status: str
    milling_location: Optional[str] = None
    gingiva_color: Optional[str] = None
    stained_and_glazed: Optional[str] = None
    cementation: Optional[str] = None
    additional_notes: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_link: Optional[str] = None
    printing_completed_at: Optional[datetime] = None
    printing_completed_by: Optional[str] = None
    printing_completed_by_name: Optional[str] = None
    print_quality: Optional[str] = None
    physical_defects: Optional[str] = None
    screw_access_channel: Optional[str] = None
    mua_platform: Optional[str] = None
    inspection_status: Optional[str] = None
    inspection_completed_at: Optional[datetime] = None
    inspection_completed_by: Optional[str] = None
    inspection_completed_by_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Trigger Payloads
# ============================================================================

class StartMillingRequest(BaseModel):
    """Milling instructions captured when milling starts"""
    milling_location: Optional[str] = Field(None, max_length=100)
    gingiva_color: Optional[GingivaColor] = None
    stained_and_glazed: Optional[YesNo] = None
    cementation: Optional[YesNo] = None
    additional_notes: Optional[str] = None


class CompletionAttribution(BaseModel):
    """Who completed a step, and when"""
    completion_date: Optional[date] = Field(None, description="YYYY-MM-DD")
    completion_time: Optional[time] = Field(None, description="HH:MM")
    completed_by: Optional[str] = Field(None, description="User id")
    completed_by_name: Optional[str] = Field(None, max_length=255)


class PrintingCompletionRequest(CompletionAttribution):
    """Complete Printing payload"""


class InspectionCompletionRequest(CompletionAttribution):
    """Complete Inspection payload: checklist results plus attribution"""
    print_quality: Optional[ChecklistResult] = None
    physical_defects: Optional[ChecklistResult] = None
    screw_access_channel: Optional[ChecklistResult] = None
    mua_platform: Optional[ChecklistResult] = None
    inspection_status: Optional[InspectionStatus] = Field(
        None, description="Optional confirmation; must agree with the checklist"
    )


class ShippingRequest(BaseModel):
    """Shipped by Lab payload"""
    tracking_number: Optional[str] = Field(None, max_length=100)
    tracking_link: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Milling Form / Transition Schemas
# ============================================================================

class MillingFormResponse(BaseModel):
    """Milling instruction snapshot"""
    id: str
    manufacturing_item_id: str
    patient_name: str
    milling_location: str
    gingiva_color: Optional[str] = None
    stained_and_glazed: Optional[str] = None
    cementation: Optional[str] = None
    additional_notes: Optional[str] = None
    upper_appliance_type: Optional[str] = None
    lower_appliance_type: Optional[str] = None
    upper_appliance_number: Optional[str] = None
    lower_appliance_number: Optional[str] = None
    shade: Optional[str] = None
    screw: Optional[str] = None
    material: Optional[str] = None
    arch_type: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TransitionOption(BaseModel):
    """A trigger available from the item's current status"""
    trigger: str
    label: str
    target_status: str
    required_fields: List[str] = []


class TransitionOptionsResponse(BaseModel):
    item_id: str
    status: str
    is_terminal: bool
    transitions: List[TransitionOption]
