"""
Milling Locations API Endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from labops.api.v1.deps import CurrentUser, get_current_user, get_db
from labops.schemas.milling_location import (
    MillingLocationCreate,
    MillingLocationResponse,
    MillingLocationUpdate,
)
from labops.services import milling_locations as service

router = APIRouter()


@router.get("", response_model=List[MillingLocationResponse])
def list_locations(
    active_only: bool = Query(True),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return service.list_milling_locations(db, active_only=active_only)


@router.post("", response_model=MillingLocationResponse, status_code=201)
def create_location(
    request: MillingLocationCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return service.create_milling_location(db, request.name)


@router.patch("/{location_id}", response_model=MillingLocationResponse)
def update_location(
    location_id: str,
    request: MillingLocationUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return service.update_milling_location(db, location_id, request)


@router.delete("/{location_id}", status_code=204)
def delete_location(
    location_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service.delete_milling_location(db, location_id)
