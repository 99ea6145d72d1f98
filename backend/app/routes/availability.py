# backend/app/routes/availability.py
"""
Availability routes.

- /api/availability/effective: the resolved opening hours for a date (public)
- /api/global-availability: the weekly template (writes are admin-only)
- /api/special-availability: date-ranged overrides (admin-only)
"""

import asyncio
from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..api.dependencies.auth import require_admin
from ..api.dependencies.services import get_availability_service
from ..models.user import User
from ..schemas.availability import (
    AvailabilityRowResponse,
    EffectiveAvailabilityResponse,
    GlobalAvailabilityBulk,
    GlobalAvailabilityIn,
    SpecialAvailabilityIn,
)
from ..services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability"])


@router.get("/api/availability/effective", response_model=EffectiveAvailabilityResponse)
async def get_effective_availability(
    target_date: date = Query(..., alias="date"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> EffectiveAvailabilityResponse:
    resolved = await asyncio.to_thread(availability_service.resolve_for_date, target_date)
    return EffectiveAvailabilityResponse(**resolved.to_dict())


# Global availability


@router.get("/api/global-availability", response_model=List[AvailabilityRowResponse])
async def list_global_availability(
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityRowResponse]:
    rows = await asyncio.to_thread(availability_service.list_global)
    return [AvailabilityRowResponse.model_validate(row) for row in rows]


@router.post("/api/global-availability", response_model=AvailabilityRowResponse)
async def upsert_global_availability(
    body: GlobalAvailabilityIn,
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRowResponse:
    """Create or update the row for this day and date window."""
    row = await asyncio.to_thread(availability_service.upsert_global, body.model_dump())
    return AvailabilityRowResponse.model_validate(row)


@router.put("/api/global-availability", response_model=List[AvailabilityRowResponse])
async def bulk_upsert_global_availability(
    body: GlobalAvailabilityBulk,
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityRowResponse]:
    """Save a whole week (or several windows) at once; all or nothing."""
    rows = await asyncio.to_thread(
        availability_service.bulk_upsert_global, [item.model_dump() for item in body.items]
    )
    return [AvailabilityRowResponse.model_validate(row) for row in rows]


@router.delete("/api/global-availability/{availability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_global_availability(
    availability_id: str,
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Response:
    await asyncio.to_thread(availability_service.delete_global, availability_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Special availability


@router.get("/api/special-availability", response_model=List[AvailabilityRowResponse])
async def list_special_availability(
    check_date: Optional[date] = Query(None, alias="date"),
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityRowResponse]:
    rows = await asyncio.to_thread(availability_service.list_special, check_date)
    return [AvailabilityRowResponse.model_validate(row) for row in rows]


@router.post("/api/special-availability", response_model=AvailabilityRowResponse)
async def upsert_special_availability(
    body: SpecialAvailabilityIn,
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRowResponse:
    row = await asyncio.to_thread(availability_service.upsert_special, body.model_dump())
    return AvailabilityRowResponse.model_validate(row)


@router.delete("/api/special-availability/{availability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_special_availability(
    availability_id: str,
    _: User = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Response:
    await asyncio.to_thread(availability_service.delete_special, availability_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
