"""
University endpoints
====================

GET /api/v1/universities       -- all universities, optionally by city
GET /api/v1/universities/{id}  -- one university
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from tareeqi.api.dependencies import get_requester, get_university_service
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import UniversityListResponse, UniversityResponse
from tareeqi.domain.entities import Requester
from tareeqi.services.universities import UniversityService

router = APIRouter(prefix="/universities", tags=["universities"])


@router.get("", response_model=UniversityListResponse, summary="List universities")
@limiter.limit(RATE_LIMIT)
async def list_universities(
    request: Request,
    city: Optional[str] = None,
    requester: Requester = Depends(get_requester),
    service: UniversityService = Depends(get_university_service),
):
    universities = await service.list_universities(city)
    return UniversityListResponse(
        data=[UniversityResponse.model_validate(u) for u in universities],
        count=len(universities),
    )


@router.get(
    "/{university_id}", response_model=UniversityResponse, summary="Get a university"
)
@limiter.limit(RATE_LIMIT)
async def get_university(
    request: Request,
    university_id: int,
    requester: Requester = Depends(get_requester),
    service: UniversityService = Depends(get_university_service),
):
    return await service.get_university(university_id)
