"""
RoadRater Backend — Rating Route Handlers
===========================================

What:  Rating submission (authenticated) and the per-segment rating feed
       (anonymous allowed; personalised with requestedBy when a valid token
       is supplied).
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from roadrater.dependencies import get_rating_service, optional_identity, require_identity
from roadrater.responses import ok
from roadrater.schemas.common import ErrorEnvelope, SuccessEnvelope
from roadrater.schemas.rating import RatingCreate, RatingSubmission, SegmentRatings
from roadrater.security import Identity
from roadrater.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[RatingSubmission],
    responses={
        400: {"description": "Validation failed (details lists every violation)", "model": ErrorEnvelope},
        401: {"description": "Missing, invalid or expired token", "model": ErrorEnvelope},
        404: {"description": "Road segment not found", "model": ErrorEnvelope},
    },
    summary="Rate a road segment",
)
async def submit_rating(
    payload: RatingCreate,
    identity: Identity = Depends(require_identity),
    service: RatingService = Depends(get_rating_service),
) -> SuccessEnvelope:
    result = await service.submit_rating(
        segment_id=payload.segment_id,
        user_id=identity.user_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    return ok(result)


@router.get(
    "/{segment_id}",
    response_model=SuccessEnvelope[SegmentRatings],
    responses={
        400: {"description": "segmentId is not a positive integer", "model": ErrorEnvelope},
        404: {"description": "Road segment not found", "model": ErrorEnvelope},
    },
    summary="Ratings for a segment, newest first, with statistics",
)
async def list_ratings(
    segment_id: str,
    identity: Optional[Identity] = Depends(optional_identity),
    service: RatingService = Depends(get_rating_service),
) -> SuccessEnvelope:
    requested_by = identity.user_id if identity is not None else None
    return ok(await service.list_ratings(segment_id, requested_by=requested_by))
