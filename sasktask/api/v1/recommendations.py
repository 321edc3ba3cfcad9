import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from sasktask.api.deps import get_db
from sasktask.common.exceptions import BadRequestError, NotFoundError
from sasktask.core.matching.service import RecommendationResult, RecommendationService

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


# ---------- Schemas ----------


class TaskRecommendationRequest(BaseModel):
    user_id: str | None = Field(None, alias="userId")
    user_latitude: float | None = Field(None, alias="userLatitude")
    user_longitude: float | None = Field(None, alias="userLongitude")
    max_distance: float | None = Field(None, alias="maxDistance", gt=0)

    model_config = {"populate_by_name": True}


# ---------- Endpoints ----------


@router.post("/tasks", response_model=RecommendationResult)
async def recommend_tasks(
    body: TaskRecommendationRequest,
    db: AsyncSession = Depends(get_db),
):
    if not body.user_id:
        raise BadRequestError("User ID is required")
    try:
        user_id = uuid.UUID(body.user_id)
    except ValueError:
        raise NotFoundError("User", body.user_id)

    service = RecommendationService()
    return await service.recommend(
        user_id,
        db,
        latitude=body.user_latitude,
        longitude=body.user_longitude,
        max_distance_km=body.max_distance,
    )
