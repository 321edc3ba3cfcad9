import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sasktask.api.deps import get_db, get_session_factory
from sasktask.common.enums import AnalysisType
from sasktask.common.exceptions import NotFoundError
from sasktask.common.logging import get_logger
from sasktask.common.pagination import PaginatedResponse, PaginationParams
from sasktask.core.disputes.schemas import DisputeAnalysisResult
from sasktask.core.disputes.service import DisputeAnalysisService

logger = get_logger("api.disputes")

router = APIRouter(prefix="/disputes", tags=["Disputes"])


# ---------- Schemas ----------


class AnalyzeDisputeRequest(BaseModel):
    dispute_id: str | None = Field(None, alias="disputeId")
    analysis_type: str | None = Field(None, alias="analysisType")

    model_config = {"populate_by_name": True}


class AnalyzeDisputeResponse(BaseModel):
    success: bool
    analysis: DisputeAnalysisResult | None = None
    error: str | None = None


# ---------- Dependencies ----------


def get_analysis_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> DisputeAnalysisService:
    return DisputeAnalysisService(session_factory)


# ---------- Endpoints ----------


@router.post("/analyze", response_model=AnalyzeDisputeResponse)
async def analyze_dispute(
    body: AnalyzeDisputeRequest,
    service: DisputeAnalysisService = Depends(get_analysis_service),
):
    if not body.dispute_id:
        return _failure(400, "Dispute ID is required")

    try:
        analysis_type = AnalysisType(body.analysis_type or AnalysisType.INITIAL.value)
    except ValueError:
        return _failure(400, f"Unknown analysis type: {body.analysis_type}")

    try:
        analysis = await service.analyze(body.dispute_id, analysis_type)
    except NotFoundError as e:
        return _failure(404, e.detail)
    except Exception:
        logger.exception("Dispute analysis failed for %s", body.dispute_id)
        return _failure(500, "Dispute analysis failed")

    return AnalyzeDisputeResponse(success=True, analysis=analysis)


@router.get("/{dispute_id}/analyses", response_model=PaginatedResponse[DisputeAnalysisResult])
async def list_dispute_analyses(
    dispute_id: uuid.UUID,
    params: PaginationParams = Depends(),
    service: DisputeAnalysisService = Depends(get_analysis_service),
    db: AsyncSession = Depends(get_db),
):
    items, total = await service.list_analyses(dispute_id, params, db)
    return PaginatedResponse[DisputeAnalysisResult].build(items, total, params)


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AnalyzeDisputeResponse(success=False, error=error).model_dump(mode="json"),
    )
