from fastapi import APIRouter

from sasktask.api.v1.audit import router as audit_router
from sasktask.api.v1.disputes import router as disputes_router
from sasktask.api.v1.recommendations import router as recommendations_router

v1_router = APIRouter()

v1_router.include_router(disputes_router)
v1_router.include_router(recommendations_router)
v1_router.include_router(audit_router)
