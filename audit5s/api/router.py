"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from audit5s.api.assessments import router as assessments_router

api_router = APIRouter()
api_router.include_router(assessments_router)


@api_router.get("/api/health", tags=["health"])
async def health():
    return {"status": "ok"}
