from fastapi import APIRouter

from tti_admissions.modules.admissions.router import router as admissions_router
from tti_admissions.modules.audit.router import router as audit_router
from tti_admissions.modules.notifications.router import router as notifications_router

api_router = APIRouter()

api_router.include_router(admissions_router, prefix="/admissions", tags=["Admissions"])

api_router.include_router(audit_router, prefix="/audit-logs", tags=["Audit Logs"])

api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
