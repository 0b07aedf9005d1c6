"""Dashboard router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from .schemas import DashboardStats
from .service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    principal: Principal = Depends(get_current_principal),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Workshop totals (admin/worker)"""
    return service.get_stats(principal)
