"""Dashboard analytics and goal progress endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from minhavez.core.dependencies import get_analytics_service, get_current_business
from minhavez.models.business import Business
from minhavez.models.business_goal import GoalType, PeriodType
from minhavez.schemas.analytics import AnalyticsOverview, GoalProgress
from minhavez.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/overview", response_model=AnalyticsOverview)
async def get_overview(
    period: str = Query("7d", pattern="^(24h|7d|15d|30d|90d)$"),
    business: Business = Depends(get_current_business),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.get_overview(business.id, period)


@router.get("/goals/{goal_type}", response_model=Optional[GoalProgress])
async def get_goal_progress(
    goal_type: GoalType,
    period_type: PeriodType = Query(PeriodType.DAILY),
    business: Business = Depends(get_current_business),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Progress of the active goal for today, or null when none is set."""
    return await service.get_goal_progress(business.id, goal_type, period_type)
