import math
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from chest_api.core.security import CurrentUser
from chest_api.deps import get_db, require_role
from chest_api.models.activity_log import AUTH_ACTIONS, CHEST_ACTIONS, ITEM_ACTIONS, ActivityLog
from chest_api.schemas.logs import (
    ActionCountOut,
    ActivityLogOut,
    ActivityLogPageOut,
    LogStatsOut,
    LogUserOut,
    PaginationOut,
)

router = APIRouter(prefix="/logs", tags=["logs"])

ACTION_TYPES = {
    "chest": CHEST_ACTIONS,
    "item": ITEM_ACTIONS,
    "auth": AUTH_ACTIONS,
}

SORT_COLUMNS = {
    "createdAt": ActivityLog.created_at,
    "action": ActivityLog.action,
    "username": ActivityLog.username,
    "chestName": ActivityLog.chest_name,
}


def _log_out(r: ActivityLog) -> ActivityLogOut:
    return ActivityLogOut(
        id=r.id,
        userId=r.user_id,
        username=r.username,
        action=r.action,
        chestId=r.chest_id,
        chestName=r.chest_name,
        itemId=r.item_id,
        itemName=r.item_name,
        oldQuantity=r.old_quantity,
        newQuantity=r.new_quantity,
        details=r.details,
        createdAt=r.created_at,
    )


@router.get("", response_model=ActivityLogPageOut)
def list_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    userId: str | None = Query(None),
    action: str | None = Query(None),
    chestId: str | None = Query(None),
    actionType: str | None = Query(None, description="chest | item | auth, or a single action"),
    startDate: datetime | None = Query(None),
    endDate: datetime | None = Query(None),
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Activity logs with filters and pagination."""
    query = db.query(ActivityLog)

    if userId:
        query = query.filter(ActivityLog.user_id == userId)
    if chestId:
        query = query.filter(ActivityLog.chest_id == chestId)
    if actionType:
        group = ACTION_TYPES.get(actionType)
        if group:
            query = query.filter(ActivityLog.action.in_(group))
        else:
            query = query.filter(ActivityLog.action == actionType)
    elif action:
        query = query.filter(ActivityLog.action == action)
    if startDate:
        query = query.filter(ActivityLog.created_at >= startDate)
    if endDate:
        query = query.filter(ActivityLog.created_at <= endDate)

    total = query.count()
    column = SORT_COLUMNS.get(sortBy, ActivityLog.created_at)
    order = column.desc() if sortOrder == "desc" else column.asc()
    rows = query.order_by(order).offset((page - 1) * limit).limit(limit).all()

    return ActivityLogPageOut(
        logs=[_log_out(r) for r in rows],
        pagination=PaginationOut(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
            hasNext=page * limit < total,
            hasPrev=page > 1,
        ),
    )


@router.get("/stats", response_model=LogStatsOut)
def log_stats(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    since = datetime.now(timezone.utc) - timedelta(days=1)

    breakdown = (
        db.query(ActivityLog.action, func.count(ActivityLog.id))
        .group_by(ActivityLog.action)
        .order_by(func.count(ActivityLog.id).desc())
        .all()
    )

    return LogStatsOut(
        totalLogs=db.query(func.count(ActivityLog.id)).scalar() or 0,
        uniqueUsers=db.query(func.count(func.distinct(ActivityLog.user_id))).scalar() or 0,
        uniqueChests=db.query(func.count(func.distinct(ActivityLog.chest_id))).scalar() or 0,
        recentActivity=db.query(func.count(ActivityLog.id)).filter(ActivityLog.created_at >= since).scalar() or 0,
        actionBreakdown=[ActionCountOut(action=a, count=c) for a, c in breakdown],
    )


@router.get("/users", response_model=list[LogUserOut])
def log_users(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Distinct users seen in the logs, most recent first."""
    last_activity = func.max(ActivityLog.created_at)
    rows = (
        db.query(ActivityLog.user_id, func.max(ActivityLog.username), last_activity)
        .group_by(ActivityLog.user_id)
        .order_by(last_activity.desc())
        .all()
    )
    return [LogUserOut(user_id=uid, username=name, lastActivity=last) for uid, name, last in rows]
