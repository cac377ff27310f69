import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from models import SessionStats
from routers.deps import get_storage
from services.stats import compute_stats
from storage import SessionStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["统计"])


@router.get("", response_model=SessionStats)
async def get_stats(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    storage: SessionStorage = Depends(get_storage),
):
    """根据全部练习记录实时计算统计数据"""
    try:
        sessions = storage.list_sessions(user_id)
    except Exception:
        logger.exception("Error fetching stats")
        raise HTTPException(status_code=500, detail="Failed to fetch stats")

    return compute_stats(sessions)
