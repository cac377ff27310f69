import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from models import SettingsCreate, SettingsUpdate, UserSettings
from routers.deps import get_storage
from storage import SessionStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["设置"])


@router.get("", response_model=UserSettings)
async def get_settings(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    storage: SessionStorage = Depends(get_storage),
):
    """获取用户设置，未保存过时返回默认设置"""
    try:
        return storage.get_settings(user_id)
    except Exception:
        logger.exception("Error fetching settings")
        raise HTTPException(status_code=500, detail="Failed to fetch settings")


@router.post("", response_model=UserSettings)
async def create_settings(data: SettingsCreate, storage: SessionStorage = Depends(get_storage)):
    """保存完整设置；每个用户只有一条设置记录"""
    updates = SettingsUpdate.model_validate(data.model_dump(exclude={"user_id"}))
    try:
        return storage.upsert_settings(data.user_id, updates)
    except Exception:
        logger.exception("Error creating settings")
        raise HTTPException(status_code=500, detail="Failed to create settings")


@router.patch("", response_model=UserSettings)
async def update_settings(
    updates: SettingsUpdate,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    storage: SessionStorage = Depends(get_storage),
):
    """部分更新设置，不存在时自动创建"""
    try:
        return storage.upsert_settings(user_id, updates)
    except Exception:
        logger.exception("Error updating settings")
        raise HTTPException(status_code=500, detail="Failed to update settings")
