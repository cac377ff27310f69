import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from models import Session, SessionCreate, SessionUpdate
from routers.deps import get_storage
from storage import SessionStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["练习记录"])


@router.post("", response_model=Session)
async def create_session(data: SessionCreate, storage: SessionStorage = Depends(get_storage)):
    """创建练习会话"""
    try:
        session = storage.create_session(data)
    except Exception:
        logger.exception("Error creating session")
        raise HTTPException(status_code=500, detail="Failed to create session")
    return session


@router.get("", response_model=List[Session])
async def list_sessions(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    storage: SessionStorage = Depends(get_storage),
):
    """获取用户的练习记录（最新的在前）"""
    try:
        return storage.list_sessions(user_id)
    except Exception:
        logger.exception("Error fetching sessions")
        raise HTTPException(status_code=500, detail="Failed to fetch sessions")


@router.get("/{session_id}", response_model=Session)
async def get_session(session_id: str, storage: SessionStorage = Depends(get_storage)):
    try:
        session = storage.get_session(session_id)
    except Exception:
        logger.exception("Error fetching session %s", session_id)
        raise HTTPException(status_code=500, detail="Failed to fetch session")

    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.patch("/{session_id}", response_model=Session)
async def update_session(
    session_id: str,
    updates: SessionUpdate,
    storage: SessionStorage = Depends(get_storage),
):
    """更新会话完成情况，只接受白名单字段"""
    try:
        session = storage.update_session(session_id, updates)
    except Exception:
        logger.exception("Error updating session %s", session_id)
        raise HTTPException(status_code=500, detail="Failed to update session")

    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.delete("/{session_id}")
async def delete_session(session_id: str, storage: SessionStorage = Depends(get_storage)):
    try:
        deleted = storage.delete_session(session_id)
    except Exception:
        logger.exception("Error deleting session %s", session_id)
        raise HTTPException(status_code=500, detail="Failed to delete session")

    if not deleted:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}
