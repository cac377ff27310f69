from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query

from models import Preset
from services.presets import get_preset, list_presets

router = APIRouter(prefix="/presets", tags=["预设"])


@router.get("", response_model=List[Preset])
async def get_presets(
    preset_type: Optional[Literal["breathing", "meditation"]] = Query(default=None, alias="type"),
):
    """获取练习预设，可按类型筛选"""
    return list_presets(preset_type)


@router.get("/{preset_id}", response_model=Preset)
async def get_preset_detail(preset_id: str):
    preset = get_preset(preset_id)
    if not preset:
        raise HTTPException(status_code=404, detail="Preset not found")
    return preset
