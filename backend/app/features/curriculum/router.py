"""
Curriculum feature: read-only catalog endpoints.
"""

from fastapi import APIRouter, HTTPException

from app.features.curriculum.catalog import STAGE_LABELS, STAGE_ORDER, TRAINING_MODULES, get_module
from app.features.curriculum.schemas import TrainingModule

router = APIRouter()


@router.get("/modules", response_model=list[TrainingModule])
async def list_modules():
    """List training modules with their scenarios, stages and rubrics."""
    return list(TRAINING_MODULES)


@router.get("/modules/{module_id}", response_model=TrainingModule)
async def get_training_module(module_id: str):
    module = get_module(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail="모듈을 찾을 수 없습니다.")
    return module


@router.get("/stages")
async def list_stages():
    """Stage ids in curriculum order with their display labels."""
    return [{"id": stage_id, "label": STAGE_LABELS[stage_id]} for stage_id in STAGE_ORDER]
