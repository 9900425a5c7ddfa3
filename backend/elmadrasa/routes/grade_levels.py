"""Grade level reference data for class pickers."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from elmadrasa.deps import get_current_user
from elmadrasa.models.user import User
from elmadrasa.core.grade_levels import GRADE_LEVELS, SECTIONS, stage_levels

router = APIRouter(tags=["grade-levels"])


@router.get("/grade-levels")
async def get_grade_levels(stage: Optional[str] = None, user: User = Depends(get_current_user)):
    """All twelve school years, or one stage's years with ?stage=PREP"""
    levels = GRADE_LEVELS if stage is None else stage_levels(stage.upper())
    if not levels:
        raise HTTPException(status_code=400, detail=f"Unknown stage '{stage}'")
    return {
        "levels": [
            {**level.to_dict(), "classes": [level.class_name(section) for section in SECTIONS]}
            for level in levels
        ],
        "sections": list(SECTIONS),
    }
