"""
School grade levels - the single lookup table shared by signup and class
management.

Overall school years 1-12 map onto three stages: Primary 1-6, Prep
(preparatory) 1-3 and Secondary 1-3, so year "7" is "Prep 1" and year "10"
is "Secondary 1".
"""

import re
from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union


class SchoolStage(str, Enum):
    PRIMARY = "PRI"
    PREPARATORY = "PREP"
    SECONDARY = "SEC"


STAGE_NAMES = {
    SchoolStage.PRIMARY: "Primary",
    SchoolStage.PREPARATORY: "Preparatory",
    SchoolStage.SECONDARY: "Secondary",
}

SECTIONS = ("A", "B", "C", "D")


@dataclass(frozen=True)
class GradeLevel:
    stage: SchoolStage
    stage_grade: int  # 1-based year within the stage
    grade: int  # overall school year 1-12

    @property
    def label(self) -> str:
        if self.stage == SchoolStage.PRIMARY:
            return f"Primary {self.stage_grade}"
        if self.stage == SchoolStage.PREPARATORY:
            return f"Prep {self.stage_grade}"
        return f"Secondary {self.stage_grade} (Grade {self.grade})"

    def class_name(self, section: str) -> str:
        """Class display name, e.g. "Prep 1A" or "10B"."""
        section = section.strip().upper()
        if self.stage == SchoolStage.SECONDARY:
            return f"{self.grade}{section}"
        short = "Primary" if self.stage == SchoolStage.PRIMARY else "Prep"
        return f"{short} {self.stage_grade}{section}"

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "stage_name": STAGE_NAMES[self.stage],
            "stage_grade": self.stage_grade,
            "grade": self.grade,
            "label": self.label,
        }


def _build_table() -> Tuple[GradeLevel, ...]:
    levels = []
    grade = 1
    for stage, years in ((SchoolStage.PRIMARY, 6), (SchoolStage.PREPARATORY, 3), (SchoolStage.SECONDARY, 3)):
        for stage_grade in range(1, years + 1):
            levels.append(GradeLevel(stage=stage, stage_grade=stage_grade, grade=grade))
            grade += 1
    return tuple(levels)


GRADE_LEVELS: Tuple[GradeLevel, ...] = _build_table()
_BY_GRADE: Dict[int, GradeLevel] = {level.grade: level for level in GRADE_LEVELS}
_BY_STAGE: Dict[Tuple[SchoolStage, int], GradeLevel] = {
    (level.stage, level.stage_grade): level for level in GRADE_LEVELS
}


def by_grade(grade: Union[int, str]) -> Optional[GradeLevel]:
    """Look up an overall school year; accepts "7" as well as 7."""
    try:
        return _BY_GRADE.get(int(str(grade).strip()))
    except ValueError:
        return None


def by_stage(stage: Union[SchoolStage, str], stage_grade: Union[int, str]) -> Optional[GradeLevel]:
    try:
        key = (SchoolStage(stage), int(str(stage_grade).strip()))
    except ValueError:
        return None
    return _BY_STAGE.get(key)


def stage_levels(stage: Union[SchoolStage, str]) -> List[GradeLevel]:
    try:
        stage = SchoolStage(stage)
    except ValueError:
        return []
    return [level for level in GRADE_LEVELS if level.stage == stage]


_CLASS_NAME = re.compile(r"^(?:(Primary|Prep) (\d+)|(\d+))([A-Z])$")


def parse_class_name(name: str) -> Optional[Tuple[GradeLevel, str]]:
    """
    Inverse of GradeLevel.class_name: "Prep 1A" -> (Prep 1, "A").
    Returns None for anything that is not a class of the school.
    """
    match = _CLASS_NAME.match((name or "").strip())
    if not match:
        return None
    short, stage_grade, grade, section = match.groups()
    if short:
        stage = SchoolStage.PRIMARY if short == "Primary" else SchoolStage.PREPARATORY
        level = by_stage(stage, stage_grade)
    else:
        level = by_grade(grade)
    if level is None or section not in SECTIONS:
        return None
    # "7A" and "Primary 10A" are not names the table produces
    if level.class_name(section) != name.strip():
        return None
    return level, section
