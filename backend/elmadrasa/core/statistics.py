"""
Exam result statistics: averages, spread, score histogram and performer
lists over a set of scored submissions.

Values are kept unrounded; rounding happens only in `to_display`.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from elmadrasa.models.submission import Submission
from elmadrasa.core.scoring import percentage, round_half_up

BUCKET_WIDTH = 10
BUCKET_COUNT = 10


@dataclass
class ScoreBucket:
    low: int
    high: int  # exclusive, except for the last bucket which includes 100
    count: int = 0

    @property
    def label(self) -> str:
        if self.high >= 100:
            return f"{self.low}-100"
        return f"{self.low}-{self.high - 1}"


@dataclass
class SubmissionResult:
    submission_id: str
    student_id: str
    student_name: str
    score: int
    total_points: int
    percentage: int


@dataclass
class SubmissionStatistics:
    count: int = 0
    average: Optional[float] = None
    highest: Optional[float] = None
    lowest: Optional[float] = None
    standard_deviation: Optional[float] = None
    histogram: List[ScoreBucket] = field(default_factory=list)
    results: List[SubmissionResult] = field(default_factory=list)

    def top_performers(self, limit: int = 3) -> List[SubmissionResult]:
        return sorted(self.results, key=lambda r: (-r.percentage, r.student_name))[:limit]

    def bottom_performers(self, limit: int = 3) -> List[SubmissionResult]:
        return sorted(self.results, key=lambda r: (r.percentage, r.student_name))[:limit]

    def to_display(self, limit: int = 3) -> dict:
        def rounded(value):
            return round_half_up(value) if value is not None else 0

        def row(r: SubmissionResult) -> dict:
            return {
                "submission_id": r.submission_id,
                "student_id": r.student_id,
                "name": r.student_name,
                "score": r.score,
                "total_points": r.total_points,
                "percentage": r.percentage,
            }

        return {
            "count": self.count,
            "average": rounded(self.average),
            "highest": rounded(self.highest),
            "lowest": rounded(self.lowest),
            "standard_deviation": rounded(self.standard_deviation),
            "histogram": [{"range": b.label, "count": b.count} for b in self.histogram],
            "top_performers": [row(r) for r in self.top_performers(limit)],
            "bottom_performers": [row(r) for r in self.bottom_performers(limit)],
        }


def empty_histogram() -> List[ScoreBucket]:
    return [
        ScoreBucket(low=i * BUCKET_WIDTH, high=(i + 1) * BUCKET_WIDTH)
        for i in range(BUCKET_COUNT)
    ]


def bucket_index(pct: float) -> int:
    # [0,10) ... [80,90) half-open, [90,100] closed
    pct = max(0.0, min(100.0, pct))
    return min(int(pct // BUCKET_WIDTH), BUCKET_COUNT - 1)


def aggregate(submissions: Iterable[Submission]) -> SubmissionStatistics:
    """Summarise a collection of scored submissions for one exam."""
    stats = SubmissionStatistics(histogram=empty_histogram())

    for sub in submissions:
        stats.results.append(SubmissionResult(
            submission_id=sub.submission_id,
            student_id=sub.student_id,
            student_name=sub.student_name,
            score=sub.score,
            total_points=sub.total_points,
            percentage=percentage(sub.score, sub.total_points),
        ))

    stats.count = len(stats.results)
    if stats.count == 0:
        return stats

    percentages = [r.percentage for r in stats.results]
    for pct in percentages:
        stats.histogram[bucket_index(pct)].count += 1

    stats.average = sum(percentages) / stats.count
    stats.highest = float(max(percentages))
    stats.lowest = float(min(percentages))
    stats.standard_deviation = math.sqrt(
        sum((p - stats.average) ** 2 for p in percentages) / stats.count
    )
    return stats


def performance_insights(stats: SubmissionStatistics) -> List[str]:
    """Short advisory notes for the teacher's results screen."""
    if stats.count == 0:
        return []

    insights = []
    if stats.average < 60:
        insights.append("Class average is below passing. Consider reviewing the material.")
    elif stats.average > 85:
        insights.append("Excellent class performance! Students mastered this material.")

    if stats.highest - stats.lowest > 40:
        insights.append("Large performance gap between students. Consider differentiated instruction.")

    low_performers = len([r for r in stats.results if r.percentage < 60])
    if low_performers > stats.count * 0.3:
        insights.append(f"{low_performers} students scored below 60%. May need remediation.")

    return insights
