"""
Exam lifecycle and grading rules, independent of the web layer.

Everything here is pure and synchronous: no database, no config, no logging.
"""

from .exam_status import ExamStatus, resolve_status, latest_submission, can_start
from .scoring import ScoreResult, score, percentage, build_submission
from .reconciliation import reconcile, apply_question_updates, clamp_points
from .statistics import SubmissionStatistics, aggregate, performance_insights
from .grade_levels import GradeLevel, SchoolStage, by_grade, by_stage, parse_class_name
