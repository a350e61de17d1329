"""Data completeness grading (GRA / GRB / GRC)."""

from alpha_engine.completeness.grader import CompletenessGrade, CompletenessReport, grade_completeness

__all__ = ["CompletenessGrade", "CompletenessReport", "grade_completeness"]
