"""
Score → decision status.

Thresholds (canonical table):
  score >= 700        → Approved
  500 <= score < 700  → Manual Review
  score < 500         → Rejected

An older table (750 / 600) exists in the system's history; 700 / 500 is the
one applied here. No clamping: negative scores and scores above the
questionnaire maximum resolve through the same inequalities.
"""
from __future__ import annotations

from app.schemas.assessment import AssessmentStatus

STATUS_THRESHOLDS = [
    (700, AssessmentStatus.APPROVED),
    (500, AssessmentStatus.MANUAL_REVIEW),
]

# Higher rank = more favourable outcome
STATUS_RANK = {
    AssessmentStatus.REJECTED: 0,
    AssessmentStatus.MANUAL_REVIEW: 1,
    AssessmentStatus.APPROVED: 2,
}


def decide(score: int) -> AssessmentStatus:
    for threshold, status in STATUS_THRESHOLDS:
        if score >= threshold:
            return status
    return AssessmentStatus.REJECTED
