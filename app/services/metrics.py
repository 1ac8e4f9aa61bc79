"""
Prometheus counters for the assessment lifecycle.
Exposed through the /metrics mount in app.main.
"""
from prometheus_client import Counter

ASSESSMENTS_SUBMITTED = Counter(
    "assessments_submitted_total",
    "Assessments persisted, by computed status",
    ["status"],
)

STATUS_OVERRIDES = Counter(
    "assessment_status_overrides_total",
    "Manual status overrides by reviewers, by new status",
    ["status"],
)

QUESTION_GENERATION_FAILURES = Counter(
    "question_generation_failures_total",
    "Dynamic question generation failures, by error kind",
    ["kind"],
)
