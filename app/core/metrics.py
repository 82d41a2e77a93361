from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
)

VALIDATION_VERDICTS = Counter(
    "schedule_validation_verdicts_total",
    "Session slot validations by outcome",
    ["outcome"],
)

SCHEDULE_TRANSITIONS = Counter(
    "schedule_transitions_total",
    "Applied session and request transitions",
    ["kind"],
)

RECONCILIATION_RUNS = Counter(
    "schedule_reconciliation_runs_total",
    "Availability reconciliation passes",
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
