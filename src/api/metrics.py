from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "smart_todo_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "smart_todo_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

ORACLE_CALLS_TOTAL = get_or_create_metric(
    "smart_todo_oracle_calls_total",
    "Oracle calls by operation and outcome (ok or fallback)",
    Counter,
    labelnames=["operation", "outcome"],
)

TASKS_TOTAL = get_or_create_metric(
    "smart_todo_tasks_total", "Tasks currently held in the store", Gauge
)

NOTIFICATIONS_PENDING = get_or_create_metric(
    "smart_todo_notifications_pending",
    "Open tasks that are overdue or due today/tomorrow",
    Gauge,
)
