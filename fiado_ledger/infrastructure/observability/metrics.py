"""Prometheus metrics for closures, reminders and HTTP traffic"""

from prometheus_client import Counter, Histogram

# Closure metrics
closure_counter = Counter(
    "fiado_closure_total",
    "Closures created",
    ["mode"],  # explicit | date_range
)

closure_stamped_counter = Counter(
    "fiado_closure_transactions_stamped_total",
    "Transactions stamped into a closure",
)

closure_skipped_counter = Counter(
    "fiado_closure_transactions_skipped_total",
    "Requested transaction ids not stamped (already closed or unknown)",
)

closure_totals_mismatch_counter = Counter(
    "fiado_closure_totals_mismatch_total",
    "Closures whose claimed totals differ from their stamped membership",
)

closure_failure_counter = Counter(
    "fiado_closure_failures_total",
    "Closure requests rolled back",
)

# Reminder (text generation) metrics
reminder_latency_histogram = Histogram(
    "fiado_reminder_latency_seconds",
    "Text-generation response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

reminder_fallback_counter = Counter(
    "fiado_reminder_fallback_total",
    "Reminders answered with the static fallback message",
    ["reason"],  # disabled | timeout | http_error | bad_response
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_closure(mode: str, stamped_count: int, skipped_count: int, totals_match: bool) -> None:
    """Record the outcome of a committed closure"""
    closure_counter.labels(mode=mode).inc()
    closure_stamped_counter.inc(stamped_count)
    closure_skipped_counter.inc(skipped_count)
    if not totals_match:
        closure_totals_mismatch_counter.inc()
