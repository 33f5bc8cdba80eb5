"""Prometheus metrics for the fetch/extract pipeline.

Provides counters and histograms for tracking:
- Page fetch success/failure rates and latency
- Stage outcomes (success, fetch failure, no value found)
- Pages carrying more than one candidate feed
"""

from prometheus_client import Counter, Histogram

page_fetches_total = Counter(
    "rssfinder_page_fetches_total",
    "Total channel page fetches",
    ["status"],  # content/failed
)

page_fetch_duration_seconds = Histogram(
    "rssfinder_page_fetch_duration_seconds",
    "Channel page fetch duration in seconds, retries included",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

stage_outcomes_total = Counter(
    "rssfinder_stage_outcomes_total",
    "Pipeline stage outcomes",
    ["outcome"],  # success/fetch_failed/no_value
)

multiple_values_total = Counter(
    "rssfinder_multiple_values_total",
    "Pages where more than one embedded value was found",
)

rate_limiter_throttled_total = Counter(
    "rssfinder_rate_limiter_throttled_total",
    "Total fetches delayed by the rate limiter",
)
