"""Prometheus metrics for the stock tracker.

Exposes an HTTP endpoint (default :9090/metrics) that Prometheus can scrape.
All metric objects are module-level singletons: import and use directly.

Metrics exposed:
  stocktracker_backend_requests_total      counter  endpoint=<name>, success=true|false
  stocktracker_enrichment_fallbacks_total  counter
  stocktracker_session_events_total        counter  event=login|logout|restore
  stocktracker_commands_total              counter  command=<name>, success=true|false
"""
import logging

from prometheus_client import Counter, start_http_server

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

backend_requests_total = Counter(
    "stocktracker_backend_requests_total",
    "Number of requests sent to the portfolio backend",
    ["endpoint", "success"],   # endpoint name, "true" | "false"
)

enrichment_fallbacks_total = Counter(
    "stocktracker_enrichment_fallbacks_total",
    "Holdings shown with buy price as current price after a failed price lookup",
)

session_events_total = Counter(
    "stocktracker_session_events_total",
    "Session store transitions",
    ["event"],          # "login" | "logout" | "restore"
)

commands_total = Counter(
    "stocktracker_commands_total",
    "Number of bot commands executed",
    ["command", "success"],
)


# ---------------------------------------------------------------------------
# Server bootstrap
# ---------------------------------------------------------------------------

def start_metrics_server(port: int = 9090) -> None:
    """Start the Prometheus metrics HTTP server in a background thread.

    Logs a warning and continues if the port is already in use.
    """
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server listening on :{port}/metrics")
    except OSError as exc:
        logger.warning(f"Could not start metrics server on port {port}: {exc}")
