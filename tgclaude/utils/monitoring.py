"""Prometheus metrics for the request gate."""

from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

# Gate outcomes: delivered, rejected_length, rejected_usage, completion_failed
GATE_OUTCOMES = Counter(
    "tgclaude_gate_outcomes_total",
    "Requests by terminal gate state",
    ["state", "reason"],
)

TOKENS_CONSUMED = Counter(
    "tgclaude_tokens_consumed_total",
    "Tokens reported by the completion API for successful requests",
)

# Completion call duration in seconds
COMPLETION_LATENCY = Histogram(
    "tgclaude_completion_latency_seconds",
    "Completion request duration in seconds",
    ["outcome"],
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)


def start_metrics_server(port: int = 9090) -> None:
    """Start Prometheus HTTP server for scraping. Call from main when enabled."""
    start_http_server(port)


def record_gate_outcome(state: str, reason: str = "") -> None:
    GATE_OUTCOMES.labels(state=state, reason=reason).inc()


def record_completion(duration_seconds: float, success: bool, tokens: int = 0) -> None:
    COMPLETION_LATENCY.labels(outcome="success" if success else "failure").observe(duration_seconds)
    if tokens:
        TOKENS_CONSUMED.inc(tokens)
