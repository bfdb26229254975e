"""Prometheus metrics for the inbox triage service."""

from inbox_triage.monitoring.metrics import (
    consensus_samples,
    generation_attempts_total,
    generation_latency_seconds,
    llm_tokens_total,
    pipeline_items_total,
    prompt_rejections_total,
    store_lookups_total,
)

__all__ = [
    "generation_attempts_total",
    "generation_latency_seconds",
    "llm_tokens_total",
    "prompt_rejections_total",
    "consensus_samples",
    "store_lookups_total",
    "pipeline_items_total",
]
