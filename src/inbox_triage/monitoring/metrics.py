"""Custom Prometheus metrics for the inbox triage service.

Exposed at /metrics when PROMETHEUS_ENABLED. Worth alerting on:
- generation_attempts_total{outcome="timeout"} (backend overloaded)
- generation_attempts_total{outcome="parse_failed"} (prompt/model drift)
- consensus_samples (rising sample counts mean the model disagrees with itself)
"""

from prometheus_client import Counter, Histogram

# === Generation Metrics ===

generation_attempts_total = Counter(
    "generation_attempts_total",
    "Generation attempts by model and outcome",
    ["model", "outcome"],
)
"""
Generation attempts counter.

Labels:
- model: Model name (e.g., mistral)
- outcome: success, timeout, parse_failed
"""

prompt_rejections_total = Counter(
    "prompt_rejections_total",
    "Prompts rejected before any backend call for exceeding the token budget",
    ["model"],
)

generation_latency_seconds = Histogram(
    "generation_latency_seconds",
    "Backend generation latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Backend generation latency histogram.

Buckets cover local inference (0.5s to 120s). The 30s bucket lines up with
the default generation timeout.
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)

# === Consensus Metrics ===

consensus_samples = Histogram(
    "consensus_samples",
    "Number of samples drawn before consensus was reached or abandoned",
    ["outcome"],
    buckets=[2, 3, 4, 5, 6, 8, 10, 15, 20],
)
"""
Samples per consensus run.

Labels:
- outcome: agreed, fallback, exhausted, failed
"""

# === Store Metrics ===

store_lookups_total = Counter(
    "store_lookups_total",
    "Memoized store lookups by property and result",
    ["property", "result"],
)
"""
Labels:
- property: message, classification, unsubscribe_link, marked_unsubscribed
- result: hit, miss
"""

# === Pipeline Metrics ===

pipeline_items_total = Counter(
    "pipeline_items_total",
    "Messages handled by the triage pipeline by stage and status",
    ["stage", "status"],
)
