"""
Inbox triage with a reliable LLM decision layer.

Turns a non-deterministic local LLM (Ollama) into a dependable classifier for
mailbox cleanup:
- Bounded generation (token budget, timeout, retry on timeout/parse failure)
- Consensus voting over repeated samples
- Persisted memoization of per-message results across runs

Architecture: Ollama inference + consensus runner + JSON document store,
with a small FastAPI surface over the store.
"""

__version__ = "0.1.0"
