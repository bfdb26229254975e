"""
Unit tests for inbox triage.

Test individual components in isolation:
- GenerationClient (budget, timeout, retries, single-flight)
- OllamaClient (HTTP mapping, via httpx.MockTransport)
- ConsensusRunner and ConsensusTally
- MemoizedStore (memoization, readiness, persistence format)
- Triage parsers, classifier, extractor, pipeline
- API routes
"""
