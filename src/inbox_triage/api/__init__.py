"""
FastAPI surface over the memoized store.

- routes: health, entry listing, entry detail, mark-unsubscribed
- models: request/response models
- dependencies: store and LLM client singletons
- error_handlers: store errors to JSON responses
"""

from inbox_triage.api.routes import router

__all__ = ["router"]
