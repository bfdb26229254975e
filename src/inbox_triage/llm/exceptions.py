"""
Custom exceptions for the LLM layer.

Two families live here:
- Transport errors raised by backend clients (connection, HTTP, model lookup).
- Reliability errors raised by GenerationClient once its retry budget is spent.

The reliability errors are terminal: GenerationClient has already retried
timeouts and parse failures before raising them, and nothing above it
(consensus, store, pipeline) retries again.
"""


class LLMClientError(Exception):
    """
    Base exception for all LLM errors.
    
    All LLM-specific exceptions inherit from this to allow catching
    any LLM-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConnectionError(LLMClientError):
    """
    Raised when unable to connect to the LLM inference server.
    
    Includes network errors, DNS failures, refused connections.
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when the HTTP transport gives up waiting for the server.
    
    This is the socket-level timeout of the backend client, not the
    generation time budget enforced by GenerationClient.
    """
    pass


class LLMGenerationError(LLMClientError):
    """
    Raised when the LLM server returns an error during generation.
    
    Examples: empty response, 5xx from the server, invalid JSON body.
    """
    pass


class LLMModelNotAvailableError(LLMGenerationError):
    """Raised when the requested model is not available on the server."""
    pass


class GenerationError(LLMClientError):
    """Base for terminal failures of a bounded generation."""
    pass


class PromptTooLongError(GenerationError):
    """
    Raised before any backend call when the prompt exceeds the token budget.
    
    Never retried: the same request would be rejected again.
    """
    def __init__(self, token_estimate: int, budget: int):
        super().__init__(
            "Prompt may exceed context length.",
            details={"token_estimate": token_estimate, "budget": budget},
        )
        self.token_estimate = token_estimate
        self.budget = budget


class GenerationTimeoutError(GenerationError):
    """Raised when every attempt exceeded the generation time budget."""
    def __init__(self, attempts: int, timeout: float):
        super().__init__(
            "Model timed out. Out of retries.",
            details={"attempts": attempts, "timeout": timeout},
        )
        self.attempts = attempts
        self.timeout = timeout


class ParseFailedError(GenerationError):
    """
    Raised when the backend output never satisfied the parser.
    
    The parser's last exception is available as ``__cause__``.
    """
    def __init__(self, attempts: int, raw_text: str):
        super().__init__(
            "Response failed to parse",
            details={"attempts": attempts, "raw_text": raw_text},
        )
        self.attempts = attempts
        self.raw_text = raw_text


class GenerationAbortedError(GenerationError):
    """
    Raised when an attempt's backend call was cancelled by someone else.
    
    Happens when a newer generation starts while this one is still waiting:
    the single-flight guard cancels the older call.
    """
    def __init__(self, attempt: int):
        super().__init__(
            "Generation was aborted by a newer request",
            details={"attempt": attempt},
        )
        self.attempt = attempt
