"""
Abstract base client for LLM inference.

Defines the backend contract the reliability layer drives: one generation
call per request, plus an out-of-band abort for calls still outstanding.
"""

from abc import ABC, abstractmethod

import structlog

from inbox_triage.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.
    
    Responsibilities:
    - Send a single generation request to the inference server
    - Parse the response into LLMGenerationResponse
    - Map transport failures onto LLMClientError subclasses
    - Cancel outstanding calls on abort()
    
    Does NOT handle:
    - Prompt budget checks, time budget, retries (GenerationClient)
    - Output parsing and agreement (GenerationClient, ConsensusRunner)
    """
    
    def __init__(self, base_url: str, timeout: int = 60, **kwargs):
        """
        Initialize base client.
        
        Args:
            base_url: Base URL of LLM inference server (e.g., http://localhost:11434)
            timeout: Transport timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.extra_config = kwargs
        
        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )
    
    @abstractmethod
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate a completion from the LLM.
        
        Exactly one request to the server per call; implementations must not
        retry internally.
        
        Raises:
            LLMConnectionError: Network errors
            LLMTimeoutError: Transport timeout
            LLMGenerationError: Server-side generation errors
            LLMModelNotAvailableError: Model not found
        """
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the inference server is reachable.
        
        Should NOT raise; returns False on error.
        """
        pass
    
    async def abort(self) -> None:
        """
        Cancel any generation call currently outstanding on this client.
        
        Default implementation does nothing.
        """
        logger.debug("Abort requested (no-op)", client_class=self.__class__.__name__)
    
    async def close(self):
        """
        Close client connections and cleanup resources.
        
        Default implementation does nothing.
        """
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)
    
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
