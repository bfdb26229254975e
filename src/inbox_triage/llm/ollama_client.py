"""
Ollama client implementation for LLM inference.

Communicates with the Ollama API using httpx AsyncClient:
- POST /api/generate (non-streaming)
- GET /api/tags for health checks
- abort() cancels in-flight generate calls, mirroring the JS client's
  ollama.abort()
"""

import asyncio
import json
import time
from typing import Optional

import httpx
import structlog

from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.llm.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)
from inbox_triage.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from inbox_triage.monitoring.metrics import generation_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)


class OllamaClient(BaseLLMClient):
    """
    Ollama-specific LLM client using httpx for async HTTP communication.
    
    The client keeps one persistent AsyncClient for connection pooling and
    tracks the asyncio tasks currently inside generate() so abort() can
    cancel them.
    """
    
    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: int = 60,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize Ollama client.
        
        Args:
            base_url: Ollama server URL
            timeout: Transport timeout in seconds
            connection_limits: httpx connection pool limits
            transport: Optional httpx transport (tests use httpx.MockTransport)
            **kwargs: Additional config
        """
        super().__init__(base_url, timeout, **kwargs)
        
        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )
        
        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport
        self._in_flight: set[asyncio.Task] = set()
    
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client
    
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate completion using Ollama API.
        
        POST /api/generate with payload:
        {
            "model": "mistral",
            "prompt": "...",
            "stream": false
        }
        
        Response:
        {
            "model": "mistral",
            "created_at": "...",
            "response": "...",
            "done": true,
            "eval_count": 150,
            "prompt_eval_count": 50
        }
        """
        task = asyncio.current_task()
        if task is not None:
            self._in_flight.add(task)
        try:
            return await self._generate(request)
        finally:
            if task is not None:
                self._in_flight.discard(task)
    
    async def _generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        start_time = time.time()
        
        payload = {
            "model": request.model,
            "prompt": request.prompt,
            "stream": request.stream,
        }
        
        logger.debug(
            "Sending generation request to Ollama",
            model=request.model,
            prompt_length=len(request.prompt),
        )
        
        try:
            client = await self._get_client()
            response = await client.post("/api/generate", json=payload)
            response.raise_for_status()
            response_data = response.json()
        
        except httpx.TimeoutException as e:
            generation_latency_seconds.labels(
                model=request.model, success="false"
            ).observe(time.time() - start_time)
            logger.warning("Ollama request timeout", timeout=self.timeout, error=str(e))
            raise LLMTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout}
            ) from e
        
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error_text = e.response.text
            logger.error("Ollama HTTP error", status_code=status_code, error_text=error_text)
            if status_code == 404:
                raise LLMModelNotAvailableError(
                    f"Model not found: {request.model}",
                    details={"model": request.model, "status": status_code}
                ) from e
            raise LLMGenerationError(
                f"Ollama error: {status_code}",
                details={"status": status_code, "error": error_text}
            ) from e
        
        except (httpx.NetworkError, httpx.ConnectError) as e:
            logger.warning("Ollama network error", error=str(e))
            raise LLMConnectionError(
                f"Network error: {str(e)}",
                details={"error_type": type(e).__name__}
            ) from e
        
        except json.JSONDecodeError as e:
            logger.error("Failed to parse Ollama response JSON", error=str(e))
            raise LLMGenerationError(
                "Invalid JSON response from Ollama",
                details={"parse_error": str(e)}
            ) from e
        
        latency_ms = int((time.time() - start_time) * 1000)
        
        # An empty reply is still a reply; the caller's parser judges it
        content = response_data.get("response") or ""
        if not content:
            logger.warning("Ollama returned an empty response", model=request.model)
        
        model_version = response_data.get("model", request.model)
        finish_reason = "stop" if response_data.get("done") else "incomplete"
        prompt_tokens = response_data.get("prompt_eval_count")
        completion_tokens = response_data.get("eval_count")
        
        logger.debug(
            "Ollama generation successful",
            model=model_version,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            finish_reason=finish_reason,
        )
        
        generation_latency_seconds.labels(
            model=model_version, success="true"
        ).observe(latency_ms / 1000.0)
        if prompt_tokens:
            llm_tokens_total.labels(model=model_version, token_type="prompt").inc(prompt_tokens)
        if completion_tokens:
            llm_tokens_total.labels(model=model_version, token_type="completion").inc(completion_tokens)
        
        return LLMGenerationResponse(
            content=content,
            model_version=model_version,
            finish_reason=finish_reason,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms,
            created_at=response_data.get("created_at"),
            raw_metadata={
                "total_duration": response_data.get("total_duration"),
                "load_duration": response_data.get("load_duration"),
                "eval_duration": response_data.get("eval_duration"),
            }
        )
    
    async def abort(self) -> None:
        """Cancel every generate() call currently awaiting the server."""
        pending = [task for task in self._in_flight if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.info("Aborted outstanding Ollama generations", count=len(pending))
    
    async def health_check(self) -> bool:
        """
        Check Ollama server health via GET /api/tags.
        
        Returns True if server responds, False otherwise.
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=5.0)
            response.raise_for_status()
            return True
        except Exception as e:
            logger.warning("Ollama health check failed", error=str(e))
            return False
    
    async def list_models(self) -> list[str]:
        """
        List all available models via GET /api/tags.
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=10.0)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("Failed to list models", error=str(e))
            raise LLMConnectionError(
                f"Failed to list models: {str(e)}",
                details={"error": str(e)}
            ) from e
        return [m["name"] for m in data.get("models", [])]
    
    async def close(self):
        """Close the HTTP client connection."""
        await self.abort()
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Ollama client connection")
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
