"""
LLM-specific data models for the request/response cycle.

These models are internal to the LLM layer and describe the raw exchange
with the inference server. The reliability layer (GenerationClient) builds
LLMGenerationRequest objects from a GenerationRequest.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LLMGenerationRequest(BaseModel):
    """
    Provider-neutral request for a single backend generation call.
    """
    model_config = ConfigDict(frozen=True)
    
    prompt: str = Field(..., description="Complete prompt (system + user combined)")
    model: str = Field(..., description="Model name/identifier (e.g., 'mistral')")
    stream: bool = Field(default=False, description="Whether to stream response")


class LLMGenerationResponse(BaseModel):
    """
    Raw generated text plus metadata for logging.
    """
    model_config = ConfigDict(frozen=True)
    
    content: str = Field(..., description="Generated text")
    model_version: str = Field(..., description="Actual model version used")
    finish_reason: str = Field(..., description="Why generation stopped: 'stop', 'incomplete', ...")
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Generation latency in milliseconds")
    created_at: Optional[str] = Field(default=None, description="ISO timestamp from server")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific metadata (for debugging)"
    )
