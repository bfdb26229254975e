"""Integration test fixtures (service checks and prerequisites).

Integration tests are skipped if Ollama is not running.
"""

import httpx
import pytest


@pytest.fixture(scope="session")
def check_ollama():
    """Check if Ollama is available at localhost:11434.
    
    Skips tests if Ollama is not reachable.
    """
    try:
        response = httpx.get("http://localhost:11434/api/tags", timeout=5)
        if response.status_code != 200:
            pytest.skip("Ollama not available (non-200 status)")
    except Exception as e:
        pytest.skip(f"Ollama not available: {e}")


@pytest.fixture
def integration_settings(test_settings):
    """Settings for integration tests against a local Ollama."""
    test_settings.OLLAMA_BASE_URL = "http://localhost:11434"
    test_settings.OLLAMA_MODEL = "mistral"
    test_settings.GENERATION_TIMEOUT_SECONDS = 120.0
    test_settings.CONSENSUS_MAX_ATTEMPTS = 6
    return test_settings


@pytest.fixture
async def ollama_client(check_ollama, integration_settings):
    """Real OllamaClient; requires the model named in the settings to be pulled."""
    from inbox_triage.llm.ollama_client import OllamaClient
    
    client = OllamaClient(
        base_url=integration_settings.OLLAMA_BASE_URL,
        timeout=integration_settings.OLLAMA_TIMEOUT,
    )
    yield client
    await client.close()
