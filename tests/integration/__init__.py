"""
Integration tests for inbox triage.

These tests need a running Ollama server and are skipped otherwise.
"""
