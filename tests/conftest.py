"""Shared fixtures for the atoship test suite."""

import os

import httpx
import pytest

from atoship import AtoshipClient, RetryConfig

API_KEY = "sk_test_4f9a2c7e1b"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real ATOSHIP_* variables and any local .env out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("ATOSHIP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def make_client(handler, max_retries: int = 3, **options) -> AtoshipClient:
    """Client wired to an in-process handler, with zero backoff."""
    return AtoshipClient(
        API_KEY,
        base_url="https://api.test.atoship.com",
        transport=httpx.MockTransport(handler),
        retry_config=RetryConfig(max_retries=max_retries, base_delay=0.0, max_delay=0.0),
        **options,
    )
