"""Request authentication for the atoship API."""

from typing import Dict

import httpx
from pydantic import SecretStr

from .config import AtoshipConfig


class BearerAuth(httpx.Auth):
    """Attach the bearer credential to every outgoing request."""

    def __init__(self, api_key: SecretStr):
        self._api_key = api_key

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self._api_key.get_secret_value()}"
        yield request

    def __repr__(self) -> str:
        return "BearerAuth(api_key=**********)"


def default_headers(config: AtoshipConfig) -> Dict[str, str]:
    """Fixed headers sent with every request (the credential is added by BearerAuth)."""
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": config.user_agent,
    }
