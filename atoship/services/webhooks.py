"""Webhook subscriptions and verification of incoming deliveries."""

import hashlib
import hmac
import json
from typing import List, Optional, Union

from pydantic import ValidationError

from ..exceptions import APIAuthenticationError, APIValidationError, FieldError
from ..models import CreateWebhookRequest, UpdateWebhookRequest, Webhook, WebhookEvent, WebhookTestResult
from ..result import Result
from ..retry import CancellationToken
from .base import BaseService, segment

SIGNATURE_HEADER = "X-Atoship-Signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(payload: Union[bytes, str], secret: str) -> str:
    """Hex HMAC-SHA256 of the raw payload."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: Union[bytes, str], signature: Optional[str], secret: str) -> bool:
    """
    Check a webhook signature header against the raw payload.

    Accepts a bare hex digest or one prefixed with ``sha256=``. The comparison
    is constant-time.
    """
    if not signature or not secret:
        return False
    provided = signature.strip()
    if provided.lower().startswith(SIGNATURE_PREFIX):
        provided = provided[len(SIGNATURE_PREFIX):]
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode("utf-8"), provided.lower().encode("utf-8"))


class WebhooksService(BaseService):
    """Manage webhook endpoints and parse the events they receive."""

    verify_signature = staticmethod(verify_signature)

    async def create(
        self,
        request: CreateWebhookRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Webhook]:
        error = self._require(url=request.url, events=request.events)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", "/api/webhooks", Webhook, json=request.to_payload(), cancel_token=cancel_token
        )

    async def get(self, webhook_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[Webhook]:
        error = self._require(webhook_id=webhook_id)
        if error:
            return Result.fail(error)
        return await self._call("GET", f"/api/webhooks/{segment(webhook_id)}", Webhook, cancel_token=cancel_token)

    async def list(self, cancel_token: Optional[CancellationToken] = None) -> Result[List[Webhook]]:
        return await self._call("GET", "/api/webhooks", List[Webhook], cancel_token=cancel_token)

    async def update(
        self,
        webhook_id: str,
        request: UpdateWebhookRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[Webhook]:
        error = self._require(webhook_id=webhook_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "PUT",
            f"/api/webhooks/{segment(webhook_id)}",
            Webhook,
            json=request.to_payload(),
            cancel_token=cancel_token,
        )

    async def delete(self, webhook_id: str, cancel_token: Optional[CancellationToken] = None) -> Result[None]:
        error = self._require(webhook_id=webhook_id)
        if error:
            return Result.fail(error)
        return await self._call("DELETE", f"/api/webhooks/{segment(webhook_id)}", cancel_token=cancel_token)

    async def test(
        self,
        webhook_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result[WebhookTestResult]:
        """Ask the API to send a test delivery to the webhook URL."""
        error = self._require(webhook_id=webhook_id)
        if error:
            return Result.fail(error)
        return await self._call(
            "POST", f"/api/webhooks/{segment(webhook_id)}/test", WebhookTestResult, cancel_token=cancel_token
        )

    def construct_event(
        self,
        payload: Union[bytes, str],
        signature: Optional[str],
        secret: str,
    ) -> Result[WebhookEvent]:
        """Verify a delivery and parse it into a WebhookEvent."""
        if not verify_signature(payload, signature, secret):
            if self._logger:
                self._logger.warning("Rejected webhook delivery with invalid signature")
            return Result.fail(
                APIAuthenticationError("Invalid webhook signature", status_code=None, error_code="invalid_signature")
            )
        try:
            event = WebhookEvent.model_validate(json.loads(payload))
        except (ValueError, ValidationError) as e:
            return Result.fail(
                APIValidationError(
                    "Malformed webhook payload",
                    field_errors=[FieldError("payload", str(e).splitlines()[0])],
                    status_code=None,
                    original_exception=e,
                )
            )
        return Result.ok(event)
