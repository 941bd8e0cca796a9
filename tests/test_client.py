"""End-to-end tests for the client against an in-process HTTP handler."""

import asyncio
import json
import logging
import time

import httpx
import pytest

from atoship import (
    APITimeoutError,
    APIValidationError,
    AtoshipClient,
    CancellationToken,
    ErrorKind,
    Result,
    RetryConfig,
)
from atoship.models import (
    Address,
    CreateOrderRequest,
    OrderItem,
    Parcel,
    PurchaseLabelRequest,
    RateRequest,
    UpdateOrderRequest,
)

from conftest import API_KEY, make_client


def order_request(**overrides) -> CreateOrderRequest:
    data = dict(
        order_number="PY-ORDER-001",
        recipient_name="John Doe",
        recipient_street1="123 Main St",
        recipient_city="San Francisco",
        recipient_state="CA",
        recipient_postal_code="94105",
        recipient_country="US",
        items=[
            OrderItem(name="Python Cookbook", sku="BOOK-PY-001", quantity=2, unit_price=29.99, weight=1.5),
            OrderItem(name="Asyncio Guide", sku="BOOK-AIO-001", quantity=1, unit_price=34.99, weight=1.8),
            OrderItem(name="Sticker Pack", sku="STK-001", quantity=3, unit_price=2.5, weight=0.1),
        ],
    )
    data.update(overrides)
    return CreateOrderRequest(**data)


def rate_request() -> RateRequest:
    return RateRequest(
        from_address=Address(street1="456 Oak Ave", city="Los Angeles", state="CA", postal_code="90001"),
        to_address=Address(street1="789 Pine St", city="New York", state="NY", postal_code="10001"),
        parcel=Parcel(length=10, width=8, height=6, weight=3.3),
    )


class Recorder:
    """Handler that records requests and replies from a queue of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a repeated reply is never a consumed response
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def run(coro):
    return asyncio.run(coro)


class TestOrders:

    def test_create_order_returns_server_id(self):
        """A valid 3-item order comes back with the id the server assigned."""
        handler = Recorder(httpx.Response(201, json={"id": "ord_8c1f", "order_number": "PY-ORDER-001", "status": "pending"}))
        client = make_client(handler)

        result = run(client.orders.create(order_request()))

        assert result.is_ok
        assert result.value.id == "ord_8c1f"
        sent = handler.requests[0]
        assert sent.method == "POST"
        assert sent.url.path == "/api/orders"
        payload = json.loads(sent.content)
        assert len(payload["items"]) == 3
        assert payload["recipient_name"] == "John Doe"

    def test_missing_recipient_is_rejected_locally(self):
        handler = Recorder(httpx.Response(201, json={"id": "never"}))
        client = make_client(handler)

        result = run(client.orders.create(order_request(recipient_name="")))

        assert not result.is_ok
        assert result.kind is ErrorKind.VALIDATION
        assert result.error.fields == ["recipient_name"]
        assert handler.requests == []

    def test_server_validation_lists_fields(self):
        handler = Recorder(httpx.Response(422, json={
            "message": "Validation failed",
            "errors": [
                {"field": "recipient_postal_code", "message": "is not a valid postal code"},
                {"field": "items[1].weight", "message": "must be positive"},
            ],
        }))
        client = make_client(handler)

        result = run(client.orders.create(order_request()))

        assert isinstance(result.error, APIValidationError)
        assert result.error.fields == ["recipient_postal_code", "items[1].weight"]
        assert len(handler.requests) == 1

    def test_not_found_is_not_retried(self):
        handler = Recorder(httpx.Response(404, json={"error": "Order not found"}))
        client = make_client(handler)

        result = run(client.orders.get("ord_missing"))

        assert result.kind is ErrorKind.NOT_FOUND
        assert len(handler.requests) == 1

    def test_list_orders_page(self):
        handler = Recorder(httpx.Response(200, json={
            "items": [{"id": "ord_1", "status": "shipped"}, {"id": "ord_2", "status": "pending"}],
            "total": 12,
            "page": 1,
            "limit": 2,
        }))
        client = make_client(handler)

        result = run(client.orders.list(page=1, limit=2, status="pending"))

        page = result.unwrap()
        assert [order.id for order in page.items] == ["ord_1", "ord_2"]
        assert page.has_more is True
        assert page.next_page == 2
        params = handler.requests[0].url.params
        assert params["page"] == "1"
        assert params["limit"] == "2"
        assert params["status"] == "pending"

    def test_enveloped_page_keeps_pagination(self):
        handler = Recorder(httpx.Response(200, json={
            "success": True,
            "data": [{"id": "ord_1", "status": "shipped"}, {"id": "ord_2", "status": "pending"}],
            "total": 40,
            "page": 1,
            "limit": 2,
        }))
        client = make_client(handler)

        result = run(client.orders.list(page=1, limit=2))

        page = result.unwrap()
        assert [order.id for order in page.items] == ["ord_1", "ord_2"]
        assert page.total == 40
        assert page.has_more is True
        assert page.next_page == 2

    def test_enveloped_page_object_is_unwrapped(self):
        handler = Recorder(httpx.Response(200, json={
            "success": True,
            "data": {"items": [{"id": "lbl_1"}], "total": 1, "page": 1, "limit": 20},
        }))
        client = make_client(handler)

        page = run(client.shipping.list_labels()).unwrap()

        assert [label.id for label in page.items] == ["lbl_1"]
        assert page.has_more is False

    def test_create_is_retried_after_server_error(self):
        """Order creation follows the same retry rules as reads."""
        handler = Recorder(
            httpx.Response(503, json={"message": "busy"}),
            httpx.Response(201, json={"id": "ord_8c1f"}),
        )
        client = make_client(handler)

        result = run(client.orders.create(order_request()))

        assert result.value.id == "ord_8c1f"
        assert [r.method for r in handler.requests] == ["POST", "POST"]

    def test_unset_filters_are_not_sent(self):
        handler = Recorder(httpx.Response(200, json={"items": [], "total": 0}))
        client = make_client(handler)

        run(client.orders.list())

        assert "status" not in handler.requests[0].url.params

    def test_update_sends_only_set_fields(self):
        handler = Recorder(httpx.Response(200, json={"id": "ord_1", "recipient_city": "Oakland"}))
        client = make_client(handler)

        result = run(client.orders.update("ord_1", UpdateOrderRequest(recipient_city="Oakland")))

        assert result.value.recipient_city == "Oakland"
        assert json.loads(handler.requests[0].content) == {"recipient_city": "Oakland"}

    def test_delete_returns_empty_success(self):
        handler = Recorder(httpx.Response(204))
        client = make_client(handler)

        result = run(client.orders.delete("ord_1"))

        assert result.is_ok
        assert result.value is None
        assert handler.requests[0].method == "DELETE"

    def test_ids_are_path_quoted(self):
        handler = Recorder(httpx.Response(200, json={"id": "a/b"}))
        client = make_client(handler)

        run(client.orders.get("a/b"))

        assert handler.requests[0].url.raw_path == b"/api/orders/a%2Fb"


class TestTransportBehaviour:

    def test_auth_and_fixed_headers(self):
        handler = Recorder(httpx.Response(200, json={"id": "usr_1", "email": "ops@example.com"}))
        client = make_client(handler)

        run(client.users.get_profile())

        headers = handler.requests[0].headers
        assert headers["Authorization"] == f"Bearer {API_KEY}"
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"].startswith("atoship-python-sdk/")

    def test_server_errors_are_retried_until_success(self):
        handler = Recorder(
            httpx.Response(503, json={"message": "busy"}),
            httpx.Response(500),
            httpx.Response(200, json={"orders_created": 4, "labels_purchased": 3, "total_shipping_cost": 41.5}),
        )
        client = make_client(handler)

        result = run(client.users.get_usage_stats())

        assert result.value.labels_purchased == 3
        assert len(handler.requests) == 3

    def test_network_errors_exhaust_budget(self):
        handler = Recorder(httpx.ConnectError("[Errno 111] Connection refused"))
        client = make_client(handler, max_retries=3)

        result = run(client.carriers.list())

        assert result.kind is ErrorKind.NETWORK
        assert "Connection refused" in result.error.cause
        assert len(handler.requests) == 4

    def test_rate_limit_is_reported(self):
        handler = Recorder(httpx.Response(429, headers={"Retry-After": "0"}, json={"message": "Too many requests"}))
        client = make_client(handler, max_retries=1)

        result = run(client.tracking.track("1Z999AA10123456784"))

        assert result.kind is ErrorKind.RATE_LIMIT
        assert result.error.retry_after == 0
        assert len(handler.requests) == 2

    def test_envelope_is_unwrapped(self):
        handler = Recorder(httpx.Response(200, json={"success": True, "data": {"id": "lbl_1", "status": "purchased"}}))
        client = make_client(handler)

        result = run(client.shipping.purchase_label(PurchaseLabelRequest(rate_id="rate_1")))

        assert result.value.id == "lbl_1"

    def test_unexpected_payload_is_a_server_error(self):
        handler = Recorder(httpx.Response(200, json={"unexpected": True}))
        client = make_client(handler)

        result = run(client.orders.get("ord_1"))

        assert result.kind is ErrorKind.SERVER
        assert result.error.code == "invalid_response"
        assert len(handler.requests) == 1

    def test_cancelled_token_skips_request(self):
        handler = Recorder(httpx.Response(200, json={"id": "ord_1"}))
        client = make_client(handler)

        async def scenario():
            token = CancellationToken()
            token.cancel()
            return await client.orders.get("ord_1", cancel_token=token)

        result = run(scenario())

        assert result.kind is ErrorKind.CANCELLED
        assert handler.requests == []

    def test_concurrent_calls_are_independent(self):
        def handler(request):
            order_id = request.url.path.rsplit("/", 1)[-1]
            if order_id == "bad":
                return httpx.Response(404)
            return httpx.Response(200, json={"id": order_id})

        client = make_client(handler)

        async def scenario():
            async with client:
                return await asyncio.gather(*(client.orders.get(i) for i in ["a", "bad", "c"]))

        results = run(scenario())

        assert [r.value.id if r.is_ok else r.kind for r in results] == ["a", ErrorKind.NOT_FOUND, "c"]

    def test_unwrap_raises_classified_error(self):
        handler = Recorder(httpx.Response(401, json={"message": "Invalid API key"}))
        client = make_client(handler)

        result: Result = run(client.users.get_profile())

        with pytest.raises(Exception) as exc_info:
            result.unwrap()
        assert exc_info.value is result.error
        assert result.kind is ErrorKind.AUTHENTICATION

    def test_credential_is_never_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="atoship")
        handler = Recorder(httpx.Response(500, json={"message": "boom"}))
        client = make_client(handler, max_retries=2, enable_logging=True)

        run(client.orders.get("ord_1"))

        assert caplog.records
        assert any("attempt 3/3" in record.getMessage() for record in caplog.records)
        assert API_KEY not in caplog.text
        assert API_KEY not in repr(client)


class TestOtherServices:

    def test_compare_rates(self):
        handler = Recorder(httpx.Response(200, json=[
            {"carrier": "USPS", "service": "Ground Advantage", "rate": 8.5, "retail_rate": 10.0, "delivery_days": 5},
            {"carrier": "UPS", "service": "Next Day Air", "rate": 42.0, "delivery_days": 1},
            {"carrier": "FedEx", "service": "2Day", "rate": 12.0, "delivery_days": 2},
        ]))
        client = make_client(handler)

        comparison = run(client.shipping.compare_rates(rate_request())).unwrap()

        assert comparison.has_rates
        assert comparison.cheapest.carrier == "USPS"
        assert comparison.fastest.carrier == "UPS"
        assert comparison.best_value.carrier == "FedEx"
        assert comparison.cheapest.is_discounted
        assert comparison.cheapest.discount_percentage == pytest.approx(15.0)

    def test_track_package(self):
        handler = Recorder(httpx.Response(200, json={
            "tracking_number": "1Z999AA10123456784",
            "carrier": "UPS",
            "status": "delivered",
            "shipped_at": "2026-10-01T08:00:00Z",
            "actual_delivery": "2026-10-04T15:30:00Z",
            "signature": "J. DOE",
            "events": [{"timestamp": "2026-10-04T15:30:00Z", "description": "Delivered"}],
        }))
        client = make_client(handler)

        info = run(client.tracking.track("1Z999AA10123456784", carrier="ups")).unwrap()

        assert info.is_delivered
        assert not info.is_in_transit
        assert info.days_in_transit == 3
        assert handler.requests[0].url.params["carrier"] == "ups"

    def test_blank_tracking_number(self):
        client = make_client(Recorder(httpx.Response(200)))
        result = run(client.tracking.track("  "))
        assert result.error.fields == ["tracking_number"]

    def test_address_validation(self):
        handler = Recorder(httpx.Response(200, json={
            "is_valid": False,
            "errors": ["Street not found"],
            "suggestions": [{"street1": "1600 Amphitheatre Pkwy", "city": "Mountain View", "postal_code": "94043"}],
        }))
        client = make_client(handler)

        validation = run(client.addresses.validate(
            Address(street1="1600 Amphitheater Parkway", city="Mountain View", state="CA", postal_code="94043")
        )).unwrap()

        assert not validation.is_valid
        assert validation.errors == ["Street not found"]
        assert validation.suggestions[0].street1 == "1600 Amphitheatre Pkwy"

    def test_admin_user_status(self):
        handler = Recorder(httpx.Response(200, json={"id": "usr_9", "email": "x@example.com", "status": "suspended"}))
        client = make_client(handler)

        user = run(client.admin.update_user_status("usr_9", "suspended")).unwrap()

        assert user.status == "suspended"
        assert handler.requests[0].url.path == "/api/admin/users/usr_9/status"
        assert json.loads(handler.requests[0].content) == {"status": "suspended"}

    def test_test_connection(self):
        assert run(make_client(Recorder(httpx.Response(200, json={"status": "ok"}))).test_connection()) is True
        assert run(make_client(Recorder(httpx.Response(503))).test_connection()) is False
        assert run(make_client(Recorder(httpx.ConnectError("down"))).test_connection()) is False

    def test_services_are_exposed(self):
        client = AtoshipClient(API_KEY)
        for name in ("orders", "addresses", "shipping", "tracking", "users", "carriers", "webhooks", "admin"):
            assert getattr(client, name) is not None


class TestAttemptTimeout:

    def test_slow_handler_hits_attempt_deadline(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"id": "usr_1"})

        client = make_client(handler, max_retries=0, timeout=0.2)

        started = time.monotonic()
        result = run(client.users.get_profile())

        assert time.monotonic() - started < 2.0
        assert result.kind is ErrorKind.NETWORK
        assert isinstance(result.error, APITimeoutError)
        assert result.error.timeout_type == "total"

    def test_trickling_body_is_bounded(self):
        """A server sending one byte at a time never trips httpx's read timeout alone."""
        body = b'{"id": "usr_1", "email": "ops@example.com"}'

        async def serve(reader, writer):
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                + b"Content-Length: %d\r\n\r\n" % len(body)
            )
            try:
                for i in range(len(body)):
                    if reader.at_eof():
                        break
                    writer.write(body[i:i + 1])
                    await writer.drain()
                    await asyncio.sleep(0.2)
            except ConnectionError:
                pass
            finally:
                writer.close()

        async def scenario():
            server = await asyncio.start_server(serve, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            client = AtoshipClient(
                API_KEY,
                base_url=f"http://127.0.0.1:{port}",
                timeout=0.5,
                retry_config=RetryConfig(max_retries=0),
                transport=httpx.AsyncHTTPTransport(),
            )
            try:
                return await client.users.get_profile()
            finally:
                await client.aclose()
                server.close()

        started = time.monotonic()
        result = run(scenario())

        assert time.monotonic() - started < 3.0
        assert isinstance(result.error, APITimeoutError)
        assert result.error.timeout_type == "total"
