import re

import pytest
import requests
from unittest.mock import MagicMock

from buy_me_a_coffee.client_base import (
    BaseAPIClient,
    APIClientError,
    APIClientTransportError,
    APIClientHTTPError,
    APIClientTimeout,
    APIClientEmptyResult,
    APIClientDeserializationError,
    BODY_SNIPPET_LIMIT,
)


NO_SUBSCRIPTIONS = re.compile(r"^no( \w+)? subscriptions", re.IGNORECASE)


class FakeResponse:
    def __init__(
        self,
        status_code=200,
        json_data=None,
        json_raises=False,
        text="",
        content_type="application/json",
    ):
        self.status_code = status_code
        self._json_data = json_data
        self._json_raises = json_raises
        self.text = text
        self.headers = {"Content-Type": content_type}

    def json(self):
        if self._json_raises:
            raise ValueError("Invalid JSON")
        return self._json_data


def make_client(response):
    client = BaseAPIClient(base_url="https://example.com/api/")
    client.session.get = MagicMock(return_value=response)
    return client


@pytest.mark.unit
def test_base_client_sets_default_headers():
    client = BaseAPIClient(base_url="https://example.com")
    assert client.session.headers["Accept"] == "application/json"
    assert "buy-me-a-coffee-py" in client.session.headers["User-Agent"]


@pytest.mark.unit
def test_base_client_does_not_retry_by_default():
    client = BaseAPIClient(base_url="https://example.com")
    adapter = client.session.get_adapter("https://example.com")
    assert adapter.max_retries.total == 0


@pytest.mark.unit
def test_get_json_success():
    client = make_client(FakeResponse(200, {"ok": True}))

    data = client.get_json("/v1/things", params={"page": 2})
    assert data == {"ok": True}
    client.session.get.assert_called_once()
    args, kwargs = client.session.get.call_args
    assert args[0] == "https://example.com/api/v1/things"
    assert kwargs["params"] == {"page": 2}
    assert kwargs["timeout"] == BaseAPIClient.DEFAULT_TIMEOUT


@pytest.mark.unit
def test_get_json_http_error_raises():
    client = make_client(FakeResponse(404, {"err": "nope"}, text='{"err": "nope"}'))

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/offers")

    assert "HTTP 404" in str(e.value)
    assert e.value.status_code == 404
    assert e.value.body == '{"err": "nope"}'


@pytest.mark.unit
def test_get_json_http_error_uses_message_field():
    client = make_client(FakeResponse(401, {"message": "Unauthorized"}))

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions")

    assert e.value.status_code == 401
    assert e.value.message == "Unauthorized"


@pytest.mark.unit
def test_get_json_non_json_error_body_keeps_status():
    client = make_client(
        FakeResponse(503, json_raises=True, text="Service Unavailable")
    )

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions")

    assert e.value.status_code == 503
    assert e.value.message == "Service Unavailable"


@pytest.mark.unit
def test_get_json_truncates_long_bodies():
    client = make_client(FakeResponse(500, json_raises=True, text="x" * 2000))

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions")

    assert len(e.value.body) == BODY_SNIPPET_LIMIT + 3


@pytest.mark.unit
def test_get_json_invalid_json_raises():
    client = make_client(FakeResponse(200, json_raises=True, text="<<not json"))

    with pytest.raises(APIClientDeserializationError) as e:
        client.get_json("/offers")

    assert isinstance(e.value, APIClientError)
    assert "invalid JSON" in str(e.value)


@pytest.mark.unit
def test_get_json_html_response_means_unauthorized():
    client = make_client(
        FakeResponse(200, json_raises=True, text="<html>login</html>", content_type="text/html; charset=UTF-8")
    )

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions")

    assert e.value.status_code == 401


@pytest.mark.unit
@pytest.mark.parametrize("status_code", [429, 500, 502, 503])
def test_get_json_html_error_page_keeps_status(status_code):
    client = make_client(
        FakeResponse(status_code, json_raises=True, text="<html>Bad Gateway</html>", content_type="text/html")
    )

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS)

    assert e.value.status_code == status_code
    assert e.value.message == "<html>Bad Gateway</html>"


@pytest.mark.unit
def test_get_json_timeout_raises():
    client = BaseAPIClient(base_url="https://example.com")

    def raise_timeout(*args, **kwargs):
        raise requests.Timeout("timeout")

    client.session.get = MagicMock(side_effect=raise_timeout)

    with pytest.raises(APIClientTimeout) as e:
        client.get_json("/offers")

    assert "timed out" in str(e.value).lower()
    assert isinstance(e.value, APIClientTransportError)


@pytest.mark.unit
def test_get_json_connection_error_raises_transport_error():
    client = BaseAPIClient(base_url="https://example.com")
    client.session.get = MagicMock(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(APIClientTransportError) as e:
        client.get_json("/offers")

    assert not isinstance(e.value, APIClientTimeout)
    assert e.value.url == "https://example.com/offers"
    assert isinstance(e.value.__cause__, requests.ConnectionError)


@pytest.mark.unit
def test_get_json_sentinel_on_error_status_is_empty_result():
    client = make_client(FakeResponse(404, {"message": "No active subscriptions"}))

    with pytest.raises(APIClientEmptyResult) as e:
        client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS)

    assert e.value.message == "No active subscriptions"
    assert e.value.status_code == 404


@pytest.mark.unit
def test_get_json_sentinel_in_success_body_is_empty_result():
    client = make_client(FakeResponse(200, {"error": "No subscriptions"}))

    with pytest.raises(APIClientEmptyResult):
        client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS)


@pytest.mark.unit
def test_get_json_sentinel_ignored_without_pattern():
    client = make_client(FakeResponse(404, {"message": "No subscriptions"}))

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions")

    assert e.value.status_code == 404


@pytest.mark.unit
def test_get_json_error_object_in_success_body_uses_error_code():
    client = make_client(
        FakeResponse(200, {"error_code": 429, "reason": "Too many requests"})
    )

    with pytest.raises(APIClientHTTPError) as e:
        client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS)

    assert e.value.status_code == 429
    assert e.value.message == "Too many requests"


@pytest.mark.unit
def test_get_json_page_payload_is_not_mistaken_for_error():
    payload = {"data": [], "current_page": 4, "error": None}
    client = make_client(FakeResponse(200, payload))

    assert client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS) == payload


@pytest.mark.unit
def test_get_json_sentinel_in_success_message_is_empty_result():
    client = make_client(FakeResponse(200, {"message": "No active subscriptions"}))

    with pytest.raises(APIClientEmptyResult) as e:
        client.get_json("/v1/subscriptions", empty_sentinel=NO_SUBSCRIPTIONS)

    assert e.value.status_code == 200


@pytest.mark.unit
def test_get_json_success_message_without_sentinel_is_returned():
    payload = {"message": "hello", "id": 1}
    client = make_client(FakeResponse(200, payload))

    assert client.get_json("/v1/subscriptions/1") == payload


@pytest.mark.unit
def test_base_client_keeps_explicit_timeout():
    assert BaseAPIClient(base_url="https://example.com", timeout=0).timeout == 0
    assert BaseAPIClient(base_url="https://example.com", timeout=2.5).timeout == 2.5
    assert BaseAPIClient(base_url="https://example.com").timeout == BaseAPIClient.DEFAULT_TIMEOUT


@pytest.mark.unit
def test_get_json_sends_no_per_request_headers():
    client = make_client(FakeResponse(200, {"ok": True}))

    client.get_json("/offers")

    assert "headers" not in client.session.get.call_args.kwargs
