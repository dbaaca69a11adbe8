import httpx
import pytest

from zipradius.core.http import get_json, redact_url


def test_get_json_decodes_body_and_sends_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers["User-Agent"]
        seen["country"] = request.url.params["country"]
        return httpx.Response(200, json={"features": []})

    payload = get_json(
        "https://geo.test/places/10001.json",
        params={"country": "US"},
        transport=httpx.MockTransport(handler),
    )

    assert payload == {"features": []}
    assert seen == {"ua": "zipradius/0.1.0", "country": "US"}


def test_status_errors_mask_the_access_token():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "Not Authorized"}))

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        get_json("https://geo.test/places/10001.json", params={"access_token": "pk.secret"}, transport=transport)

    message = str(excinfo.value)
    assert "pk.secret" not in message
    assert httpx.URL(message.split(" from ", 1)[1]).params["access_token"] == "***"
    assert excinfo.value.response.status_code == 401


def test_non_json_body_raises_value_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(ValueError):
        get_json("https://geo.test/x.json", transport=transport)


def test_redact_url_keeps_other_params():
    url = httpx.URL("https://geo.test/a.json", params={"types": "postcode", "access_token": "t"})
    redacted = httpx.URL(redact_url(url))
    assert redacted.params["types"] == "postcode"
    assert redacted.params["access_token"] == "***"
