from __future__ import annotations

import json

import pytest

from respite_client import RespiteClient, Result, caller_context, console
from respite_client.config_types import ClientConfig
from respite_client.configs import DictConfigStore
from respite_client.errors import ConfigNotFound, SigningError
from respite_client.signing import AUTH_HEADER, md5_hex

STORE = DictConfigStore({
    "brand": "company_brand",
    "service_name_service": {
        "host": "rpc.example.test",
        "port": 8443,
        "pass": "jdDU&9dk1S",
    },
    "plain": {"host": "plain.example.test", "ssl": False, "brand": "acme"},
})


def _client(fake_transport, **overrides) -> RespiteClient:
    params = {"service": "service_name"}
    params.update(overrides)
    return RespiteClient(ClientConfig(**params), store=STORE, transport=fake_transport)


def test_invoke_posts_signed_request(fake_transport, monkeypatch) -> None:
    monkeypatch.setattr("respite_client.client.current_timestamp", lambda: 1368823114)
    fake_transport.body = b'{"greeting": "hi"}'
    result = _client(fake_transport).invoke("hello", {"name": "paul"})

    assert isinstance(result, Result)
    assert result["greeting"] == "hi"
    url, headers, body = fake_transport.calls[0]
    assert url == "https://rpc.example.test:8443/service_name/hello/company_brand"
    assert headers["Content-Type"] == "x-application/json"

    digest, ts = headers[AUTH_HEADER].split(":")
    assert ts == "1368823114"
    secret = f"jdDU&9dk1S:1368823114:/service_name/hello/company_brand:{md5_hex(body)}"
    assert digest == md5_hex(secret)
    assert json.loads(body)["name"] == "paul"


def test_namespace_applied_to_url_and_signature(fake_transport, monkeypatch) -> None:
    monkeypatch.setattr("respite_client.client.current_timestamp", lambda: 1700000000)
    _client(fake_transport, namespace="test").invoke("something")
    url, headers, body = fake_transport.calls[0]
    assert url.endswith("/service_name/test_something/company_brand")
    secret = f"jdDU&9dk1S:1700000000:/service_name/test_something/company_brand:{md5_hex(body)}"
    assert headers[AUTH_HEADER] == md5_hex(secret) + ":1700000000"


def test_no_namespace_keeps_method(fake_transport) -> None:
    _client(fake_transport).invoke("Some.Odd-name")
    assert fake_transport.calls[0][0].endswith("/service_name/Some.Odd-name/company_brand")


def test_signing_disabled(fake_transport, monkeypatch) -> None:
    def _boom(*_args, **_kwargs):
        raise AssertionError("signer called")

    monkeypatch.setattr("respite_client.client.sign_request", _boom)
    monkeypatch.setattr("respite_client.client.md5_pass_token", _boom)
    _client(fake_transport, sign=False).invoke("hello")
    _client(fake_transport, sign=False, md5_pass=True).invoke("hello")
    for _, headers, _ in fake_transport.calls:
        assert AUTH_HEADER not in headers


def test_no_pass_skips_signing(fake_transport) -> None:
    client = RespiteClient(ClientConfig(service="plain"), store=STORE, transport=fake_transport)
    client.invoke("hello")
    url, headers, _ = fake_transport.calls[0]
    assert url == "http://plain.example.test:443/plain/hello/acme"
    assert AUTH_HEADER not in headers


def test_sign_required_without_pass_raises(fake_transport) -> None:
    client = RespiteClient(ClientConfig(service="plain", sign=True), store=STORE, transport=fake_transport)
    with pytest.raises(SigningError):
        client.invoke("hello")
    assert fake_transport.calls == []


def test_md5_pass_header(fake_transport) -> None:
    _client(fake_transport, md5_pass=True, sign=True).invoke("hello")
    _, headers, body = fake_transport.calls[0]
    assert headers[AUTH_HEADER] == "b39fc4d2b6ffb1a3cbe50598f14a9dbe"
    assert "x_api_auth" not in json.loads(body)


def test_md5_pass_in_body(fake_transport) -> None:
    _client(fake_transport, md5_pass=True, md5_pass_in_body=True).invoke("hello")
    _, headers, body = fake_transport.calls[0]
    assert AUTH_HEADER not in headers
    assert json.loads(body)["x_api_auth"] == "b39fc4d2b6ffb1a3cbe50598f14a9dbe"


def test_trace_disabled_never_sends_c(fake_transport) -> None:
    client = _client(fake_transport, trace=False)
    client.invoke("hello", {"_c": "from caller"})
    client.invoke("other")
    for _, _, body in fake_transport.calls:
        assert "_c" not in json.loads(body)


def test_trace_names_invoke(fake_transport) -> None:
    _client(fake_transport).invoke("hello")
    trace = json.loads(fake_transport.calls[0][2])["_c"]
    assert trace.startswith(f"{__name__}; ")
    assert trace.endswith("respite_client.RespiteClient.invoke")


def test_flat_mode_returns_dict(fake_transport) -> None:
    fake_transport.body = b'{"a": 1}'
    assert _client(fake_transport, flat=True).invoke("hello") == {"a": 1}


def test_http_error_is_result(fake_transport) -> None:
    fake_transport.status_code = 502
    fake_transport.body = b"bad gateway"
    result = _client(fake_transport).invoke("hello")
    assert result.is_error
    assert result["status_code"] == 502


def test_connection_resolved_once(fake_transport) -> None:
    calls = []

    class _CountingStore(DictConfigStore):
        def lookup(self, key):
            calls.append(key)
            return super().lookup(key)

    client = RespiteClient(
        ClientConfig(service="plain"),
        store=_CountingStore({"plain": {"host": "h", "brand": "b"}}),
        transport=fake_transport,
    )
    client.invoke("a")
    client.invoke("b")
    assert calls == ["plain_service", "plain"]


def test_config_not_found_before_any_request(fake_transport) -> None:
    client = RespiteClient(ClientConfig(service="missing"), store=STORE, transport=fake_transport)
    with pytest.raises(ConfigNotFound):
        client.invoke("hello")
    assert fake_transport.calls == []


def test_empty_method_name_is_sent_as_is(fake_transport) -> None:
    _client(fake_transport, sign=False).invoke("")
    assert fake_transport.calls[0][0] == "https://rpc.example.test:8443/service_name//company_brand"


def test_method_name_must_be_string(fake_transport) -> None:
    with pytest.raises(TypeError):
        _client(fake_transport).invoke(None)
    assert fake_transport.calls == []


def test_show_request_emits_redacted_debug_line(fake_transport, monkeypatch, caplog) -> None:
    monkeypatch.setattr(console, "show_request", lambda url, headers: None)
    monkeypatch.setattr("respite_client.client.current_timestamp", lambda: 1700000000)
    client = _client(fake_transport)

    client.invoke("hello")
    assert "calling" not in caplog.text

    monkeypatch.setenv(console.ENV_SHOW_REQUEST, "1")
    client.invoke("hello")
    _, headers, _ = fake_transport.calls[1]
    assert "calling https://rpc.example.test:8443/service_name/hello/company_brand" in caplog.text
    assert "'X-Respite-Auth': '***'" in caplog.text
    assert headers[AUTH_HEADER] not in caplog.text


def test_bound_method_helper(fake_transport) -> None:
    hello = _client(fake_transport).method("hello")
    hello({"a": 1}, b=2)
    body = json.loads(fake_transport.calls[0][2])
    assert hello.__name__ == "hello"
    assert (body["a"], body["b"]) == (1, 2)


def test_caller_context_and_overrides(fake_transport) -> None:
    client = _client(fake_transport, remote_user="svc-bot")
    with caller_context(remote_ip="9.9.9.9", remote_user="alice", auth_token="admin"):
        client.invoke("hello")
    body = json.loads(fake_transport.calls[0][2])
    assert body["_i"] == "9.9.9.9"
    assert body["_w"] == "svc-bot"
    assert body["_t"] == "admin"


def test_extra_headers(fake_transport) -> None:
    _client(fake_transport, headers={"X-Trace-Id": "abc"}).invoke("hello")
    assert fake_transport.calls[0][1]["X-Trace-Id"] == "abc"


def test_show_request_does_not_change_request(fake_transport, monkeypatch) -> None:
    shown = []
    monkeypatch.setattr(console, "show_request", lambda url, headers: shown.append((url, dict(headers))))

    _client(fake_transport, sign=False).invoke("hello", {"_c": "fixed"})
    monkeypatch.setenv(console.ENV_SHOW_REQUEST, "1")
    _client(fake_transport, sign=False).invoke("hello", {"_c": "fixed"})

    assert len(shown) == 1
    assert shown[0] == fake_transport.calls[1][:2]
    assert fake_transport.calls[0] == fake_transport.calls[1]


def test_injected_transport_not_closed(fake_transport) -> None:
    with _client(fake_transport) as client:
        client.invoke("hello")
    assert not fake_transport.closed
