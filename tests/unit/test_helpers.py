# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import json

import httpx
import pytest

from fetchhelper import (
    Blob,
    DecodeError,
    FetchHelper,
    FetchResponse,
    FormHelper,
    HttpStatusError,
    RequestHelper,
    UnsupportedBodyTypeError,
)


class Recorder:
    """httpx.MockTransport handler returning canned responses per path."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        factory = self.responses.get(request.url.path)
        if factory is not None:
            return factory(request)
        return httpx.Response(200, json={"path": request.url.path})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _agent(recorder):
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


class StubTransport:
    def __init__(self):
        self.calls = []

    async def fetch(self, url, options):
        self.calls.append((url, options))
        return FetchResponse(httpx.Response(200, content=b"ok", request=httpx.Request("GET", url)))

    async def aclose(self):
        return None


def test_get_with_base_url_and_basic_auth():
    recorder = Recorder()
    helper = RequestHelper(
        {"baseurl": "https://api.example.com", "auth": {"username": "u", "password": "p"}, "agent": _agent(recorder)}
    )
    response = asyncio.run(helper.get("/items"))
    assert response.status == 200
    assert str(recorder.last.url) == "https://api.example.com/items"
    assert recorder.last.method == "GET"
    assert recorder.last.headers["Authorization"] == "Basic dTpw"


def test_post_json_sends_compact_json_and_decodes():
    recorder = Recorder({"/x": lambda request: httpx.Response(201, json={"echo": json.loads(request.content)})})
    helper = RequestHelper({"baseurl": "https://api.example.com", "agent": _agent(recorder)})
    result = asyncio.run(helper.post_json("/x", {"a": 1}))
    assert result == {"echo": {"a": 1}}
    assert recorder.last.content == b'{"a":1}'
    assert recorder.last.headers["Content-Type"] == "application/json"
    assert recorder.last.method == "POST"


def test_post_json_raises_http_status_error_on_404():
    recorder = Recorder({"/x": lambda request: httpx.Response(404, text="missing")})
    helper = RequestHelper({"baseurl": "https://api.example.com", "agent": _agent(recorder)})
    with pytest.raises(HttpStatusError) as exc:
        asyncio.run(helper.post_json("/x", {"a": 1}))
    assert exc.value.status == 404
    assert exc.value.code == 404
    assert exc.value.message == "Not Found"
    assert exc.value.response.status == 404
    assert asyncio.run(exc.value.response.text()) == "missing"


def test_gating_is_off_by_default_and_per_call_override_wins():
    recorder = Recorder({"/gone": lambda request: httpx.Response(410)})
    helper = RequestHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    response = asyncio.run(helper.get("/gone"))
    assert response.status == 410
    assert response.ok is False

    with pytest.raises(HttpStatusError):
        asyncio.run(helper.get("/gone", None, {"onlysuccessful": True}))

    helper.set_only_successful(True)
    with pytest.raises(HttpStatusError):
        asyncio.run(helper.get("/gone"))
    assert asyncio.run(helper.get("/gone", None, {"onlysuccessful": False})).status == 410


@pytest.mark.parametrize("status", [200, 204, 301, 399])
def test_gating_passes_statuses_below_400(status):
    recorder = Recorder({"/s": lambda request: httpx.Response(status)})
    helper = RequestHelper({"baseurl": "http://h", "onlysuccessful": True, "redirect": "manual", "agent": _agent(recorder)})
    assert asyncio.run(helper.get("/s")).status == status


def test_get_params_use_query_options_with_per_call_override():
    recorder = Recorder()
    helper = RequestHelper({"baseurl": "http://h", "array_format": "bracket", "agent": _agent(recorder)})
    asyncio.run(helper.get("/search", {"b": "x", "a": [1, 2]}))
    assert recorder.last.url.query == b"a[]=1&a[]=2&b=x"

    asyncio.run(helper.get("/search", {"a": [1, 2]}, {"array_format": "comma"}))
    assert recorder.last.url.query == b"a=1,2"

    asyncio.run(helper.get("/search?fixed=1", {"a": 1}))
    assert recorder.last.url.query == b"fixed=1&a=1"

    asyncio.run(helper.get("/search", "not-a-mapping"))
    assert recorder.last.url.query == b""

    asyncio.run(helper.get("/search", {1: "a", "b": 2}))
    assert recorder.last.url.query == b"1=a&b=2"


def test_decode_variants():
    recorder = Recorder(
        {
            "/bin": lambda request: httpx.Response(200, content=b"\x01\x02", headers={"Content-Type": "application/x-raw"}),
            "/bad": lambda request: httpx.Response(200, content=b"{nope"),
        }
    )
    helper = RequestHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    assert asyncio.run(helper.get_text("/bin")) == "\x01\x02"
    assert asyncio.run(helper.get_buffer("/bin")) == b"\x01\x02"
    assert asyncio.run(helper.get_array_buffer("/bin")) == bytearray(b"\x01\x02")
    assert asyncio.run(helper.get_blob("/bin")) == Blob(b"\x01\x02", "application/x-raw")
    assert asyncio.run(helper.get_json("/ok")) == {"path": "/ok"}
    with pytest.raises(DecodeError):
        asyncio.run(helper.get_json("/bad"))


def test_delete_encodes_params_into_body():
    recorder = Recorder()
    helper = RequestHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    assert asyncio.run(helper.delete_json("/items/1", "reason")) == {"path": "/items/1"}
    assert recorder.last.method == "DELETE"
    assert recorder.last.content == b"reason"
    assert recorder.last.headers["Content-Type"] == "text/plain"


def test_post_form_urlencoded_body():
    recorder = Recorder()
    helper = RequestHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    asyncio.run(
        helper.post(
            "/form",
            {"q": "a b", "n": 1},
            {"headers": {"Content-Type": "application/x-www-form-urlencoded"}},
        )
    )
    assert recorder.last.content == b"n=1&q=a%20b"


def test_unsupported_body_type_fails_before_sending():
    recorder = Recorder()
    helper = RequestHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    with pytest.raises(UnsupportedBodyTypeError):
        asyncio.run(helper.post("/x", 12))
    assert recorder.requests == []


def test_callable_credentials_are_evaluated_on_every_call():
    recorder = Recorder()
    counter = {"n": 0}

    def token():
        counter["n"] += 1
        return f"t{counter['n']}"

    helper = FetchHelper({"baseurl": "http://h", "auth": {"credentials": token}, "agent": _agent(recorder)})
    asyncio.run(helper.fetch("/a"))
    asyncio.run(helper.fetch("/b"))
    assert [request.headers["Authorization"] for request in recorder.requests] == ["Bearer t1", "Bearer t2"]


def test_per_call_auth_overrides_instance_auth_and_mutators_apply_later():
    recorder = Recorder()
    helper = FetchHelper({"baseurl": "http://h", "auth": {"credentials": "inst"}, "agent": _agent(recorder)})
    asyncio.run(helper.fetch("/a", {"auth": {"credentials": "call", "authtype": "Token"}}))
    assert recorder.last.headers["Authorization"] == "Token call"
    asyncio.run(helper.fetch("/a"))
    assert recorder.last.headers["Authorization"] == "Bearer inst"

    helper.set_basic_auth("u", "p")
    helper.set_base_url("http://other")
    asyncio.run(helper.fetch("/b"))
    assert recorder.last.headers["Authorization"] == "Basic dTpw"
    assert str(recorder.last.url) == "http://other/b"

    helper.set_auth({})
    asyncio.run(helper.fetch("/c"))
    assert "Authorization" not in recorder.last.headers


def test_effective_options_hide_helper_keys_and_keep_defaults_intact():
    transport = StubTransport()
    helper = FetchHelper(
        {"baseurl": "http://h", "auth": {"credentials": "x"}, "headers": {"X-A": "1"}, "timeout": 5},
        transport=transport,
    )
    asyncio.run(helper.fetch("/p", {"headers": {"X-B": "2"}, "baseurl": "http://call"}))
    url, options = transport.calls[-1]
    assert url == "http://call/p"
    assert "auth" not in options
    assert "baseurl" not in options
    assert "onlysuccessful" not in options
    assert options["headers"] == {"X-A": "1", "X-B": "2", "Authorization": "Bearer x"}
    assert options["timeout"] == 5
    assert helper.defaults == {"headers": {"X-A": "1"}, "timeout": 5}


def test_proxy_and_agent_attach_unless_overridden():
    transport = StubTransport()
    helper = FetchHelper({"proxy": "http://proxy:3128"}, transport=transport)
    asyncio.run(helper.fetch("http://h/"))
    assert transport.calls[-1][1]["proxy"] == "http://proxy:3128"
    asyncio.run(helper.fetch("http://h/", {"proxy": "http://other:8080"}))
    assert transport.calls[-1][1]["proxy"] == "http://other:8080"
    helper.set_proxy(True)
    asyncio.run(helper.fetch("http://h/"))
    assert transport.calls[-1][1]["proxy"] is True


def test_form_append_reset_and_length():
    helper = FormHelper(transport=StubTransport())
    helper.append("f", "v")
    assert helper.get_length_sync() > 0
    helper.reset()
    assert helper.get_length_sync() == 0
    assert helper.get_buffer() == b""


def test_form_post_sends_multipart_body():
    recorder = Recorder()
    helper = FormHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    helper.set_boundary("BOUNDARY")
    helper.append("f", "1")
    helper.append("f", "2")
    expected = helper.get_buffer()
    response = asyncio.run(helper.submit("/upload"))
    assert response.status == 200
    request = recorder.last
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "multipart/form-data; boundary=BOUNDARY"
    assert request.headers["Content-Length"] == str(len(expected))
    assert request.content == expected


def test_form_post_json_sets_accept_and_gates():
    recorder = Recorder({"/fail": lambda request: httpx.Response(500)})
    helper = FormHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    helper.append("a", "b")
    assert asyncio.run(helper.post_json("/ok")) == {"path": "/ok"}
    assert recorder.last.headers["Accept"] == "application/json"
    with pytest.raises(HttpStatusError) as exc:
        asyncio.run(helper.submit_json("/fail"))
    assert exc.value.status == 500


def test_form_post_uploads_large_in_memory_file():
    recorder = Recorder()
    helper = FormHelper({"baseurl": "http://h", "agent": _agent(recorder)})
    payload = b"x" * (3 * 1024 * 1024)
    helper.append("file", payload, {"filename": "big.bin"})
    response = asyncio.run(helper.post("/upload"))
    assert response.status == 200
    assert recorder.last.headers["Content-Length"] == str(helper.get_length_sync())
    assert payload in recorder.last.content
