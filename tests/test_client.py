import base64
import json
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from onec_mcp.client import Client, OneCError
from onec_mcp.models import QueryRequest


@contextmanager
def serve(respond):
    """Run a local HTTP server; ``respond(request)`` returns (status, body bytes)."""
    requests = []

    class Handler(BaseHTTPRequestHandler):
        def _handle(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            record = {"method": self.command, "path": self.path,
                      "headers": self.headers, "body": body}
            requests.append(record)
            status, payload = respond(record)
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        do_GET = _handle
        do_POST = _handle

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", requests
    finally:
        server.shutdown()
        server.server_close()


def test_new_client():
    client = Client("http://localhost:8080/1c-mcp")
    assert client.base_url == "http://localhost:8080/1c-mcp"
    assert client.user == ""
    assert client.timeout == 30.0


def test_client_get():
    def respond(req):
        if req["path"] != "/test":
            return 400, b"unexpected path"
        return 200, b'{"key":"value"}'

    with serve(respond) as (url, requests):
        result = Client(url).get("/test")
    assert result == {"key": "value"}
    assert requests[0]["method"] == "GET"


def test_client_basic_auth():
    with serve(lambda req: (200, b'{"ok":true}')) as (url, requests):
        password = "secret"
        result = Client(url, user="admin", password=password).get("/auth")
    assert result == {"ok": True}
    header = requests[0]["headers"].get("Authorization")
    assert header.startswith("Basic ")
    assert base64.b64decode(header[len("Basic "):]).decode() == "admin:secret"


def test_client_no_auth_when_user_empty():
    with serve(lambda req: (200, b'{"ok":true}')) as (url, requests):
        result = Client(url).get("/noauth")
    assert result == {"ok": True}
    assert requests[0]["headers"].get("Authorization") is None


def test_client_requests_connection_close():
    with serve(lambda req: (200, b'{"closed":true}')) as (url, requests):
        result = Client(url).get("/x")
    assert result == {"closed": True}
    assert requests[0]["headers"].get("Connection", "").lower() == "close"


def test_client_get_error():
    with serve(lambda req: (500, b"internal error")) as (url, _):
        with pytest.raises(OneCError) as info:
            Client(url).get("/test")
    assert info.value.status == 500
    assert "internal error" in str(info.value)
    assert "1C returned status 500" in str(info.value)


def test_client_non_200_success_status_is_error():
    with serve(lambda req: (201, b"{}")) as (url, _):
        with pytest.raises(OneCError) as info:
            Client(url).get("/created")
    assert info.value.status == 201


def test_client_post_sends_json():
    with serve(lambda req: (200, b'{"columns":[],"rows":[],"total":0,"truncated":false}')) as (url, requests):
        result = Client(url).post("/query", QueryRequest(query="ВЫБРАТЬ 1", limit=5))
    assert result["total"] == 0
    sent = requests[0]
    assert sent["method"] == "POST"
    assert sent["headers"].get("Content-Type") == "application/json"
    assert json.loads(sent["body"]) == {"query": "ВЫБРАТЬ 1", "limit": 5}


def test_client_post_unserializable_body():
    with pytest.raises(OneCError, match="marshaling request body"):
        Client("http://127.0.0.1:1").post("/x", {"bad": object()})


def test_client_invalid_json_response():
    with serve(lambda req: (200, b"not json")) as (url, _):
        with pytest.raises(OneCError, match="decoding 1C response"):
            Client(url).get("/x")


def test_client_connection_refused():
    with pytest.raises(OneCError, match="executing request to 1C"):
        Client("http://127.0.0.1:1", timeout=2).get("/x")