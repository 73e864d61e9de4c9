"""Building HTTP requests for API tests and the session that sends them."""

from __future__ import annotations

import os
import uuid
from typing import Any
from urllib.parse import parse_qsl

import requests

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
_FILE_CONTENT_TYPE = "application/octet-stream"


class _NoRedirectSession(requests.Session):
    """A session that hands back redirect responses instead of following them."""

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        kwargs["allow_redirects"] = False
        return super().send(request, **kwargs)


def new_session(proxy_url: str | None = None) -> requests.Session:
    """Create a session that skips TLS verification and never follows redirects.

    Requests go through ``proxy_url`` when it is given; proxy settings of the
    environment are not consulted.
    """
    session = _NoRedirectSession()
    session.verify = False
    session.trust_env = False
    if proxy_url:
        session.proxies = {"http": proxy_url, "https": proxy_url}
    return session


def build_request(host: str, test: Any) -> requests.PreparedRequest:
    """Prepare the HTTP request described by ``test`` against ``host``.

    Tests with a form are sent as ``multipart/form-data``, the others with
    their request body, as JSON unless the test sets a Content-Type.
    """
    if test.form is not None:
        prepared = _multipart_request(host, test)
    else:
        prepared = _common_request(host, test)

    if test.cookies:
        cookie = "; ".join(f"{name}={value}" for name, value in test.cookies.items())
        existing = prepared.headers.get("Cookie")
        prepared.headers["Cookie"] = f"{existing}; {cookie}" if existing else cookie
    return prepared


def request_body_text(request: requests.PreparedRequest) -> str:
    """Return the body of a prepared request as text, empty when there is none."""
    body = request.body
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)


def _common_request(host: str, test: Any) -> requests.PreparedRequest:
    prepared = _prepare(test, test.to_json(), host)
    if not prepared.headers.get("Content-Type"):
        prepared.headers["Content-Type"] = JSON_CONTENT_TYPE
    return prepared


def _multipart_request(host: str, test: Any) -> requests.PreparedRequest:
    content_type = test.content_type
    if content_type and content_type != MULTIPART_CONTENT_TYPE:
        raise ValueError(
            f"test has unexpected Content-Type: {content_type}, "
            f"expected: {MULTIPART_CONTENT_TYPE}"
        )

    fields = parse_qsl(test.request, keep_blank_values=True)
    body, multipart_type = _encode_multipart(fields, test.form.files)

    prepared = _prepare(test, body, host)
    # the header must carry the boundary of the body
    prepared.headers["Content-Type"] = multipart_type
    return prepared


def _escape_quotes(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _part(boundary: str, disposition: str, content: bytes, content_type: str = "") -> bytes:
    head = f"--{boundary}\r\nContent-Disposition: {disposition}\r\n"
    if content_type:
        head += f"Content-Type: {content_type}\r\n"
    return head.encode("utf-8") + b"\r\n" + content + b"\r\n"


def _encode_multipart(
    fields: list[tuple[str, str]], files: dict[str, str]
) -> tuple[bytes, str]:
    boundary = uuid.uuid4().hex
    chunks = [
        _part(boundary, f'form-data; name="{_escape_quotes(name)}"', value.encode("utf-8"))
        for name, value in fields
    ]
    for name, path in files.items():
        with open(path, "rb") as handle:
            content = handle.read()
        disposition = (
            f'form-data; name="{_escape_quotes(name)}"; '
            f'filename="{_escape_quotes(os.path.basename(path))}"'
        )
        chunks.append(_part(boundary, disposition, content, _FILE_CONTENT_TYPE))
    chunks.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(chunks), f"{MULTIPART_CONTENT_TYPE}; boundary={boundary}"


def _prepare(test: Any, body: bytes, host: str) -> requests.PreparedRequest:
    headers: dict[str, str] = {}
    for key, value in (test.headers or {}).items():
        headers["Host" if key.lower() == "host" else key] = value

    request = requests.Request(
        method=(test.method or "GET").upper(),
        url=host + test.path + test.query,
        headers=headers,
        data=body,
    )
    return request.prepare()