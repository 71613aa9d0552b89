"""A small HTTP client with request ids, retries and request logging."""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.request
from typing import Any, Callable, Dict, Mapping, Optional

from curlkit.form import encode_multipart_form_values, encode_url_form_values
from curlkit.retry import DEFAULT_INTERVAL, DEFAULT_MAX_RETRIES, RetryConfig
from curlkit.tracing import get_trace_id, remove_newline, request_logger
from curlkit.types import FormFile

DEFAULT_REQUEST_ID_KEY = "X-Request-ID"
DEFAULT_TIMEOUT_SECONDS = 5.0

_STATUS_OK = 200


class HTTPStatusError(Exception):
    """Raised when the server answers with a status of 300 or above."""

    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self.body = body
        text = body.decode("utf-8", errors="replace")
        super().__init__(f"status {status}: {text}")


def _merge_headers(*sources: Mapping[str, str]) -> Dict[str, str]:
    """Merge header mappings, later ones replacing earlier ones case-insensitively."""
    merged: Dict[str, tuple] = {}
    for source in sources:
        for name, value in source.items():
            merged[name.lower()] = (name, value)
    return dict(merged.values())


class Client:
    """HTTP client sending JSON, query and form requests.

    ``headers`` are added to every request, ``request_id_key`` names the
    header that carries the request id and ``timeout`` is given in seconds,
    where 0 or None means no timeout.
    """

    def __init__(
        self,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        request_id_key: str = DEFAULT_REQUEST_ID_KEY,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.request_id_key = request_id_key
        self.headers: Dict[str, str] = dict(headers or {})
        self.retry = RetryConfig(DEFAULT_MAX_RETRIES, DEFAULT_INTERVAL)

    def with_retry(self, max_retries: int, interval: float) -> "Client":
        """Retry failed requests ``max_retries`` times, pausing ``interval`` seconds."""
        self.retry = RetryConfig(max_retries=max_retries, interval=interval)
        return self

    def post_json(self, url: str, body: Any) -> bytes:
        """POST ``body`` encoded as JSON and return the response body."""

        def build() -> urllib.request.Request:
            data = json.dumps(body).encode("utf-8")
            return self._request("POST", url, data, "application/json")

        return self._execute(f"PostJSON {url} {body}", build)

    def get(self, url: str, query: Optional[Mapping[str, str]] = None) -> bytes:
        """GET ``url`` with ``query`` appended as ``k=v`` pairs and return the body."""
        if query:
            url += "?" + "&".join(f"{key}={value}" for key, value in query.items())
        return self._execute(f"Get {url}", lambda: self._request("GET", url, None, None))

    def post_form(self, url: str, form: Mapping[str, Any]) -> bytes:
        """POST ``form`` and return the response body.

        The form is sent as multipart data when it holds a FormFile, and
        URL-encoded otherwise.
        """

        def build() -> urllib.request.Request:
            if any(isinstance(value, FormFile) for value in form.values()):
                data, content_type = encode_multipart_form_values(form)
            else:
                data = encode_url_form_values(form).encode("ascii")
                content_type = "application/x-www-form-urlencoded"
            return self._request("POST", url, data, content_type)

        return self._execute(f"PostForm {url} {form}", build)

    def _request(
        self,
        method: str,
        url: str,
        data: Optional[bytes],
        content_type: Optional[str],
    ) -> urllib.request.Request:
        base = {"Content-Type": content_type} if content_type else {}
        headers = _merge_headers(base, self.headers)
        wanted = self.request_id_key.lower()
        if not any(name.lower() == wanted and value for name, value in headers.items()):
            headers = _merge_headers(headers, {self.request_id_key: get_trace_id()})
        return urllib.request.Request(url, data=data, headers=headers, method=method)

    def _execute(self, summary: str, build: Callable[[], urllib.request.Request]) -> bytes:
        start = time.monotonic()
        try:
            request = build()
            result = self.retry.run(lambda: self._send(request))
            content = result if result is not None else b""
        except Exception as exc:
            request_logger().with_duration(time.monotonic() - start).error(
                f"Request: {summary}, Error: {exc}"
            )
            raise
        request_logger().with_duration(time.monotonic() - start).info(
            f"Request: {summary}, Response: {_STATUS_OK}, Body: {remove_newline(content)}"
        )
        return content

    def _send(self, request: urllib.request.Request) -> bytes:
        timeout = self.timeout or None
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            body = exc.read()
            raise HTTPStatusError(exc.code, body) from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise TimeoutError(
                    f"request to {request.full_url} timed out: deadline exceeded"
                ) from exc
            raise
        except TimeoutError as exc:
            raise TimeoutError(
                f"request to {request.full_url} timed out: deadline exceeded"
            ) from exc
        if status >= 300:
            raise HTTPStatusError(status, body)
        return body