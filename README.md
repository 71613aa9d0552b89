# curlkit

`curlkit` is a small, blocking HTTP client for service-to-service calls. It is built on `urllib` from the standard library and has no other dependencies.

It offers:

- JSON `POST`, `GET` with query parameters, and form posts. A form post is URL-encoded, or multipart when it holds a `FormFile`.
- Optional retries with a fixed pause after each failed attempt.
- A request ID header on every request. The value is the current trace ID if one is set, and a fresh UUID otherwise.
- One log line per request through the standard `logging` module.

## Installation

```
pip install curlkit
```

## Usage

```python
from curlkit.client import Client, HTTPStatusError
from curlkit.types import FormFile

client = Client().with_retry(2, 0.5)   # up to 3 attempts, 0.5 s pause after each failure

body = client.post_json("http://localhost:8080/json", {"foo": "bar"})   # returns bytes
body = client.get("http://localhost:8080/items", {"k": "v"})

# URL-encoded: lists become ids[]=..., dicts become key[sub]=...
client.post_form("http://localhost:8080/form", {"name": "go", "ids": [1, 2]})

# Multipart, because a FormFile is present
client.post_form(
    "http://localhost:8080/upload",
    {"file": FormFile(path="/tmp/report.txt", file_name="report.txt")},
)

try:
    client.get("http://localhost:8080/missing")
except HTTPStatusError as exc:
    print(exc.status, exc.body)   # str(exc) is "status 404: <body>"
```

`Client(timeout=5.0, request_id_key="X-Request-ID", headers=None)` takes these options:

- `timeout` is given in seconds. A value of `0` or `None` turns the timeout off.
- `request_id_key` names the header that carries the request ID.
- `headers` are added to every request. You can also change them later through `client.headers`.

Responses:

- A response with status 300 or higher raises `HTTPStatusError`, which carries `status` and `body`.
- A timeout raises `TimeoutError`, and its message contains "deadline exceeded".
- Other connection errors are raised as they come from `urllib`.
- Without `with_retry`, a request is tried once.

Query parameters passed to `get` are joined as `key=value` with `&` and are not percent-encoded.

### Request IDs and tracing

```python
from curlkit.tracing import trace_context, get_trace_id

with trace_context("4bf92f3577b34da6a3ce929b0e0e4736"):
    client.get("http://localhost:8080/ping")   # sent with X-Request-ID set to the trace ID
```

If `client.headers` already holds a non-empty request ID header, the client sends it as it is.

Other helpers in `curlkit.tracing`:

- `generate_request_id()` returns a new UUID.
- `remove_newline(data)` returns bytes or text as text with the line feeds removed.

### Logging

Every request logs one line to the `curlkit.http` logger:

- at INFO level with the response body when the request succeeds;
- at ERROR level with the error when it fails.

Each line ends with the following tab-separated fields:

- `duration=...ms`;
- `action=httpCurl`;
- `trace=<id>`, when a trace ID is set.

`curlkit.logx.get_logger(name)` returns a `ContextLogger`. Its `with_fields(**kwargs)` and `with_duration(seconds_or_timedelta)` return new loggers that carry extra fields. Its `info`, `error` and `debug` methods write the message.

### Form encoding on its own

You can use the encoders in `curlkit.form` without a client.

`encode_url_form_values(form)` and `encode_multipart_form_values(form)` work on plain dictionaries:

- The URL-encoded output is sorted by field name and skips `FormFile` entries.
- The multipart function returns `(body, content_type)`.

`encode_url_form` and `encode_multipart_form` take `FormValue` entries instead. `has_file(form)` tells whether a form holds a file.

Supported values are:

- strings, integers and floats;
- dictionaries, sent as `key[sub]`;
- lists of strings.

The URL-encoded encoders also take lists of integers. `encode_url_form_values` also takes lists of dictionaries, sent as `key[i][sub]`. Any other value raises `TypeError`.

## What it does not do

- It is a library only. It has no command-line tool.
- It has no async API and no connection pooling.
- It returns only the response body. Response headers are not exposed.