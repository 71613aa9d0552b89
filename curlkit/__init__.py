"""HTTP client with JSON and form requests, retries, request IDs and request logging."""

__version__ = "0.1.0"

__all__ = ["client", "form", "logx", "retry", "tracing", "types"]