"""Values shared by the HTTP server and its clients."""

API_KEY_HEADER = "x-api-key"
DEFAULT_PUBLIC_URL = "http://localhost:3000"

__all__ = ["API_KEY_HEADER", "DEFAULT_PUBLIC_URL"]
