"""
HTTP client for the Gemini generateContent endpoint.

Sends a request buffer built by gemcam.payload and returns the raw
response document. There is no retry policy here; callers decide
whether to try again.
"""

import urllib.error
import urllib.request
from typing import Optional
from urllib.parse import urlparse

from . import config
from .errors import GeminiAPIError, InvalidArgumentError, MalformedResponseError
from .extract import extract_error_message, extract_text


def model_from_url(url: str) -> Optional[str]:
    """
    Pull the model name out of a generateContent URL.

    "https://.../v1beta/models/gemini-pro-vision:generateContent" gives
    "gemini-pro-vision". Returns None if the URL has no "/<model>:" part.
    """
    if not url:
        return None
    path = urlparse(url).path
    last = path.rsplit("/", 1)[-1]
    if ":" not in last:
        return None
    model = last.split(":", 1)[0]
    return model or None


class GeminiClient:
    """
    Gemini API client.

    Usage:
        client = GeminiClient(api_key="...")
        with build_payload(prompt, jpeg) as payload:
            document = client.send(payload)
        text = extract_text(document)
    """

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        api_url: str = None,
        timeout: float = None,
    ):
        self.api_key = api_key or config.API_KEY
        self.model = model or config.MODEL
        self.api_url = (api_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout and timeout > 0 else config.TIMEOUT

        if not self.api_key:
            raise ValueError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable."
            )

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/models/{self.model}:generateContent?key={self.api_key}"

    def _redacted_endpoint(self) -> str:
        return f"{self.api_url}/models/{self.model}:generateContent"

    def send(self, payload) -> str:
        """
        POST a request document.

        Args:
            payload: OutputBuffer or bytes-like request body

        Returns:
            Response document text

        Raises:
            GeminiAPIError: non-200 status, transport failure, or an error
                object in the response
        """
        if payload is None:
            raise InvalidArgumentError("Payload is required")
        body = payload.view() if hasattr(payload, "view") else memoryview(payload)
        if len(body) == 0:
            raise InvalidArgumentError("Payload is empty")

        print(f"[client] Sending {len(body)} bytes to {self._redacted_endpoint()}")

        request = urllib.request.Request(
            self.endpoint,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Content-Length": str(len(body)),
            },
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                document = response.read().decode("utf-8", errors="replace")
                status = response.status
        except urllib.error.HTTPError as e:
            raw = e.read().decode("utf-8", errors="replace") if e.fp else ""
            message = self._error_message(raw) or e.reason
            print(f"[client] HTTP {e.code}: {message}")
            raise GeminiAPIError(str(message), status=e.code, body=raw)
        except urllib.error.URLError as e:
            print(f"[client] Connection failed: {e.reason}")
            raise GeminiAPIError(f"Could not connect to {self.api_url}: {e.reason}")

        if not document:
            raise GeminiAPIError("Empty response", status=status)

        message = self._error_message(document)
        if message is not None:
            print(f"[client] API error: {message}")
            raise GeminiAPIError(message, status=status, body=document)

        print(f"[client] Received response, {len(document)} bytes")
        return document

    @staticmethod
    def _error_message(document: str) -> Optional[str]:
        if not document:
            return None
        try:
            return extract_error_message(document)
        except MalformedResponseError:
            return "Error message parsing failed"

    def generate(self, payload) -> Optional[str]:
        """Send a request and return the generated text, or None if absent."""
        document = self.send(payload)
        try:
            return extract_text(document)
        except MalformedResponseError:
            print(f"[client] Malformed response: {document}")
            raise
