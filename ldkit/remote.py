"""A provider that fetches JSON-LD context documents from a remote endpoint."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any, Callable

from .context import Document

DEFAULT_TIMEOUT = 60.0

HttpGet = Callable[[str, float], "tuple[int, bytes]"]


def _urllib_get(url: str, timeout: float) -> tuple[int, bytes]:
    request = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.status, response.read()
    except urllib.error.HTTPError as err:
        with err:
            return err.code, err.read()


def _text(entry: dict[str, Any], name: str) -> str:
    value = entry.get(name) or ""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _decode_documents(body: bytes) -> list[Document]:
    data = json.loads(body.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("response must be a JSON object")
    entries = data.get("documents") or []
    if not isinstance(entries, list):
        raise ValueError("documents must be an array")
    documents = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("document must be a JSON object")
        content = entry.get("content")
        documents.append(
            Document(
                url=_text(entry, "url"),
                document_url=_text(entry, "documentURL"),
                content=None if content is None else json.dumps(content).encode("utf-8"),
            )
        )
    return documents


class Provider:
    """Fetches context documents with a GET request to ``endpoint``.

    ``http_get`` takes a URL and a timeout in seconds and returns the status
    code and the response body.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        http_get: HttpGet | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._endpoint = endpoint
        self._http_get = http_get or _urllib_get
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def contexts(self) -> list[Document]:
        """Return the context documents served by the endpoint."""
        try:
            status, body = self._http_get(self._endpoint, self._timeout)
        except Exception as err:
            raise RuntimeError(f"http request: {err}") from err

        if status != 200:
            raise RuntimeError(f"response status code: {status}")

        try:
            return _decode_documents(body)
        except (ValueError, UnicodeDecodeError) as err:
            raise ValueError(f"decode response: {err}") from err