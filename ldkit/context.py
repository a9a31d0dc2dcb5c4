"""JSON-LD context documents and the stored form of loaded documents."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Document:
    """A JSON-LD context document with the URLs it is known by.

    ``url`` is the context URL that appears in documents, ``document_url``
    the final URL the content was loaded from, and ``content`` the raw JSON.
    """

    url: str = ""
    document_url: str = ""
    content: bytes | str | None = None


@dataclass
class RemoteDocument:
    """A parsed JSON-LD document together with the URL it came from."""

    document_url: str = ""
    document: Any = None
    context_url: str = ""


def parse_document(data: bytes | bytearray | str | None) -> Any:
    """Parse raw JSON content into Python objects.

    Raises ValueError when the content is missing, empty or not valid JSON.
    """
    if data is None:
        raise ValueError("empty document")
    text = bytes(data).decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    if not text.strip():
        raise ValueError("empty document")
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise ValueError(
            f"invalid JSON: {err.msg} at line {err.lineno} column {err.colno}"
        ) from None


def encode_remote_document(rd: RemoteDocument) -> bytes:
    """Serialise a remote document to deterministic JSON bytes."""
    payload = {
        "contextUrl": rd.context_url,
        "document": rd.document,
        "documentUrl": rd.document_url,
    }
    try:
        text = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as err:
        raise ValueError(f"document is not JSON serialisable: {err}") from err
    return text.encode("utf-8")


def decode_remote_document(data: bytes | str) -> RemoteDocument:
    """Read a remote document back from the bytes made by encode_remote_document."""
    obj = parse_document(data)
    if not isinstance(obj, dict):
        raise ValueError("remote document must be a JSON object")

    def text_field(name: str) -> str:
        value = obj.get(name) or ""
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string")
        return value

    return RemoteDocument(
        document_url=text_field("documentUrl"),
        document=obj.get("document"),
        context_url=text_field("contextUrl"),
    )