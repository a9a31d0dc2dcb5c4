"""Key-value storage and the JSON-LD context and remote provider repositories."""

from __future__ import annotations

import hashlib
import time
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Protocol

from .context import (
    Document,
    RemoteDocument,
    decode_remote_document,
    encode_remote_document,
    parse_document,
)

CONTEXT_STORE_NAME = "ldcontexts"
CONTEXT_RECORD_TAG = "record"

REMOTE_PROVIDER_STORE_NAME = "remoteproviders"
REMOTE_PROVIDER_RECORD_TAG = "record"

_QUERY_RETRY_INTERVAL = 0.1
_QUERY_MAX_RETRIES = 5


class DataNotFoundError(LookupError):
    """Raised when a key is not present in a store."""


class Store(Protocol):
    def put(self, key: str, value: bytes, *tags: str) -> None: ...

    def get(self, key: str) -> bytes: ...

    def delete(self, key: str) -> None: ...

    def query(self, tag: str) -> Iterable[tuple[str, bytes]]: ...


class StoreProvider(Protocol):
    def open_store(self, name: str) -> Store: ...

    def set_store_config(self, name: str, tag_names: Iterable[str]) -> None: ...


def _wrap(prefix: str, err: BaseException) -> Exception:
    if isinstance(err, DataNotFoundError):
        cls: type[Exception] = DataNotFoundError
    elif isinstance(err, ValueError):
        cls = ValueError
    else:
        cls = RuntimeError
    return cls(f"{prefix}: {err}")


def _entries(store: Store, tag: str) -> Iterator[tuple[str, bytes]]:
    try:
        entries = iter(store.query(tag))
    except Exception as err:
        raise _wrap("query store", err) from err
    while True:
        try:
            key, value = next(entries)
        except StopIteration:
            return
        except Exception as err:
            raise _wrap("next entry", err) from err
        yield key, value


class MemoryStore:
    """An in-memory store of byte values with tag names attached."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[bytes, frozenset[str]]] = {}

    def put(self, key: str, value: bytes, *tags: str) -> None:
        self._data[key] = (bytes(value), frozenset(tags))

    def get(self, key: str) -> bytes:
        try:
            return self._data[key][0]
        except KeyError:
            raise DataNotFoundError(f"data not found: {key}") from None

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def query(self, tag: str) -> list[tuple[str, bytes]]:
        return [(key, value) for key, (value, tags) in self._data.items() if tag in tags]

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class MemoryStoreProvider:
    """Hands out one MemoryStore per store name."""

    def __init__(self) -> None:
        self.stores: dict[str, MemoryStore] = {}
        self.configs: dict[str, tuple[str, ...]] = {}

    def open_store(self, name: str) -> MemoryStore:
        return self.stores.setdefault(name, MemoryStore())

    def set_store_config(self, name: str, tag_names: Iterable[str]) -> None:
        self.configs[name] = tuple(tag_names)


def _open(provider: StoreProvider, name: str, tag: str) -> Store:
    try:
        store = provider.open_store(name)
    except Exception as err:
        raise _wrap("open store", err) from err
    try:
        provider.set_store_config(name, [tag])
    except Exception as err:
        raise _wrap("set store config", err) from err
    return store


def _hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _remote_document_bytes(doc: Document) -> bytes:
    try:
        try:
            parsed = parse_document(doc.content)
        except ValueError as err:
            raise _wrap("document from reader", err) from err
        return encode_remote_document(
            RemoteDocument(document_url=doc.document_url, document=parsed)
        )
    except Exception as err:
        raise _wrap("get remote document bytes", err) from err


class ContextStore:
    """A repository of JSON-LD context documents kept in a store."""

    def __init__(self, provider: StoreProvider) -> None:
        self._store = _open(provider, CONTEXT_STORE_NAME, CONTEXT_RECORD_TAG)

    def get(self, url: str) -> RemoteDocument:
        """Return the remote document stored under a context URL."""
        try:
            data = self._store.get(url)
        except Exception as err:
            raise _wrap("get context from store", err) from err
        try:
            return decode_remote_document(data)
        except ValueError as err:
            raise _wrap("unmarshal context document", err) from err

    def put(self, url: str, rd: RemoteDocument) -> None:
        """Save a remote document under a context URL."""
        try:
            data = encode_remote_document(rd)
        except ValueError as err:
            raise _wrap("marshal remote document", err) from err
        try:
            self._store.put(url, data)
        except Exception as err:
            raise _wrap("put remote document", err) from err

    def _context_hashes(self) -> dict[str, str]:
        try:
            return {key: _hash(value) for key, value in _entries(self._store, CONTEXT_RECORD_TAG)}
        except Exception as err:
            raise _wrap("compute context hashes", err) from err

    def import_documents(self, documents: Iterable[Document]) -> None:
        """Store the given contexts, skipping those already up to date."""
        hashes = self._context_hashes()
        pending = []
        for doc in documents:
            data = _remote_document_bytes(doc)
            if _hash(data) != hashes.get(doc.url):
                pending.append((doc.url, data))
        try:
            for url, data in pending:
                try:
                    self._store.put(url, data, CONTEXT_RECORD_TAG)
                except Exception as err:
                    raise _wrap("store context", err) from err
        except Exception as err:
            raise _wrap("save context documents", err) from err

    def delete(self, documents: Iterable[Document]) -> None:
        """Delete stored contexts whose URL and content both match."""
        hashes = self._context_hashes()
        for doc in documents:
            data = _remote_document_bytes(doc)
            if _hash(data) == hashes.get(doc.url):
                try:
                    self._store.delete(doc.url)
                except Exception as err:
                    raise _wrap("delete context document", err) from err


@dataclass(frozen=True)
class RemoteProviderRecord:
    """A stored remote context provider endpoint."""

    id: str
    endpoint: str


class RemoteProviderStore:
    """A repository of remote context provider endpoints."""

    def __init__(
        self,
        provider: StoreProvider,
        *,
        max_retries: int = _QUERY_MAX_RETRIES,
        retry_interval: float = _QUERY_RETRY_INTERVAL,
    ) -> None:
        self._store = _open(provider, REMOTE_PROVIDER_STORE_NAME, REMOTE_PROVIDER_RECORD_TAG)
        self._max_retries = max_retries
        self._retry_interval = retry_interval

    def get(self, record_id: str) -> RemoteProviderRecord:
        try:
            data = self._store.get(record_id)
        except Exception as err:
            raise _wrap("get remote provider from store", err) from err
        return RemoteProviderRecord(id=record_id, endpoint=data.decode("utf-8"))

    def get_all(self) -> list[RemoteProviderRecord]:
        return [
            RemoteProviderRecord(id=key, endpoint=value.decode("utf-8"))
            for key, value in _entries(self._store, REMOTE_PROVIDER_RECORD_TAG)
        ]

    def _find_endpoint(self, endpoint: str) -> RemoteProviderRecord | None:
        attempt = 0
        while True:
            try:
                for record in self.get_all():
                    if record.endpoint == endpoint:
                        return record
                return None
            except Exception:
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                time.sleep(self._retry_interval)

    def save(self, endpoint: str) -> RemoteProviderRecord:
        """Save an endpoint, or return the existing record for it."""
        found = self._find_endpoint(endpoint)
        if found is not None:
            return found
        record = RemoteProviderRecord(id=str(uuid.uuid4()), endpoint=endpoint)
        try:
            self._store.put(record.id, record.endpoint.encode("utf-8"), REMOTE_PROVIDER_RECORD_TAG)
        except Exception as err:
            raise _wrap("save new remote provider record", err) from err
        return record

    def delete(self, record_id: str) -> None:
        try:
            self._store.delete(record_id)
        except Exception as err:
            raise _wrap("delete remote provider record", err) from err


__all__: list[Any] = [
    "CONTEXT_RECORD_TAG",
    "CONTEXT_STORE_NAME",
    "REMOTE_PROVIDER_RECORD_TAG",
    "REMOTE_PROVIDER_STORE_NAME",
    "ContextStore",
    "DataNotFoundError",
    "MemoryStore",
    "MemoryStoreProvider",
    "RemoteProviderRecord",
    "RemoteProviderStore",
]