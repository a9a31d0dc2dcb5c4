"""A JSON-LD document loader backed by a context store."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol

from .context import Document, RemoteDocument, parse_document
from .store import DataNotFoundError

RemoteDocumentLoader = Callable[[str], RemoteDocument]


class ContextNotFoundError(LookupError):
    """Raised when a context is neither stored nor fetchable."""

    def __init__(self, message: str = "context not found") -> None:
        super().__init__(message)


class RemoteProvider(Protocol):
    """A source of JSON-LD context documents reachable at an endpoint."""

    @property
    def endpoint(self) -> str: ...

    def contexts(self) -> list[Document]: ...


class _ContextStore(Protocol):
    def get(self, url: str) -> RemoteDocument: ...

    def put(self, url: str, rd: RemoteDocument) -> None: ...

    def import_documents(self, documents: Iterable[Document]) -> None: ...


class _RemoteProviderStore(Protocol):
    def save(self, endpoint: str) -> object: ...


def _rewrap(prefix: str, err: Exception) -> Exception:
    cls: type[Exception] = ValueError if isinstance(err, ValueError) else RuntimeError
    return cls(f"{prefix}: {err}")


class DocumentLoader:
    """Resolves JSON-LD context documents from a store, falling back to a remote loader.

    Extra contexts and the contexts of every remote provider are imported into
    the context store when the loader is created; a later context with the same
    URL replaces an earlier one. Missing contexts are fetched only when
    ``remote_document_loader`` is given.
    """

    def __init__(
        self,
        context_store: _ContextStore,
        remote_provider_store: _RemoteProviderStore | None = None,
        *,
        remote_document_loader: RemoteDocumentLoader | None = None,
        extra_contexts: Iterable[Document] = (),
        remote_providers: Iterable[RemoteProvider] = (),
    ) -> None:
        providers = list(remote_providers)
        if providers and remote_provider_store is None:
            raise ValueError("remote provider store is required for remote providers")

        try:
            contexts = self._prepare_contexts(remote_provider_store, extra_contexts, providers)
        except Exception as err:
            raise _rewrap("get contexts", err) from err

        try:
            context_store.import_documents(contexts)
        except Exception as err:
            raise _rewrap("import contexts", err) from err

        self._store = context_store
        self._remote_loader = remote_document_loader

    @staticmethod
    def _prepare_contexts(
        provider_store: _RemoteProviderStore | None,
        extra_contexts: Iterable[Document],
        providers: list[RemoteProvider],
    ) -> list[Document]:
        contexts = {doc.url: doc for doc in extra_contexts}
        for provider in providers:
            try:
                documents = provider.contexts()
            except Exception as err:
                raise _rewrap("get provider contexts", err) from err
            contexts.update((doc.url, doc) for doc in documents)
            try:
                provider_store.save(provider.endpoint)  # type: ignore[union-attr]
            except Exception as err:
                raise _rewrap("save remote provider", err) from err
        return list(contexts.values())

    def load_document(self, url: str) -> RemoteDocument:
        """Return the document for ``url`` from the store or from the remote loader."""
        try:
            return self._store.get(url)
        except DataNotFoundError:
            return self._load_remote_document(url)
        except Exception as err:
            raise _rewrap("load document", err) from err

    def _load_remote_document(self, url: str) -> RemoteDocument:
        if not url.startswith(("http://", "https://")):
            try:
                document = parse_document(url)
            except ValueError as err:
                raise ValueError(f"parse document from reader: {err}") from err
            return RemoteDocument(document_url=url, document=document)

        if self._remote_loader is None:
            raise ContextNotFoundError()

        try:
            rd = self._remote_loader(url)
        except Exception as err:
            raise _rewrap("load remote context document", err) from err

        try:
            self._store.put(url, rd)
        except Exception as err:
            raise _rewrap("save loaded document", err) from err

        return rd