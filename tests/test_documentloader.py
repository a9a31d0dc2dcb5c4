import pytest

from ldkit.context import Document, RemoteDocument, parse_document
from ldkit.documentloader import ContextNotFoundError, DocumentLoader
from ldkit.store import (
    ContextStore,
    MemoryStore,
    MemoryStoreProvider,
    RemoteProviderStore,
)

SAMPLE_CONTEXT = """
{
  "@context": {
    "name": "http://xmlns.com/foaf/0.1/name",
    "homepage": {
      "@id": "http://xmlns.com/foaf/0.1/homepage",
      "@type": "@id"
    }
  }
}"""

CONTEXT_URL = "https://example.com/context.jsonld"


class FlakyStore(MemoryStore):
    def __init__(self):
        super().__init__()
        self.get_error = None
        self.put_error = None

    def get(self, key):
        if self.get_error is not None:
            raise self.get_error
        return super().get(key)

    def put(self, key, value, *tags):
        if self.put_error is not None:
            raise self.put_error
        super().put(key, value, *tags)


class SingleStoreProvider:
    def __init__(self, store):
        self.store = store

    def open_store(self, name):
        return self.store

    def set_store_config(self, name, tag_names):
        pass


class MockRemoteProvider:
    def __init__(self, documents=(), error=None):
        self.documents = list(documents)
        self.error = error
        self.endpoint = "endpoint"

    def contexts(self):
        if self.error is not None:
            raise self.error
        return self.documents


def make_context_store(store=None):
    store = store if store is not None else FlakyStore()
    return ContextStore(SingleStoreProvider(store)), store


def make_provider_store(store=None):
    store = store if store is not None else FlakyStore()
    return RemoteProviderStore(SingleStoreProvider(store), max_retries=0), store


def sample_remote_loader(url):
    return RemoteDocument(document_url=CONTEXT_URL, document=parse_document(SAMPLE_CONTEXT))


def failing_remote_loader(url):
    raise RuntimeError("load document error")


def test_extra_contexts_are_imported():
    context_store, raw = make_context_store()
    provider_store, _ = make_provider_store()
    DocumentLoader(
        context_store,
        provider_store,
        extra_contexts=[
            Document(url="https://example.com/a", content=b'{"@context":"a"}'),
            Document(url="https://example.com/b", content=b'{"@context":"b"}'),
        ],
    )
    assert len(raw) == 2


def test_later_context_replaces_earlier_with_same_url():
    context_store, _ = make_context_store()
    DocumentLoader(
        context_store,
        extra_contexts=[
            Document(url=CONTEXT_URL, content=b'{"@context":"original"}'),
            Document(url=CONTEXT_URL, content=b'{"@context":"extra"}'),
        ],
    )
    assert context_store.get(CONTEXT_URL).document["@context"] == "extra"


def test_contexts_from_remote_provider():
    provider = MockRemoteProvider(
        documents=[
            Document(url="https://json-ld.org/contexts/context-1.jsonld", content=b'{"@context":"context-1"}'),
            Document(url="https://json-ld.org/contexts/context-2.jsonld", content=b'{"@context":"context-2"}'),
        ]
    )
    context_store, raw_contexts = make_context_store()
    provider_store, raw_providers = make_provider_store()
    DocumentLoader(context_store, provider_store, remote_providers=[provider])
    assert len(raw_contexts) == 2
    assert len(raw_providers) == 1
    assert [r.endpoint for r in provider_store.get_all()] == ["endpoint"]


def test_fail_to_get_provider_contexts():
    context_store, _ = make_context_store()
    provider_store, _ = make_provider_store()
    with pytest.raises(RuntimeError, match="get provider contexts"):
        DocumentLoader(
            context_store,
            provider_store,
            remote_providers=[MockRemoteProvider(error=RuntimeError("contexts error"))],
        )


def test_fail_to_save_remote_provider():
    provider = MockRemoteProvider(
        documents=[Document(url="https://json-ld.org/contexts/context-1.jsonld", content=b'{"@context":"context-1"}')]
    )
    context_store, _ = make_context_store()
    raw = FlakyStore()
    raw.put_error = RuntimeError("save error")
    provider_store, _ = make_provider_store(raw)
    with pytest.raises(RuntimeError, match="save remote provider"):
        DocumentLoader(context_store, provider_store, remote_providers=[provider])


def test_remote_providers_need_provider_store():
    context_store, _ = make_context_store()
    with pytest.raises(ValueError, match="remote provider store"):
        DocumentLoader(context_store, remote_providers=[MockRemoteProvider()])


def test_fail_to_import_contexts():
    raw = FlakyStore()
    raw.put_error = RuntimeError("import error")
    context_store, _ = make_context_store(raw)
    with pytest.raises(RuntimeError, match="import contexts"):
        DocumentLoader(
            context_store,
            extra_contexts=[Document(url=CONTEXT_URL, content=b'{"@context":"x"}')],
        )


def test_load_context_from_store():
    context_store, _ = make_context_store()
    stored = RemoteDocument(document_url=CONTEXT_URL, document=parse_document(SAMPLE_CONTEXT))
    context_store.put(CONTEXT_URL, stored)
    loader = DocumentLoader(context_store)
    assert loader.load_document(CONTEXT_URL) == stored


def test_load_embedded_document():
    context_store, _ = make_context_store()
    loader = DocumentLoader(context_store)
    rd = loader.load_document(SAMPLE_CONTEXT)
    assert rd.document_url == SAMPLE_CONTEXT
    assert rd.document == parse_document(SAMPLE_CONTEXT)


def test_load_embedded_document_fail():
    context_store, _ = make_context_store()
    loader = DocumentLoader(context_store)
    with pytest.raises(ValueError, match="parse document from reader"):
        loader.load_document("{...}")


def test_fetch_remote_document_and_import_into_store():
    context_store, raw = make_context_store()
    loader = DocumentLoader(context_store, remote_document_loader=sample_remote_loader)
    rd = loader.load_document(CONTEXT_URL)
    assert rd.document == parse_document(SAMPLE_CONTEXT)
    assert CONTEXT_URL in raw
    assert context_store.get(CONTEXT_URL) == rd


def test_context_not_found_without_remote_loader():
    context_store, _ = make_context_store()
    loader = DocumentLoader(context_store)
    with pytest.raises(ContextNotFoundError) as info:
        loader.load_document(CONTEXT_URL)
    assert str(info.value) == "context not found"


def test_fail_to_get_context_from_store():
    raw = FlakyStore()
    context_store, _ = make_context_store(raw)
    loader = DocumentLoader(context_store)
    raw.get_error = RuntimeError("get error")
    with pytest.raises(RuntimeError, match="load document"):
        loader.load_document(CONTEXT_URL)


def test_fail_to_load_remote_document():
    context_store, _ = make_context_store()
    loader = DocumentLoader(context_store, remote_document_loader=failing_remote_loader)
    with pytest.raises(RuntimeError, match="load remote context document"):
        loader.load_document(CONTEXT_URL)


def test_fail_to_save_fetched_document():
    raw = FlakyStore()
    context_store, _ = make_context_store(raw)
    loader = DocumentLoader(context_store, remote_document_loader=sample_remote_loader)
    raw.put_error = RuntimeError("put error")
    with pytest.raises(RuntimeError, match="save loaded document"):
        loader.load_document(CONTEXT_URL)