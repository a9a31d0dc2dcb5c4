# ldkit

Building blocks for JSON-LD context storage, document loading, linked-data
proofs and structural validation. The package has no dependencies outside
the standard library.

## Modules

- `ldkit.context`: `Document` (a context with `url`, `document_url` and raw
  `content`) and `RemoteDocument` (a parsed document with its
  `document_url`). It also has `parse_document`, `encode_remote_document` and
  `decode_remote_document`, which turn raw JSON into objects and remote
  documents into bytes and back.
- `ldkit.store`: `MemoryStore` and `MemoryStoreProvider` are an in-memory
  key/value store whose values carry tags. `ContextStore` holds JSON-LD
  contexts with `get`, `put`, `import_documents` and `delete`.
  `import_documents` writes only the contexts whose content changed, and
  `delete` removes only the contexts whose content matches.
  `RemoteProviderStore` records remote provider endpoints with `get`,
  `get_all`, `save` and `delete`. `save` returns the existing record when the
  endpoint is already known. A missing key raises `DataNotFoundError`.
- `ldkit.documentloader`: `DocumentLoader` imports extra contexts and the
  contexts of remote providers into a context store when it is created. When
  two contexts share a URL, the later one wins. `load_document(url)` tries the
  store first. A value that is not an `http://` or `https://` URL is parsed
  as inline JSON. Other URLs go to the `remote_document_loader` callable if
  one was given, and the result is saved in the store; without such a
  callable the loader raises `ContextNotFoundError`.
- `ldkit.remote`: `Provider(endpoint, http_get=..., timeout=...)` fetches a
  `{"documents": [...]}` response with a GET request and returns its
  `Document`s from `contexts()`. By default it uses `urllib`.
- `ldkit.processor`: `transform_blank_node` turns the first `_:c14n…` label
  in an N-Quads statement into `<urn:bnid:_:c14n…>`.
  `append_external_contexts` adds extra context URLs after a document's
  `@context`.
- `ldkit.proof`: `Proof`, `parse_proof`, `Proof.to_jsonld`,
  `Proof.public_key_id`, `get_proofs`, `add_proof`, `copy_without_proof`,
  `decode_proof_value` and `encode_proof_value`. `Ed25519Signature2020` uses
  multibase base58btc, `DataIntegrityProof` uses the raw text, and every other
  type uses base64. `ProofTime`/`parse_time` keep the exact RFC 3339 text of
  `created`. When a document has no proof, `get_proofs` raises
  `ProofNotFoundError`.
- `ldkit.verifydata`: `create_verify_data`, `create_verify_hash`,
  `create_detached_jwt_header` and `get_jwt_signature`. The verify data is
  built from a `SignatureSuite` that you supply. The suite provides
  `get_canonical_document`, `get_digest`, `compact` and `compact_proof`.
- `ldkit.validator`: `validate_jsonld` and `validate_jsonld_map` compare a
  document with its compacted form, and `find_map_diff` reports the
  differences as `Diff`s. `validate_context_uri_position` checks where
  `@context` URIs sit. `validate_jsonld_types` and
  `validate_types_in_expanded_doc` check that every expanded type is a full
  URI. Failures raise `ValidationError`.

## What the package does not do

- It does not implement the JSON-LD algorithms: compaction, expansion,
  framing, RDF conversion and URDNA2015 canonicalisation. `validate_jsonld`
  and `validate_jsonld_types` take a `compact` or `expand` callable. The
  verify-data functions rely on the `SignatureSuite` you pass in.
- It bundles no context documents. The loader knows only the contexts you
  import or fetch.
- It does not sign or verify. It only builds the bytes a signature covers.
- `MemoryStore` lives in memory only. For persistence, supply your own
  object that has `put`, `get`, `delete` and `query` methods.

## Examples

```python
from ldkit.context import Document
from ldkit.store import ContextStore, MemoryStoreProvider

store = ContextStore(MemoryStoreProvider())
store.import_documents([
    Document(url="https://example.com/context.jsonld",
             content=b'{"@context": {"name": "http://xmlns.com/foaf/0.1/name"}}'),
])
rd = store.get("https://example.com/context.jsonld")
print(rd.document["@context"]["name"])
```

```python
from ldkit.documentloader import DocumentLoader, ContextNotFoundError
from ldkit.store import ContextStore, MemoryStoreProvider, RemoteProviderStore

provider = MemoryStoreProvider()
loader = DocumentLoader(ContextStore(provider), RemoteProviderStore(provider))
try:
    loader.load_document("https://example.com/unknown.jsonld")
except ContextNotFoundError:
    print("not stored, and no remote loader configured")
```

```python
from ldkit.proof import parse_proof

proof = parse_proof({
    "type": "Ed25519Signature2018",
    "creator": "did:example:123#key1",
    "created": "2018-03-15T00:00:00Z",
    "jws": "header..signature",
})
print(proof.public_key_id())
```

```python
from ldkit.processor import transform_blank_node

print(transform_blank_node("_:c14n0 <http://example.com/p> \"v\" ."))
```

## Running the tests

```
pip install .[test]
pytest
```