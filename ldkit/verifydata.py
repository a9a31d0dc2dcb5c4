"""Building the data that a linked-data signature signs or verifies."""

from __future__ import annotations

import json
from typing import Any, Protocol

from .proof import Proof, SignatureRepresentation, _b64url_decode, _b64url_encode, copy_without_proof

SECURITY_CONTEXT = "https://w3id.org/security/v2"
SECURITY_CONTEXT_JWK2020 = "https://w3id.org/security/jws/v1"

_CONTEXT = "@context"
_CREATED = "created"
_EXCLUDED_PROOF_KEYS = frozenset({"id", "proofValue", "jws", "nonce"})


class SignatureSuite(Protocol):
    """What a signature suite provides for building verify data.

    ``compact_proof`` tells whether documents are compacted against the
    security context before canonicalisation; ``compact`` performs that
    compaction with a ``{"@context": ...}`` context object.
    """

    compact_proof: bool

    def get_canonical_document(self, doc: dict[str, Any]) -> bytes: ...

    def get_digest(self, data: bytes) -> bytes: ...

    def compact(self, doc: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]: ...


def _compact_with_security_schema(suite: SignatureSuite, doc: dict[str, Any]) -> dict[str, Any]:
    return suite.compact(doc, {_CONTEXT: SECURITY_CONTEXT})


def create_verify_data(suite: SignatureSuite, doc: dict[str, Any], proof: Proof) -> bytes:
    """Return the data to sign or verify, chosen by where the proof holds its signature."""
    representation = proof.signature_representation
    if representation == SignatureRepresentation.PROOF_VALUE:
        return create_verify_hash(suite, doc, proof.to_jsonld())
    if representation == SignatureRepresentation.JWS:
        return _create_verify_jws(suite, doc, proof)
    raise ValueError(f"unsupported signature representation: {representation}")


def create_verify_hash(
    suite: SignatureSuite, doc: dict[str, Any], proof_options: dict[str, Any]
) -> bytes:
    """Return the digest of the proof options followed by the digest of the document.

    Proof options without a context borrow the document's context.
    """
    options = dict(proof_options)
    if _CONTEXT not in options:
        options[_CONTEXT] = doc.get(_CONTEXT)

    options_digest = suite.get_digest(_canonical_proof_options(suite, options))
    doc_digest = suite.get_digest(suite.get_canonical_document(copy_without_proof(doc)))
    return options_digest + doc_digest


def _canonical_proof_options(suite: SignatureSuite, options: dict[str, Any]) -> bytes:
    if options.get(_CREATED) is None:
        raise ValueError("created is missing")
    trimmed = {key: value for key, value in options.items() if key not in _EXCLUDED_PROOF_KEYS}
    if suite.compact_proof:
        trimmed = _compact_with_security_schema(suite, trimmed)
    return suite.get_canonical_document(trimmed)


def _create_verify_jws(suite: SignatureSuite, doc: dict[str, Any], proof: Proof) -> bytes:
    options = proof.to_jsonld()
    options[_CONTEXT] = [SECURITY_CONTEXT, SECURITY_CONTEXT_JWK2020]
    options.pop("jws", None)
    options.pop("proofValue", None)
    options_digest = suite.get_digest(suite.get_canonical_document(options))

    document = copy_without_proof(doc)
    if suite.compact_proof:
        document = _compact_with_security_schema(suite, document)
    doc_digest = suite.get_digest(suite.get_canonical_document(document))

    header = _jwt_header(proof.jws)
    return (header + ".").encode("utf-8") + options_digest + doc_digest


def create_detached_jwt_header(alg: str) -> str:
    """Return a base64url JWT header for a signature with a detached, unencoded payload."""
    header = {"alg": alg, "b64": False, "crit": ["b64"]}
    text = json.dumps(header, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return _b64url_encode(text.encode("utf-8"))


def get_jwt_signature(jwt: str) -> bytes:
    """Return the decoded signature part of a compact JWT."""
    parts = jwt.split(".")
    if len(parts) != 3 or not parts[2]:
        raise ValueError("invalid JWT")
    return _b64url_decode(parts[2])


def _jwt_header(jwt: str) -> str:
    parts = jwt.split(".")
    if len(parts) != 3:
        raise ValueError("invalid JWT")
    return parts[0]