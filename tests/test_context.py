import pytest

from ldkit.context import (
    Document,
    RemoteDocument,
    decode_remote_document,
    encode_remote_document,
    parse_document,
)

SAMPLE = """
{
  "@context": {
    "name": "http://xmlns.com/foaf/0.1/name",
    "homepage": {
      "@id": "http://xmlns.com/foaf/0.1/homepage",
      "@type": "@id"
    }
  }
}"""


def test_parse_document_from_bytes_and_text_agree():
    from_text = parse_document(SAMPLE)
    from_bytes = parse_document(SAMPLE.encode())
    assert from_text == from_bytes
    assert from_text["@context"]["name"] == "http://xmlns.com/foaf/0.1/name"


@pytest.mark.parametrize("data", [None, b"", "   ", "{...}", b"not json"])
def test_parse_document_rejects_bad_input(data):
    with pytest.raises(ValueError):
        parse_document(data)


def test_remote_document_round_trip():
    rd = RemoteDocument(
        document_url="https://example.com/context.jsonld",
        document=parse_document(SAMPLE),
    )
    restored = decode_remote_document(encode_remote_document(rd))
    assert restored == rd


def test_encoding_is_independent_of_key_order():
    first = RemoteDocument(document={"a": 1, "b": [1, 2]})
    second = RemoteDocument(document={"b": [1, 2], "a": 1})
    assert encode_remote_document(first) == encode_remote_document(second)


def test_encoding_differs_for_different_content():
    first = RemoteDocument(document={"@context": "original-context"})
    second = RemoteDocument(document={"@context": "updated-context"})
    assert encode_remote_document(first) != encode_remote_document(second)
    assert decode_remote_document(encode_remote_document(second)).document == {
        "@context": "updated-context"
    }


def test_encode_rejects_non_json_document():
    with pytest.raises(ValueError):
        encode_remote_document(RemoteDocument(document={"x": object()}))


def test_decode_rejects_non_object():
    with pytest.raises(ValueError):
        decode_remote_document(b"[1, 2]")


def test_document_holds_its_fields():
    doc = Document(url="https://example.com/context.jsonld", content=SAMPLE)
    assert doc.document_url == ""
    assert parse_document(doc.content) == parse_document(SAMPLE)