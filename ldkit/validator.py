"""Structural validation of JSON-LD documents against their compacted and expanded forms."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Iterable

_CONTEXT = "@context"
_MISSING = "!missing!"
_STRUCTURE_ERROR = "JSON-LD doc has different structure after compaction"

Compactor = Callable[[dict[str, Any]], dict[str, Any]]
Expander = Callable[[dict[str, Any]], list[Any]]


class ValidationError(ValueError):
    """Raised when a JSON-LD document fails validation."""


@dataclass
class Diff:
    """A value as the input document held it, paired with its compacted counterpart."""

    original_value: Any
    compacted_value: Any


def _compact_value(value: Any) -> Any:
    if isinstance(value, list):
        if len(value) == 1:
            return _compact_value(value[0])
        return value
    if isinstance(value, dict) and len(value) == 1 and "id" in value:
        return value["id"]
    return value


def _compact_list(items: list[Any]) -> list[Any]:
    result = []
    for item in items:
        value = _compact_value(item)
        result.append(_compact_map(value) if isinstance(value, dict) else value)
    return result


def _compact_map(mapping: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in mapping.items():
        if key == _CONTEXT:
            continue
        normalized = _compact_value(value)
        if isinstance(normalized, list):
            result[key] = _compact_list(normalized)
        elif isinstance(normalized, dict):
            result[key] = _compact_map(normalized)
        else:
            result[key] = normalized
    return result


def _structure_diff(
    original_map: dict[str, Any], compacted_map: dict[str, Any], path: str
) -> dict[str, list[Diff]]:
    original = _compact_map(original_map)
    compacted = _compact_map(compacted_map)

    if original == compacted:
        return {}

    diffs: dict[str, list[Diff]] = {}

    if len(original) != len(compacted):
        for key, value in original.items():
            if key not in compacted:
                diffs.setdefault(f"{path}.{key}", []).append(Diff(value, _MISSING))
        for key, value in compacted.items():
            if key not in original:
                diffs.setdefault(f"{path}.{key}", []).append(Diff(_MISSING, value))
        return diffs

    for key, value in original.items():
        if not isinstance(value, dict):
            continue
        if key not in compacted:
            # the key was renamed by compaction; its new name cannot be guessed
            continue
        diff_key = f"{path}.{key}"
        other = compacted[key]
        if not isinstance(other, dict):
            diffs.setdefault(diff_key, []).append(Diff(value, other))
            other = {}
        for nested_key, nested in _structure_diff(value, other, diff_key).items():
            diffs.setdefault(nested_key, []).extend(nested)

    return diffs


def find_map_diff(original: dict[str, Any], compacted: dict[str, Any]) -> dict[str, list[Diff]]:
    """Return the structural differences between a document and its compacted form.

    Contexts are ignored, one-element lists count as their element and
    objects holding only an ``id`` count as that id.
    """
    return _structure_diff(_compact_map(original), _compact_map(compacted), "$")


def _sorted_json(value: Any) -> Any:
    if isinstance(value, Diff):
        return {
            "OriginalValue": _sorted_json(value.original_value),
            "CompactedValue": _sorted_json(value.compacted_value),
        }
    if isinstance(value, dict):
        return {key: _sorted_json(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sorted_json(item) for item in value]
    return value


def _diff_details(diffs: dict[str, list[Diff]]) -> str:
    return json.dumps(
        _sorted_json(diffs), ensure_ascii=False, separators=(",", ":"), default=str
    )


def validate_context_uri_position(positions: Iterable[str], doc: dict[str, Any]) -> list[Any]:
    """Check that the document's contexts start with the given URIs, in order.

    URIs are compared case-insensitively. Returns the document's contexts.
    """
    expected = list(positions)
    context = doc.get(_CONTEXT)
    if isinstance(context, str):
        contexts: list[Any] = [context]
    elif isinstance(context, list):
        contexts = list(context)
    else:
        contexts = []

    if not expected:
        return contexts

    if len(contexts) < len(expected):
        raise ValidationError("doc context URIs amount mismatch")

    for position, (uri, actual) in enumerate(zip(expected, contexts)):
        if not isinstance(actual, str):
            raise ValidationError(f"unsupported URI type {type(actual).__name__}")
        if actual.casefold() != uri.casefold():
            raise ValidationError(f"invalid context URI on position {position}, {uri} expected")

    return contexts


def validate_types_in_expanded_doc(expanded: list[Any]) -> list[Any]:
    """Check that every type of an expanded document is a full URI; return the types."""
    if len(expanded) != 1:
        raise ValidationError(
            f"expanded document must contain only one element, got {len(expanded)}"
        )

    node = expanded[0]
    if not isinstance(node, dict):
        raise ValidationError(f"document must be a map, got {type(node).__name__}")

    if "@type" not in node:
        raise ValidationError("expanded document does not contain @type")

    types = node["@type"]
    if not isinstance(types, list):
        raise ValidationError("expanded @type must be an array")

    for item in types:
        text = str(item)
        if not text.startswith(("http://", "https://", "urn:")):
            raise ValidationError(
                f"expanded document contains unexpanded type {text}. "
                "All types should be declared in contexts"
            )

    return types


def validate_jsonld_map(
    doc: dict[str, Any],
    compact: Compactor,
    strict: bool = True,
    include_diff: bool = False,
    context_uri_positions: Iterable[str] = (),
) -> dict[str, Any]:
    """Validate a JSON-LD document by comparing it with its compacted form.

    ``compact`` compacts the document against its own context. In strict mode
    any structural change is an error. Returns the compacted document.
    """
    try:
        compacted = compact(doc)
    except Exception as err:
        raise ValidationError(f"compact JSON-LD document: {err}") from err

    diffs = find_map_diff(doc, compacted)
    if strict and diffs:
        message = _STRUCTURE_ERROR
        if include_diff:
            message = f"{message}. Details: {_diff_details(diffs)}"
        raise ValidationError(message)

    try:
        validate_context_uri_position(context_uri_positions, doc)
    except ValidationError as err:
        raise ValidationError(f"validate context URI position: {err}") from err

    return compacted


def validate_jsonld(
    text: str | bytes,
    compact: Compactor,
    strict: bool = True,
    include_diff: bool = False,
    context_uri_positions: Iterable[str] = (),
) -> dict[str, Any]:
    """Parse a JSON-LD document from text and validate it; return the compacted form."""
    try:
        doc = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise ValidationError(f"convert JSON-LD doc to map: {err}") from err
    if not isinstance(doc, dict):
        raise ValidationError("convert JSON-LD doc to map: document must be a JSON object")
    return validate_jsonld_map(doc, compact, strict, include_diff, context_uri_positions)


def validate_jsonld_types(doc: dict[str, Any], expand: Expander) -> list[Any]:
    """Check that every declared type expands to a full URI; return the expanded types.

    A document without types, or with an empty list of them, is valid and
    is not expanded.
    """
    if "type" not in doc:
        return []

    types = doc["type"]
    if isinstance(types, str):
        types = [types]
    elif not isinstance(types, list):
        raise ValidationError("type must be an array or string")

    if not types:
        return []

    try:
        expanded = expand(doc)
    except Exception as err:
        raise ValidationError(f"expand JSON-LD document: {err}") from err

    return validate_types_in_expanded_doc(expanded)