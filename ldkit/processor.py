"""Helpers for JSON-LD contexts and canonical N-Quads statements."""

from __future__ import annotations

from typing import Any

_BLANK_NODE_PREFIX = "_:c14n"


def append_external_contexts(context: Any, *extra_contexts: str) -> list[Any]:
    """Return the contexts of ``context`` followed by ``extra_contexts``.

    A string context becomes a one-element list and a list is copied; any
    other value contributes nothing.
    """
    if isinstance(context, str):
        contexts: list[Any] = [context]
    elif isinstance(context, list):
        contexts = list(context)
    else:
        contexts = []
    contexts.extend(extra_contexts)
    return contexts


def transform_blank_node(row: str) -> str:
    """Wrap the first canonical blank node label of a statement as an IRI.

    For example ``_:c14n0`` becomes ``<urn:bnid:_:c14n0>``.
    """
    start = row.find(_BLANK_NODE_PREFIX)
    if start < 0:
        return row
    end = row.find(" ", start)
    if end < 0:
        end = len(row)
    return f"{row[:start]}<urn:bnid:{row[start:end]}>{row[end:]}"