"""Serialise collection results as JSON."""

import json

from ..models.schema import CollectionResult


def dump_json(result: CollectionResult, pretty: bool = True) -> str:
    """Return *result* as a JSON document."""
    indent = 2 if pretty else None
    return json.dumps(result.model_dump(mode="json"), indent=indent, ensure_ascii=False)
