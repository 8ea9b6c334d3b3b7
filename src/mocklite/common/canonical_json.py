from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable, Mapping

JsonLike = Any

# Joins per-position renders. json.dumps always escapes control characters,
# so a rendered JSON text can never contain this separator.
ARG_SEPARATOR = "\x1f"

# Tagged forms are single-key objects whose key starts with TAG_PREFIX.
# Literal string keys starting with TAG_PREFIX get one more prefix, so no
# literal mapping renders as a tagged form.
TAG_PREFIX = "$"
MAP_TAG = TAG_PREFIX + "map"
SET_TAG = TAG_PREFIX + "set"
OBJECT_TAG = TAG_PREFIX + "obj"


def _to_primitive(obj: JsonLike) -> JsonLike:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if hasattr(obj, "model_dump") and callable(getattr(obj, "model_dump")):
        return obj.model_dump(mode="json")
    return obj


def _escape_key(key: str) -> str:
    return TAG_PREFIX + key if key.startswith(TAG_PREFIX) else key


def canonicalize(obj: JsonLike) -> JsonLike:
    obj = _to_primitive(obj)

    if isinstance(obj, Mapping):
        if all(isinstance(k, str) for k in obj):
            return {_escape_key(k): canonicalize(v) for k, v in obj.items()}
        items = sorted(obj.items(), key=lambda kv: canonical_dumps_str(kv[0]))
        return {MAP_TAG: [[canonicalize(k), canonicalize(v)] for k, v in items]}

    if isinstance(obj, (list, tuple)):
        return [canonicalize(item) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return {SET_TAG: sorted((canonicalize(item) for item in obj), key=canonical_dumps_str)}

    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj

    return {OBJECT_TAG: [type(obj).__qualname__, repr(obj)]}


def canonical_dumps_str(obj: Any) -> str:
    return json.dumps(
        canonicalize(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def render_arguments(rendered: Iterable[str]) -> str:
    return ARG_SEPARATOR.join(rendered)
