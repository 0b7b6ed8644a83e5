"""Cascading merge of raw config layers.

Later layers win. Nested mappings merge key by key, so a project file can set
``watch.backend`` without restating ``watch.poll_interval`` from the user file.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``.

    - Mappings on both sides are merged recursively
    - Lists and scalars from ``override`` replace the base value
    - ``None`` in ``override`` leaves the base value in place
    """
    result = dict(base)

    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value

    return result


def merge_configs(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Fold config layers from lowest to highest priority.

    Empty or missing layers are skipped.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if layer:
            result = deep_merge(result, layer)
    return result
