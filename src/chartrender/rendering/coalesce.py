# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Value coalescing for chart trees.

Values are scoped to their charts. If the root chart ``web`` depends on
``svc``, which depends on ``db``, the effective values of ``web`` are examined
for a table called ``svc``; that table overrides the defaults of ``svc``, and
a ``db`` table inside the result is in turn passed on to ``db``. A chart never
sees the values of its parent or of its siblings.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from chartrender.chart import Chart, ChartPath
from chartrender.errors import ValueShapeError

logger = logging.getLogger(__name__)

RESERVED_TABLES = ("Release", "Chart")


@dataclass(frozen=True)
class ReleaseOptions:
    name: str = "release-name"
    namespace: str = "default"
    service: str = "chartrender"
    revision: int = 1
    is_install: bool = True

    def to_table(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "Namespace": self.namespace,
            "Service": self.service,
            "Revision": self.revision,
            "IsInstall": self.is_install,
        }


def deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    keep_nulls: bool = False,
) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested tables merge recursively, any other value in ``override`` replaces
    the value in ``base`` wholesale (a table never merges with a scalar or a
    sequence). A ``None`` in ``override`` removes the key.

    With ``keep_nulls`` the ``None`` is stored instead of removing the key, so
    that it still deletes the default when the result is merged into the
    values of a chart further down the tree.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if value is None:
            if keep_nulls:
                merged[key] = None
            else:
                merged.pop(key, None)
        elif isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value, keep_nulls)
        elif isinstance(value, Mapping):
            merged[key] = copy.deepcopy(dict(value)) if keep_nulls else _strip_nulls(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def coalesce_values(
    chart: Chart,
    overrides: Optional[Mapping[str, Any]] = None,
    release: Optional[ReleaseOptions] = None,
) -> dict[ChartPath, dict[str, Any]]:
    """
    Compute the values visible to the templates of every node of a chart tree.

    Args:
        chart: Root of the chart tree.
        overrides: User-supplied values applied on top of the root defaults.
        release: Release identity injected as the ``Release`` table.

    Returns:
        Mapping of chart path (tuple of chart names from the root) to the
        coalesced values of that node, including the ``Release`` and ``Chart``
        tables.

    Raises:
        ValueShapeError: If a table is required where something else is found.
    """
    if overrides is None:
        overrides = {}
    if not isinstance(overrides, Mapping):
        raise ValueShapeError("", f"overrides must be a table, got {type(overrides).__name__}")
    release_table = (release or ReleaseOptions()).to_table()

    effective: dict[ChartPath, dict[str, Any]] = {}
    root_defaults = _defaults_of(chart, "")
    _coalesce_node(chart, (chart.name,), deep_merge(root_defaults, overrides, keep_nulls=True), effective)

    result: dict[ChartPath, dict[str, Any]] = {}
    for path, node in chart.walk():
        # Children have read their sub-tables, the null markers can go.
        values = _strip_nulls(effective[path])
        # Reserved tables are injected last and always win.
        values["Release"] = dict(release_table)
        values["Chart"] = _chart_table(node)
        result[path] = values
    return result


def _coalesce_node(
    chart: Chart,
    path: ChartPath,
    values: dict[str, Any],
    effective: dict[ChartPath, dict[str, Any]],
) -> None:
    effective[path] = values
    logger.debug("coalesced values for %s: %s", ".".join(path), sorted(values))
    for dependency in chart.dependencies:
        child_path = path + (dependency.name,)
        dotted = ".".join(child_path[1:])
        subtable = values.get(dependency.name)
        if subtable is None:
            subtable = {}
        elif not isinstance(subtable, Mapping):
            raise ValueShapeError(
                dotted,
                f"values for dependency '{dependency.name}' must be a table, got {type(subtable).__name__}",
            )
        child_values = deep_merge(_defaults_of(dependency, dotted), subtable, keep_nulls=True)
        _coalesce_node(dependency, child_path, child_values, effective)


def _defaults_of(chart: Chart, dotted: str) -> Mapping[str, Any]:
    values = chart.values if chart.values is not None else {}
    if not isinstance(values, Mapping):
        raise ValueShapeError(
            dotted,
            f"default values of chart '{chart.name}' must be a table, got {type(values).__name__}",
        )
    return values


def _chart_table(chart: Chart) -> dict[str, Any]:
    meta = chart.metadata
    return {
        "Name": meta.name,
        "Version": meta.version,
        "AppVersion": meta.app_version,
        "Type": meta.type.value,
        "Description": meta.description,
    }


def _strip_nulls(table: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in table.items():
        if value is None:
            continue
        out[key] = _strip_nulls(value) if isinstance(value, Mapping) else copy.deepcopy(value)
    return out
