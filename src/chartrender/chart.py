# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
In-memory chart tree.

A chart is a named, versioned bundle of templates and default values that may
nest other charts as dependencies. Charts are built by the loader or the
scaffold generator and are treated as immutable by the rendering pipeline.
"""

from __future__ import annotations

import enum
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from chartrender.errors import ChartDefinitionError

ChartPath = tuple[str, ...]

TEMPLATES_DIR = "templates"
CHARTS_DIR = "charts"


class ChartType(str, enum.Enum):
    APPLICATION = "application"
    LIBRARY = "library"


@dataclass(frozen=True)
class ChartMetadata:
    name: str
    version: str = "0.1.0"
    app_version: str = ""
    type: ChartType = ChartType.APPLICATION
    description: str = ""
    api_version: str = "v1"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChartMetadata:
        """Build metadata from a parsed Chart.yaml mapping."""
        return cls(
            name=str(data.get("name") or ""),
            version=str(data.get("version") or "0.1.0"),
            app_version=str(data.get("appVersion") or ""),
            type=ChartType(data.get("type") or ChartType.APPLICATION.value),
            description=str(data.get("description") or ""),
            api_version=str(data.get("apiVersion") or "v1"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "version": self.version,
            "appVersion": self.app_version,
        }


@dataclass(frozen=True)
class Template:
    name: str
    source: str

    @property
    def is_partial(self) -> bool:
        """Partials (``_helpers.tpl``) can be imported but produce no output."""
        return posixpath.basename(self.name).startswith("_")


@dataclass(frozen=True)
class ChartFile:
    name: str
    data: bytes


@dataclass(frozen=True)
class Chart:
    metadata: ChartMetadata
    templates: tuple[Template, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)
    dependencies: tuple[Chart, ...] = ()
    files: tuple[ChartFile, ...] = ()

    def __post_init__(self):
        name = self.metadata.name
        if not name:
            raise ChartDefinitionError("chart name must be a non-empty string")
        if "/" in name or "\\" in name or name in {".", ".."}:
            raise ChartDefinitionError(f"chart name '{name}' cannot be used as a path segment")
        # Accept lists from callers but store tuples.
        object.__setattr__(self, "templates", tuple(self.templates))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "files", tuple(self.files))
        _ensure_unique([t.name for t in self.templates], f"template in chart '{name}'")
        _ensure_unique([d.name for d in self.dependencies], f"dependency of chart '{name}'")

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_library(self) -> bool:
        return self.metadata.type == ChartType.LIBRARY

    def walk(self, parent: ChartPath = ()) -> Iterator[tuple[ChartPath, Chart]]:
        """Yield ``(path, chart)`` for this chart and all dependencies, root first."""
        path = parent + (self.name,)
        yield path, self
        for dependency in self.dependencies:
            yield from dependency.walk(path)

    def dependency(self, name: str) -> Optional[Chart]:
        for dependency in self.dependencies:
            if dependency.name == name:
                return dependency
        return None


def chart_dir(path: ChartPath) -> str:
    """
    Relative directory of a chart node inside the tree.

    ``("web",)`` maps to ``web`` and ``("web", "svc")`` to ``web/charts/svc``.
    """
    if not path:
        return ""
    parts = [path[0]]
    for name in path[1:]:
        parts.extend([CHARTS_DIR, name])
    return posixpath.join(*parts)


def _ensure_unique(names: list[str], what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ChartDefinitionError(f"duplicate {what}: '{name}'")
        seen.add(name)
