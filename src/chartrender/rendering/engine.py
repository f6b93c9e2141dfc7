# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import yaml
from jinja2 import DictLoader, Environment, StrictUndefined, Undefined

from chartrender.chart import CHARTS_DIR, TEMPLATES_DIR, Chart, ChartPath, chart_dir
from chartrender.errors import BackendInvocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateInput:
    path: str
    source: str
    # None marks a template that can be imported but is not rendered itself.
    context: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class RenderedFile:
    path: str
    content: bytes


def _to_yaml(value: Any) -> str:
    if isinstance(value, Undefined):
        # StrictUndefined raises here.
        return str(value)
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False, width=4096).rstrip("\n")


def _quote(value: Any) -> str:
    if isinstance(value, Undefined):
        value = str(value)
    if value is None:
        return '""'
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _nindent(value: Any, width: int = 2) -> str:
    pad = " " * width
    return "\n" + "\n".join(pad + line if line else line for line in str(value).splitlines())


class _ChartEnvironment(Environment):
    """
    Jinja2 environment resolving template references relative to the caller.

    A reference is tried against the directory of the including template,
    then against the ``charts/`` directory of the chart owning it (so a chart
    can import a dependency's helpers as ``common/templates/_helpers.tpl``),
    and is finally used verbatim as a path from the tree root.
    """

    def join_path(self, template: str, parent: str) -> str:
        if template.startswith("/"):
            return template.lstrip("/")
        known = self.loader.list_templates() if self.loader is not None else []
        candidates = [posixpath.normpath(posixpath.join(posixpath.dirname(parent), template))]
        owner = _owning_chart_dir(parent)
        if owner:
            candidates.append(posixpath.normpath(posixpath.join(owner, CHARTS_DIR, template)))
        for candidate in candidates:
            if candidate in known:
                return candidate
        return template


def _owning_chart_dir(path: str) -> str:
    marker = f"/{TEMPLATES_DIR}/"
    idx = path.rfind(marker)
    return path[:idx] if idx >= 0 else ""


class JinjaBackend:
    """
    Template backend built on Jinja2.

    Every call builds its own environment from the given inputs, so templates
    and values never leak from one call into the next and one instance can be
    shared between threads.
    """

    thread_safe = True

    def __init__(self, strict: bool = False):
        self.strict = strict

    def _environment(self, inputs: list[TemplateInput]) -> Environment:
        env = _ChartEnvironment(
            loader=DictLoader({item.path: item.source for item in inputs}),
            undefined=StrictUndefined if self.strict else Undefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["toyaml"] = _to_yaml
        env.filters["quote"] = _quote
        env.filters["nindent"] = _nindent
        return env

    def render(self, inputs: list[TemplateInput]) -> list[RenderedFile]:
        """
        Render every input that carries a context.

        Raises:
            BackendInvocationError: If any template fails; no output is returned.
        """
        env = self._environment(inputs)
        outputs: list[RenderedFile] = []
        diagnostics: list[str] = []
        for item in inputs:
            if item.context is None:
                continue
            try:
                text = env.get_template(item.path).render(**item.context)
            except Exception as exc:  # noqa: BLE001
                lineno = getattr(exc, "lineno", None)
                location = f"{item.path}:{lineno}" if lineno else item.path
                diagnostics.append(f"{location}: {type(exc).__name__}: {exc}")
                continue
            outputs.append(RenderedFile(path=item.path, content=text.encode("utf-8")))
        if diagnostics:
            for diagnostic in diagnostics:
                logger.debug("template failure: %s", diagnostic)
            raise BackendInvocationError(diagnostics)
        return outputs


def build_template_inputs(chart: Chart, values_by_node: Mapping[ChartPath, Mapping[str, Any]]) -> list[TemplateInput]:
    """
    Flatten a chart tree into backend inputs.

    Each renderable template is paired with the coalesced values of the chart
    that owns it and nothing else. Partials and templates of library charts are
    passed without a context so other templates can still import them.

    Raises:
        ValueError: If ``values_by_node`` has no entry for a chart of the tree.
    """
    inputs: list[TemplateInput] = []
    for path, node in chart.walk():
        base = chart_dir(path)
        values = values_by_node.get(path)
        if values is None:
            raise ValueError(f"no coalesced values for chart '{'/'.join(path)}'")
        for template in node.templates:
            backend_path = posixpath.join(base, template.name)
            if node.is_library or template.is_partial:
                inputs.append(TemplateInput(path=backend_path, source=template.source))
                continue
            context = {
                "Values": values,
                "Release": values.get("Release", {}),
                "Chart": values.get("Chart", {}),
                "Template": {"Name": backend_path, "BasePath": posixpath.join(base, TEMPLATES_DIR)},
            }
            inputs.append(TemplateInput(path=backend_path, source=template.source, context=context))
    return inputs


def render_all(
    chart: Chart,
    values_by_node: Mapping[ChartPath, Mapping[str, Any]],
    backend: Optional[Any] = None,
) -> dict[str, bytes]:
    """
    Render all templates of a chart tree with a single backend invocation.

    Args:
        chart: Root of the chart tree.
        values_by_node: Coalesced values per chart path.
        backend: Object with ``render(inputs) -> list[RenderedFile]``;
                 defaults to a non-strict :class:`JinjaBackend`.

    Returns:
        Mapping of backend-reported output path to rendered bytes.
    """
    backend = backend or JinjaBackend()
    inputs = build_template_inputs(chart, values_by_node)
    if not inputs:
        return {}
    logger.debug("invoking %s with %d template(s)", type(backend).__name__, len(inputs))
    rendered: dict[str, bytes] = {}
    for item in backend.render(inputs):
        rendered[item.path] = item.content
    return rendered
