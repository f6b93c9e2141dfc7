# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Reading chart trees from directories and writing them back.

Layout of a chart directory::

    <name>/
      Chart.yaml        metadata (required)
      values.yaml       default values (optional)
      .chartignore      patterns excluded when loading (optional)
      templates/        templates, partials start with "_"
      charts/<child>/   dependencies, same layout
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
from collections.abc import Iterable

import yaml

from chartrender.chart import CHARTS_DIR, TEMPLATES_DIR, Chart, ChartFile, ChartMetadata, Template
from chartrender.errors import ChartDefinitionError, ChartLoadError, DestinationError

logger = logging.getLogger(__name__)

CHARTFILE_NAME = "Chart.yaml"
VALUESFILE_NAME = "values.yaml"
IGNOREFILE_NAME = ".chartignore"


def load_chart(path: str) -> Chart:
    """
    Load a chart and its dependencies from a directory.

    Args:
        path: Chart directory.

    Returns:
        Fully populated chart tree.

    Raises:
        ChartLoadError: If the directory, Chart.yaml or values.yaml is invalid.
    """
    root = os.path.abspath(path)
    if not os.path.isdir(root):
        raise ChartLoadError(root, "not a chart directory")

    metadata_raw = _load_yaml(os.path.join(root, CHARTFILE_NAME), required=True)
    try:
        metadata = ChartMetadata.from_dict(metadata_raw)
    except ValueError as exc:
        raise ChartLoadError(os.path.join(root, CHARTFILE_NAME), str(exc)) from exc
    values = _load_yaml(os.path.join(root, VALUESFILE_NAME), required=False)

    rules = _load_ignore_rules(os.path.join(root, IGNOREFILE_NAME))
    templates: list[Template] = []
    files: list[ChartFile] = []
    for rel_path in _iter_files(root, rules):
        full_path = os.path.join(root, *rel_path.split("/"))
        if rel_path.startswith(TEMPLATES_DIR + "/"):
            try:
                with open(full_path, encoding="utf-8") as f:
                    templates.append(Template(name=rel_path, source=f.read()))
            except (OSError, UnicodeDecodeError) as exc:
                raise ChartLoadError(full_path, f"cannot read template: {exc}") from exc
        elif rel_path not in {CHARTFILE_NAME, VALUESFILE_NAME}:
            try:
                with open(full_path, "rb") as f:
                    files.append(ChartFile(name=rel_path, data=f.read()))
            except OSError as exc:
                raise ChartLoadError(full_path, f"cannot read file: {exc}") from exc

    dependencies: list[Chart] = []
    charts_dir = os.path.join(root, CHARTS_DIR)
    if os.path.isdir(charts_dir):
        for entry in sorted(os.listdir(charts_dir)):
            if _is_ignored(f"{CHARTS_DIR}/{entry}", True, rules):
                continue
            entry_path = os.path.join(charts_dir, entry)
            if os.path.isdir(entry_path):
                dependencies.append(load_chart(entry_path))
            else:
                logger.warning("Skipping %s: only unpacked chart directories are supported", entry_path)

    try:
        chart = Chart(
            metadata=metadata,
            templates=tuple(templates),
            values=values,
            dependencies=tuple(dependencies),
            files=tuple(files),
        )
    except ChartDefinitionError as exc:
        raise ChartLoadError(root, str(exc)) from exc
    logger.debug("loaded chart %s from %s (%d templates)", chart.name, root, len(templates))
    return chart


def save_chart(chart: Chart, dest: str) -> str:
    """
    Write a chart tree to ``dest/<chart name>``.

    Files that already exist are left untouched.

    Returns:
        Absolute path of the chart directory.
    """
    return write_chart_dir(dest, chart.name, list(_chart_payload(chart)))


def write_chart_dir(dest: str, name: str, files: Iterable[tuple[str, bytes]]) -> str:
    """
    Create ``dest/name`` with ``templates/`` and ``charts/`` and write files into it.

    A file that already exists at its target path is skipped. If writing fails,
    the chart directory is removed when this call created it, and the original
    error is re-raised.

    Raises:
        DestinationError: If ``dest`` is not a directory or ``dest/name`` is a file.
    """
    path = os.path.abspath(dest)
    if not os.path.isdir(path):
        raise DestinationError(f"no such directory {path}")
    cdir = os.path.join(path, name)
    if os.path.exists(cdir) and not os.path.isdir(cdir):
        raise DestinationError(f"file {cdir} already exists and is not a directory")

    created = not os.path.exists(cdir)
    try:
        for d in ("", TEMPLATES_DIR, CHARTS_DIR):
            os.makedirs(os.path.join(cdir, d), exist_ok=True)
        for rel_path, content in files:
            target = os.path.join(cdir, *rel_path.split("/"))
            if os.path.exists(target):
                logger.warning("File %s already exists, skipping", target)
                continue
            os.makedirs(os.path.dirname(target), exist_ok=True)
            _write_file(target, content)
    except OSError:
        if created:
            _cleanup(cdir)
        raise
    return cdir


def _write_file(path: str, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)


def _cleanup(path: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Failed to clean up %s: %s", path, exc)


def _chart_payload(chart: Chart, prefix: str = "") -> Iterable[tuple[str, bytes]]:
    yield prefix + CHARTFILE_NAME, _dump_yaml(chart.metadata.to_dict())
    if chart.values:
        yield prefix + VALUESFILE_NAME, _dump_yaml(chart.values)
    for chart_file in chart.files:
        yield prefix + chart_file.name, chart_file.data
    for template in chart.templates:
        yield prefix + template.name, template.source.encode("utf-8")
    for dependency in chart.dependencies:
        yield from _chart_payload(dependency, f"{prefix}{CHARTS_DIR}/{dependency.name}/")


def _dump_yaml(data: dict) -> bytes:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False).encode("utf-8")


def _load_yaml(path: str, required: bool) -> dict:
    if not os.path.isfile(path):
        if required:
            raise ChartLoadError(path, "file not found")
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ChartLoadError(path, f"cannot parse YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ChartLoadError(path, "must contain a YAML mapping")
    return data


def _load_ignore_rules(path: str) -> list[str]:
    if not os.path.isfile(path):
        return []
    rules = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                rules.append(line)
    return rules


def _is_ignored(rel_path: str, is_dir: bool, rules: list[str]) -> bool:
    """Match shell-glob ignore rules; the last matching rule wins, ``!`` negates."""
    ignored = False
    for rule in rules:
        negate = rule.startswith("!")
        pattern = rule[1:] if negate else rule
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern.rstrip("/")
        if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(os.path.basename(rel_path), pattern):
            ignored = not negate
    return ignored


def _iter_files(root: str, rules: list[str]) -> Iterable[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root).replace(os.sep, "/")
        rel_dir = "" if rel_dir == "." else rel_dir + "/"
        kept = []
        for d in sorted(dirnames):
            if not rel_dir and d == CHARTS_DIR:
                continue
            if not _is_ignored(rel_dir + d, True, rules):
                kept.append(d)
        dirnames[:] = kept
        for filename in sorted(filenames):
            rel_path = rel_dir + filename
            if not _is_ignored(rel_path, False, rules):
                yield rel_path
