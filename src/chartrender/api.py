# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
API layer for value overrides and chart rendering.

This module collects override values from different input sources (values
files, inline ``KEY=VALUE`` options) and renders chart directories with them.
"""

import logging
import os
import posixpath
from typing import Any, Dict, List, Optional

import yaml

from .artifacts import OutputWriter
from .loader import load_chart
from .rendering import JinjaBackend, ReleaseOptions, Renderer, deep_merge

logger = logging.getLogger(__name__)

NOTES_NAME = "NOTES.txt"


def _cast_literal(s: str) -> Any:
    """
    Lightweight casting via YAML loader to get bool/int/float.

    Args:
        s: String value to cast

    Returns:
        Casted value (bool, int, float, or original string)
    """
    try:
        return yaml.safe_load(s)
    except Exception:
        return s


def parse_cli_params(argv: List[str]) -> Dict[str, Any]:
    """
    Parse command-line parameters in key=value format.

    Args:
        argv: List of ``dotted.key=value`` strings

    Returns:
        Dictionary of parsed parameters

    Raises:
        ValueError: If an item has no ``=`` or an empty key.
    """
    cli_params: Dict[str, Any] = {}
    for item in argv:
        if "=" not in item:
            raise ValueError(f"Invalid --set value '{item}', expected KEY=VALUE.")
        key, val = item.split("=", 1)
        if not key.strip():
            raise ValueError(f"Invalid --set value '{item}', key is empty.")
        _assign_path(cli_params, key.strip(), _cast_literal(val))
    return cli_params


def load_values_files(paths: Optional[List[str]]) -> Dict[str, Any]:
    """
    Load values files and merge them in order, later files winning.

    A ``null`` value is kept so it can delete a chart default when the
    overrides are coalesced.

    Raises:
        FileNotFoundError: If a file does not exist.
        ValueError: If a file does not contain a YAML mapping.
    """
    merged: Dict[str, Any] = {}
    for path in paths or []:
        expanded = os.path.abspath(path)
        if not os.path.isfile(expanded):
            raise FileNotFoundError(f"Values file not found: {expanded}")
        with open(expanded, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Values file {expanded} must contain a YAML mapping.")
        merged = deep_merge(merged, loaded, keep_nulls=True)
    return merged


def prepare_overrides(values_files: Optional[List[str]], set_args: Optional[List[str]]) -> Dict[str, Any]:
    """Merge values files and inline ``--set`` overrides, inline values winning."""
    overrides = load_values_files(values_files)
    inline = parse_cli_params(set_args or [])
    if not inline:
        return overrides
    return deep_merge(overrides, inline, keep_nulls=True)


def render_chart_dir(
    chart_dir: str,
    overrides: Optional[Dict[str, Any]] = None,
    release: Optional[ReleaseOptions] = None,
    strict: bool = False,
    output_dir: Optional[str] = None,
) -> Dict[str, bytes]:
    """
    Load a chart directory and render it.

    Args:
        chart_dir: Chart directory to load
        overrides: Values applied on top of the root chart defaults
        release: Release identity injected into every chart
        strict: Fail on references to undefined values
        output_dir: Optional directory to save rendered files

    Returns:
        Dictionary mapping output paths to rendered content
    """
    chart = load_chart(chart_dir)
    renderer = Renderer(backend=JinjaBackend(strict=strict), release=release)
    rendered = renderer.render(chart, overrides or {})
    if output_dir:
        OutputWriter(output_dir=os.path.abspath(output_dir)).write(rendered)
    return rendered


def format_manifest(rendered: Dict[str, bytes]) -> str:
    """
    Join rendered files into one stream of ``# Source:`` sections.

    Empty documents and NOTES.txt files are left out.
    """
    sections = []
    for path, content in rendered.items():
        if posixpath.basename(path) == NOTES_NAME:
            continue
        text = content.decode("utf-8").strip("\n")
        if not text.strip():
            continue
        sections.append(f"---\n# Source: {path}\n{text}\n")
    return "".join(sections)


def _assign_path(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = [p for p in dotted_key.split(".") if p]
    if not parts:
        return
    node = target
    for segment in parts[:-1]:
        next_node = node.setdefault(segment, {})
        if not isinstance(next_node, dict):
            next_node = {}
            node[segment] = next_node
        node = next_node
    node[parts[-1]] = value


__all__ = [
    "format_manifest",
    "load_values_files",
    "parse_cli_params",
    "prepare_overrides",
    "render_chart_dir",
]
