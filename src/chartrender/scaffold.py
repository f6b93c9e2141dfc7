# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Generate chart skeletons on disk."""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path

from chartrender.chart import ChartMetadata, Template
from chartrender.errors import ChartDefinitionError
from chartrender.loader import IGNOREFILE_NAME, load_chart, save_chart, write_chart_dir

logger = logging.getLogger(__name__)

PLACEHOLDER = "<CHARTNAME>"

_BASE_DIR = Path(__file__).resolve().parent
_SCAFFOLD_ROOT = _BASE_DIR / "scaffold_templates"

# (path inside the new chart, path inside scaffold_templates/)
SCAFFOLD_FILES = (
    ("Chart.yaml", "Chart.yaml"),
    ("values.yaml", "values.yaml"),
    (IGNOREFILE_NAME, "chartignore"),
    ("templates/deployment.yaml", "templates/deployment.yaml"),
    ("templates/service.yaml", "templates/service.yaml"),
    ("templates/ingress.yaml", "templates/ingress.yaml"),
    ("templates/NOTES.txt", "templates/NOTES.txt"),
    ("templates/_helpers.tpl", "templates/_helpers.tpl"),
)


def transform(src: str, replacement: str) -> str:
    """Replace every chart name placeholder in ``src``."""
    return src.replace(PLACEHOLDER, replacement)


def create_scaffold(name: str, destination_dir: str) -> str:
    """
    Create a new chart named ``name`` inside ``destination_dir``.

    Files that already exist in the target directory are left untouched, so
    running this again on a partially populated chart never clobbers edits.

    Args:
        name: Chart name, used as directory name and placeholder replacement.
        destination_dir: Existing directory that receives the chart.

    Returns:
        Absolute path of the chart directory.

    Raises:
        ChartDefinitionError: If ``name`` cannot be used as a directory name.
        DestinationError: If ``destination_dir`` is not a directory or the
            chart path is occupied by a file.
        OSError: If writing a file fails; a chart directory created by this
            call is removed first.
    """
    _validate_name(name)
    files = []
    for target, source in SCAFFOLD_FILES:
        content = (_SCAFFOLD_ROOT / source).read_text(encoding="utf-8")
        files.append((target, transform(content, name).encode("utf-8")))
    cdir = write_chart_dir(destination_dir, name, files)
    logger.info("Created chart %s in %s", name, cdir)
    return cdir


def create_from_existing(metadata: ChartMetadata, destination_dir: str, source: str) -> str:
    """
    Create a chart in ``destination_dir`` using the chart at ``source`` as a starter.

    The loaded chart's metadata is replaced wholesale by ``metadata`` and every
    template placeholder is replaced with the new chart name.
    Dependencies, values and other files are copied unchanged.

    Returns:
        Absolute path of the chart directory.
    """
    _validate_name(metadata.name)
    starter = load_chart(source)
    templates = tuple(
        Template(name=template.name, source=transform(template.source, metadata.name))
        for template in starter.templates
    )
    chart = dataclasses.replace(starter, metadata=metadata, templates=templates)
    cdir = save_chart(chart, destination_dir)
    logger.info("Created chart %s in %s from %s", metadata.name, cdir, source)
    return cdir


def _validate_name(name: str) -> None:
    if not name or name in {".", ".."} or "/" in name or os.sep in name:
        raise ChartDefinitionError(f"invalid chart name: '{name}'")
