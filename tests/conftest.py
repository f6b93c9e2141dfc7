# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Global pytest configuration and fixtures.

This file contains fixtures shared across all test modules: in-memory chart
builders and on-disk chart directories.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from chartrender.chart import Chart, ChartMetadata, ChartType, Template


@pytest.fixture
def make_chart():
    """Factory building in-memory charts with sensible metadata defaults."""

    def _factory(
        name: str,
        *,
        values: dict[str, Any] | None = None,
        templates: dict[str, str] | None = None,
        dependencies: list[Chart] | None = None,
        library: bool = False,
        version: str = "0.1.0",
        app_version: str = "1.0.0",
    ) -> Chart:
        metadata = ChartMetadata(
            name=name,
            version=version,
            app_version=app_version,
            type=ChartType.LIBRARY if library else ChartType.APPLICATION,
        )
        return Chart(
            metadata=metadata,
            templates=tuple(Template(name=k, source=v) for k, v in (templates or {}).items()),
            values=values or {},
            dependencies=tuple(dependencies or ()),
        )

    return _factory


@pytest.fixture
def web_chart(make_chart):
    """Root chart ``web`` without templates and a single ``svc`` dependency emitting its port."""
    svc = make_chart(
        "svc",
        values={"port": 80},
        templates={"templates/service.yaml": "port: {{ Values.port }}\n"},
    )
    return make_chart("web", dependencies=[svc])


@pytest.fixture
def write_chart_dir():
    """Factory writing a chart directory from a mapping of relative path to text."""

    def _factory(root: Path, files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return root

    return _factory


@pytest.fixture
def sample_chart_dir(tmp_path, write_chart_dir):
    """On-disk ``web`` chart with an application and a library dependency."""
    return write_chart_dir(
        tmp_path / "web",
        {
            "Chart.yaml": "apiVersion: v1\nname: web\nversion: 1.2.0\nappVersion: '2.0'\n",
            "values.yaml": "replicas: 2\nsvc:\n  port: 8080\n",
            "templates/app.yaml": (
                '{% import "common/templates/_labels.tpl" as common %}\n'
                "name: {{ Release.Name }}-{{ Chart.Name }}\n"
                "replicas: {{ Values.replicas }}\n"
                "labels: {{ common.labels(Chart) }}\n"
            ),
            "charts/svc/Chart.yaml": "apiVersion: v1\nname: svc\nversion: 0.3.0\n",
            "charts/svc/values.yaml": "port: 80\nprotocol: TCP\n",
            "charts/svc/templates/service.yaml": "port: {{ Values.port }}\nprotocol: {{ Values.protocol }}\n",
            "charts/common/Chart.yaml": "apiVersion: v1\nname: common\nversion: 0.1.0\ntype: library\n",
            "charts/common/templates/_labels.tpl": (
                "{%- macro labels(Chart) -%}\n" "{{ Chart.Name }}-{{ Chart.Version }}\n" "{%- endmacro -%}\n"
            ),
            "charts/common/templates/configmap.yaml": "kind: ConfigMap\n",
        },
    )
