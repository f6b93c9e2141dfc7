# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the API layer: override parsing, values files and output writing.
"""

import pytest

from chartrender.api import (
    format_manifest,
    load_values_files,
    parse_cli_params,
    prepare_overrides,
    render_chart_dir,
)
from chartrender.artifacts import OutputWriter
from chartrender.errors import BackendInvocationError
from chartrender.rendering import ReleaseOptions, coalesce_values

pytestmark = pytest.mark.unit


class TestParseCliParams:
    """Tests for parse_cli_params."""

    def test_dotted_keys_and_literal_casting(self):
        params = parse_cli_params(["svc.port=8080", "svc.enabled=true", "name=web", "ratio=0.5", "tags=[a, b]"])

        assert params == {
            "svc": {"port": 8080, "enabled": True},
            "name": "web",
            "ratio": 0.5,
            "tags": ["a", "b"],
        }

    def test_value_may_contain_equals(self):
        assert parse_cli_params(["args=--x=1"]) == {"args": "--x=1"}

    def test_later_scalar_replaces_table(self):
        assert parse_cli_params(["a.b=1", "a=2", "a.c=3"]) == {"a": {"c": 3}}

    @pytest.mark.parametrize("item", ["novalue", "=1"])
    def test_invalid_items(self, item):
        with pytest.raises(ValueError):
            parse_cli_params([item])


class TestOverrides:
    """Tests for values files and override preparation."""

    def test_values_files_merged_in_order(self, tmp_path):
        first = tmp_path / "a.yaml"
        second = tmp_path / "b.yaml"
        first.write_text("svc:\n  port: 80\n  proto: TCP\nreplicas: 1\n")
        second.write_text("svc:\n  port: 8080\n")

        assert load_values_files([str(first), str(second)]) == {
            "svc": {"port": 8080, "proto": "TCP"},
            "replicas": 1,
        }

    def test_empty_values_file(self, tmp_path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        assert load_values_files([str(empty)]) == {}

    def test_missing_values_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_values_files([str(tmp_path / "nope.yaml")])

    def test_values_file_must_be_mapping(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("- 1\n")
        with pytest.raises(ValueError):
            load_values_files([str(bad)])

    def test_inline_overrides_win(self, tmp_path):
        values = tmp_path / "v.yaml"
        values.write_text("svc:\n  port: 80\n  proto: TCP\n")

        assert prepare_overrides([str(values)], ["svc.port=9090"]) == {"svc": {"port": 9090, "proto": "TCP"}}
        assert prepare_overrides(None, None) == {}

    def test_null_set_value_removes_dependency_default(self, web_chart):
        overrides = prepare_overrides(None, ["svc.port=null"])

        assert overrides == {"svc": {"port": None}}
        assert "port" not in coalesce_values(web_chart, overrides)[("web", "svc")]

    def test_null_in_values_file_survives_later_files(self, tmp_path):
        first = tmp_path / "a.yaml"
        second = tmp_path / "b.yaml"
        first.write_text("svc:\n  port: null\n")
        second.write_text("svc:\n  protocol: UDP\n")

        assert load_values_files([str(first), str(second)]) == {"svc": {"port": None, "protocol": "UDP"}}

    def test_null_override_renders_without_default(self, sample_chart_dir):
        rendered = render_chart_dir(str(sample_chart_dir), overrides=prepare_overrides(None, ["svc.protocol=null"]))

        assert rendered["web/charts/svc/templates/service.yaml"] == b"port: 8080\nprotocol: \n"


class TestRenderChartDir:
    """Tests for render_chart_dir, format_manifest and OutputWriter."""

    def test_render_and_write(self, sample_chart_dir, tmp_path):
        out = tmp_path / "out"

        rendered = render_chart_dir(
            str(sample_chart_dir),
            overrides={"svc": {"port": 1}},
            release=ReleaseOptions(name="prod"),
            output_dir=str(out),
        )

        assert rendered["web/charts/svc/templates/service.yaml"] == b"port: 1\nprotocol: TCP\n"
        assert (out / "web" / "charts" / "svc" / "templates" / "service.yaml").read_bytes() == b"port: 1\nprotocol: TCP\n"
        assert (out / "web" / "templates" / "app.yaml").read_text().startswith("name: prod-web\n")

    def test_strict_mode(self, tmp_path, write_chart_dir):
        root = write_chart_dir(
            tmp_path / "web",
            {"Chart.yaml": "name: web\n", "templates/t.yaml": "x: {{ Values.missing }}\n"},
        )

        assert render_chart_dir(str(root)) == {"web/templates/t.yaml": b"x: \n"}
        with pytest.raises(BackendInvocationError):
            render_chart_dir(str(root), strict=True)

    def test_format_manifest_skips_empty_documents_and_notes(self):
        manifest = format_manifest(
            {
                "a/templates/x.yaml": b"x: 1\n",
                "a/templates/empty.yaml": b"\n\n",
                "a/templates/y.yaml": b"y: 2",
                "a/templates/NOTES.txt": b"hello",
            }
        )

        assert manifest == "---\n# Source: a/templates/x.yaml\nx: 1\n---\n# Source: a/templates/y.yaml\ny: 2\n"

    def test_output_writer_overwrites_previous_output(self, tmp_path):
        writer = OutputWriter(output_dir=str(tmp_path))
        writer.write({"web/templates/a.yaml": b"old"})

        written = writer.write({"web/templates/a.yaml": b"new"})

        assert written == [str(tmp_path / "web" / "templates" / "a.yaml")]
        assert (tmp_path / "web" / "templates" / "a.yaml").read_bytes() == b"new"

    def test_output_writer_rejects_escaping_paths(self, tmp_path):
        with pytest.raises(ValueError):
            OutputWriter(output_dir=str(tmp_path)).write({"../evil.yaml": b"x"})
