# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import logging
import sys
from typing import List, Optional

from chartrender import __version__
from chartrender.api import format_manifest, prepare_overrides, render_chart_dir
from chartrender.chart import ChartMetadata
from chartrender.errors import BackendInvocationError, ChartrenderError
from chartrender.rendering import ReleaseOptions
from chartrender.scaffold import create_from_existing, create_scaffold

logger = logging.getLogger(__name__)

_USAGE_EXAMPLES = """
Examples:
  # Render a chart to stdout with extra values
  chartrender render ./web -f values-prod.yaml --set svc.port=8080

  # Render into a directory, one file per template
  chartrender render ./web --release-name prod --namespace web --output-dir ./out

  # Scaffold a new chart, or copy an existing chart as a starter
  chartrender create demo --dest ./charts
  chartrender create demo --dest ./charts --starter ./web
"""


def _build_common_cli_parser() -> argparse.ArgumentParser:
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument("--debug", action="store_true", help="Enable debug mode.")
    return common_parser


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("chart", type=str, help="Path to the chart directory.")
    parser.add_argument(
        "-f",
        "--values",
        action="append",
        default=[],
        metavar="FILE",
        help="Values file merged on top of the chart defaults (repeatable, later files win).",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Inline override using dotted keys (e.g. svc.port=8080), applied after values files.",
    )
    parser.add_argument("--release-name", type=str, default="release-name", help="Release name.")
    parser.add_argument("--namespace", type=str, default="default", help="Release namespace.")
    parser.add_argument("--strict", action="store_true", help="Fail on references to undefined values.")
    parser.add_argument("--output-dir", type=str, default=None, help="Directory to write rendered files to.")


def _add_create_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", type=str, help="Name of the new chart.")
    parser.add_argument("--dest", type=str, default=".", help="Directory in which the chart is created.")
    parser.add_argument(
        "--starter",
        type=str,
        default=None,
        help="Existing chart directory used as a starter instead of the built-in scaffold.",
    )


def configure_parser(parser):
    common_cli_parser = _build_common_cli_parser()
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    render_parser = subparsers.add_parser(
        "render",
        parents=[common_cli_parser],
        help="Render the templates of a chart and its dependencies.",
        description="Render the templates of a chart and its dependencies.",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_render_arguments(render_parser)

    create_parser = subparsers.add_parser(
        "create",
        parents=[common_cli_parser],
        help="Create a new chart.",
        description="Create a new chart with the given name.",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_create_arguments(create_parser)


def _run_render_mode(args) -> int:
    try:
        overrides = prepare_overrides(args.values, args.set)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    release = ReleaseOptions(name=args.release_name, namespace=args.namespace)
    try:
        rendered = render_chart_dir(
            args.chart,
            overrides=overrides,
            release=release,
            strict=args.strict,
            output_dir=args.output_dir,
        )
    except BackendInvocationError as exc:
        for diagnostic in exc.diagnostics:
            logger.error("%s", diagnostic)
        return 1
    except (ChartrenderError, OSError) as exc:
        logger.error("%s", exc)
        return 2

    if not args.output_dir:
        sys.stdout.write(format_manifest(rendered))
    return 0


def _run_create_mode(args) -> int:
    try:
        if args.starter:
            chart_path = create_from_existing(ChartMetadata(name=args.name), args.dest, args.starter)
        else:
            chart_path = create_scaffold(args.name, args.dest)
    except (ChartrenderError, OSError) as exc:
        logger.error("%s", exc)
        return 2
    print(f"Creating {chart_path}")
    return 0


def main(args) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(asctime)s %(filename)s:%(lineno)d] %(message)s",
    )
    logger.debug(f"chartrender version: {__version__}")

    if args.mode == "render":
        return _run_render_mode(args)
    if args.mode == "create":
        return _run_create_mode(args)
    raise SystemExit(f"Unknown mode: {args.mode}")


def cli_main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="chartrender",
        description="Render and scaffold charts of templated deployment manifests",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    configure_parser(parser)
    args = parser.parse_args(argv)
    sys.exit(main(args))


if __name__ == "__main__":
    cli_main()
