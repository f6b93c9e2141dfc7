# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
CLI module for chartrender.

Usage:
    chartrender render ./mychart -f prod-values.yaml --set image.tag=1.2.3
    chartrender create mychart --dest ./charts
"""

from chartrender.cli.main import cli_main, configure_parser, main

__all__ = ["cli_main", "configure_parser", "main"]
