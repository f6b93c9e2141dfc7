# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
chartrender:

Renders charts, bundles of templates and default values that may nest other
charts as dependencies. It offers:
- A chart tree model and directory loader (chart.py, loader.py).
- Hierarchical value coalescing and a Jinja2 template backend (rendering/*).
- A scaffold generator for new charts (scaffold.py).
- A CLI (cli/*).
"""

__version__ = "0.1.0"
