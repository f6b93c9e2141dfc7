# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Exception types raised by chart loading, coalescing, rendering and scaffolding."""

from __future__ import annotations


class ChartrenderError(Exception):
    """
    Base class for every error raised by chartrender.
    """

    pass


class ChartDefinitionError(ChartrenderError, ValueError):
    """
    Exception raised when a chart tree violates its structural invariants
    (empty name, duplicated sibling names, duplicated template names).
    """

    pass


class ChartLoadError(ChartrenderError):
    """
    Exception raised when a chart cannot be read from disk.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class ValueShapeError(ChartrenderError):
    """
    Exception raised when a values table is required but a scalar or
    sequence was found (or vice versa) while coalescing values.

    Attributes:
        path: Dotted key path of the offending value.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path or '<root>'}: {message}")


class BackendInvocationError(ChartrenderError):
    """
    Exception raised when the template backend reports template failures.

    The original backend diagnostics are kept in ``diagnostics`` in the order
    they were reported.
    """

    def __init__(self, diagnostics: list[str]):
        self.diagnostics = list(diagnostics)
        summary = "; ".join(self.diagnostics) or "unknown template failure"
        super().__init__(f"template rendering failed: {summary}")


class DestinationError(ChartrenderError):
    """
    Exception raised when a scaffold target path is invalid or obstructed.
    """

    pass
