# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import threading
from collections.abc import Mapping
from typing import Any, Optional

from chartrender.chart import Chart
from chartrender.rendering.coalesce import ReleaseOptions, coalesce_values
from chartrender.rendering.engine import JinjaBackend, render_all

logger = logging.getLogger(__name__)


class Renderer:
    """
    Render chart trees with a reusable template backend.

    Render can be called repeatedly, with the same or different chart trees and
    overrides; no state is kept between calls. Backends that do not declare
    ``thread_safe = True`` are only ever invoked by one thread at a time.
    """

    def __init__(self, backend: Optional[Any] = None, release: Optional[ReleaseOptions] = None):
        self.backend = backend or JinjaBackend()
        self.release = release or ReleaseOptions()
        self._lock: Optional[threading.Lock] = None
        if not getattr(self.backend, "thread_safe", False):
            self._lock = threading.Lock()

    def render(self, chart: Chart, overrides: Optional[Mapping[str, Any]] = None) -> dict[str, bytes]:
        """
        Render a chart tree.

        Args:
            chart: Root chart; never mutated.
            overrides: User-supplied values applied on top of the root chart defaults.

        Returns:
            Mapping of output path to rendered bytes. Library charts and
            partials contribute no entries.

        Raises:
            ValueShapeError: Propagated from value coalescing.
            BackendInvocationError: Propagated from the template backend.
        """
        values_by_node = coalesce_values(chart, overrides, self.release)
        if self._lock is None:
            rendered = render_all(chart, values_by_node, self.backend)
        else:
            with self._lock:
                rendered = render_all(chart, values_by_node, self.backend)
        logger.debug("rendered %d file(s) for chart %s", len(rendered), chart.name)
        return rendered


def render(
    chart: Chart,
    overrides: Optional[Mapping[str, Any]] = None,
    release: Optional[ReleaseOptions] = None,
    backend: Optional[Any] = None,
) -> dict[str, bytes]:
    """Render a chart tree with a one-off :class:`Renderer`."""
    return Renderer(backend=backend, release=release).render(chart, overrides)
