# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class OutputWriter:
    output_dir: str

    def write(self, rendered: dict[str, bytes]) -> list[str]:
        """Write rendered files below ``output_dir`` and return the written paths."""
        os.makedirs(self.output_dir, exist_ok=True)
        written = []
        for output_path, content in rendered.items():
            destination = self._destination_for(output_path)
            self._emit_file(destination, content)
            written.append(destination)
        logger.info("Wrote %d rendered file(s) to %s", len(written), self.output_dir)
        return written

    def _destination_for(self, output_path: str) -> str:
        parts = [p for p in output_path.split("/") if p not in ("", ".")]
        if ".." in parts:
            raise ValueError(f"Refusing to write outside the output directory: {output_path}")
        return os.path.join(self.output_dir, *parts)

    @staticmethod
    def _emit_file(path: str, content: bytes) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(content)
