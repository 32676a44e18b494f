from __future__ import annotations

from imgbench.report.summary import SweepReport, render_level

__all__ = ["SweepReport", "render_level"]
