"""Terminal presentation of manifests, publication plans and run reports.

Modules
-------
renderer
    ``ReportRenderer`` turns distroforge models into Rich renderables.
"""

from distroforge.monitor.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
