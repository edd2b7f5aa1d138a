"""
Dashboard rendering services.
"""
from .report import (
    build_report_payload,
    render_flow_report,
    render_flow_text,
    DEFAULT_FLOW_REPORT_TEMPLATE,
)

__all__ = [
    "build_report_payload",
    "render_flow_report",
    "render_flow_text",
    "DEFAULT_FLOW_REPORT_TEMPLATE",
]
