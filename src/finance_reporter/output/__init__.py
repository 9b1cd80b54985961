"""Document output for report summaries."""

from finance_reporter.output.pdf_renderer import (
    Document,
    LayoutContext,
    ReportRenderer,
    RenderError,
    layout_report,
    render_report,
)

__all__ = [
    "Document",
    "LayoutContext",
    "ReportRenderer",
    "RenderError",
    "layout_report",
    "render_report",
]
