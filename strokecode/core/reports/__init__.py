"""
Reports - handoff note text and its PDF print surface
"""
from .handoff_note import PLACEHOLDER, SECTION_HEADINGS, format_timestamp, render_handoff_note
from .pdf_export import HandoffPdfRenderer

__all__ = [
    "PLACEHOLDER",
    "SECTION_HEADINGS",
    "format_timestamp",
    "render_handoff_note",
    "HandoffPdfRenderer",
]
