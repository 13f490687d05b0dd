"""
Handoff PDF Renderer

Default print surface: writes the plain-text handoff note into a PDF as
preformatted monospace text so the printed layout matches the copied note.
"""
from __future__ import annotations

import os
import uuid
from datetime import datetime
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, Preformatted, SimpleDocTemplate, Spacer

from strokecode import config
from strokecode.core.timing import utcnow
from strokecode.utils import get_logger, NoteExportError

logger = get_logger(__name__)


class HandoffPdfRenderer:
    """
    Renders handoff notes to PDF files under ``output_dir``.

    Satisfies the print port: ``print_text(text)`` returns the written path.
    """

    def __init__(self, output_dir: str = None):
        self.output_dir = output_dir or config.REPORT_OUTPUT_DIR
        os.makedirs(self.output_dir, exist_ok=True)
        self._styles = getSampleStyleSheet()
        self._create_custom_styles()
        self.last_path: Optional[str] = None
        logger.info(f"HandoffPdfRenderer initialized, output: {self.output_dir}")

    def _create_custom_styles(self):
        if 'NoteTitle' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='NoteTitle',
                parent=self._styles['Title'],
                fontSize=16,
                spaceAfter=6,
                textColor=HexColor("#1E40AF"),
                fontName='Helvetica-Bold'
            ))
        if 'NoteBody' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='NoteBody',
                parent=self._styles['Code'],
                fontName='Courier',
                fontSize=9,
                leading=11.5,
            ))
        if 'Caveat' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='Caveat',
                parent=self._styles['Normal'],
                fontSize=8,
                textColor=HexColor("#6B7280"),
            ))

    def render(self, text: str, note_id: str = None, generated_at: datetime = None) -> str:
        """Write ``text`` to ``<output_dir>/<note_id>.pdf`` and return the path."""
        note_id = note_id or f"handoff-{uuid.uuid4().hex[:12]}"
        generated_at = generated_at or utcnow()
        filepath = os.path.join(self.output_dir, f"{note_id}.pdf")

        doc = SimpleDocTemplate(
            filepath,
            pagesize=letter,
            rightMargin=0.6*inch,
            leftMargin=0.6*inch,
            topMargin=0.6*inch,
            bottomMargin=0.6*inch,
            title="Stroke Code Summary",
        )
        story = [
            Paragraph("Stroke Code Handoff", self._styles['NoteTitle']),
            Paragraph(
                f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}",
                self._styles['Caveat']
            ),
            Spacer(1, 12),
            Preformatted(text, self._styles['NoteBody']),
            Spacer(1, 16),
            Paragraph(
                "Clinical decision support only. Verify all times and doses against the medical record.",
                self._styles['Caveat']
            ),
        ]
        try:
            doc.build(story)
        except Exception as e:
            raise NoteExportError(f"PDF build failed: {e}", surface="pdf")

        self.last_path = filepath
        logger.info(f"Handoff PDF generated: {filepath}")
        return filepath

    def print_text(self, text: str) -> str:
        return self.render(text)
