"""Word document exporter strategy.

Writes a generated letter snapshot to a .docx file using python-docx.
"""

import io
import logging

from docx import Document

from church_letters.db.models import GeneratedLetterRead
from church_letters.interfaces.exporter import BaseLetterExporter

logger = logging.getLogger(__name__)


class DocxLetterExporter(BaseLetterExporter):
    """Exports generated letters as Word documents.

    Each line of the letter content becomes its own paragraph so the
    line breaks typed in the template editor survive the export.
    """

    @property
    def media_type(self) -> str:
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

    @property
    def extension(self) -> str:
        return ".docx"

    def export(self, letter: GeneratedLetterRead) -> bytes:
        doc = Document()

        props = doc.core_properties
        props.title = letter.template_name
        props.subject = letter.recipient_name

        for line in letter.content.splitlines() or [""]:
            doc.add_paragraph(line)

        buffer = io.BytesIO()
        doc.save(buffer)

        logger.info(f"Exported letter {letter.id} as docx ({buffer.tell()} bytes)")
        return buffer.getvalue()
