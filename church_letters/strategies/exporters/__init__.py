from church_letters.strategies.exporters.docx import DocxLetterExporter

__all__ = ["DocxLetterExporter"]
