"""Output generation for schedules."""

from authscheduler.output.pdf_generator import PDFGenerator
from authscheduler.output.text_export import TextExporter, to_tabular_text

__all__ = ["PDFGenerator", "TextExporter", "to_tabular_text"]
