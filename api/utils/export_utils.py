"""Export utilities for CSV and PDF generation.

Provides helper classes to export tabular reports, such as the course
progress report, as downloadable CSV and PDF files.
"""

import csv
from io import BytesIO

from django.http import HttpResponse
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


class CSVExporter:
    """Helper class for CSV exports."""

    @staticmethod
    def export_to_csv(filename, headers, data):
        """
        Export data to CSV format.

        Args:
            filename: Name of the file to download
            headers: List of column headers
            data: List of dictionaries or tuples containing row data

        Returns:
            HttpResponse with CSV file
        """
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'

        writer = csv.writer(response)
        writer.writerow(headers)

        for row in data:
            if isinstance(row, dict):
                writer.writerow([row.get(header, "") for header in headers])
            else:
                writer.writerow(row)

        return response


class PDFExporter:
    """Helper class for PDF exports."""

    def __init__(self, title, pagesize=A4):
        self.title = title
        self.pagesize = pagesize
        self.styles = getSampleStyleSheet()
        self._add_custom_styles()

    def _add_custom_styles(self):
        """Add custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name="CustomTitle",
            parent=self.styles["Heading1"],
            fontSize=20,
            textColor=colors.HexColor("#1a1a1a"),
            spaceAfter=24,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        ))

        self.styles.add(ParagraphStyle(
            name="CustomBody",
            parent=self.styles["Normal"],
            fontSize=10,
            textColor=colors.HexColor("#333333"),
            spaceAfter=6,
        ))

    def create_pdf(self, content_elements, filename=None):
        """
        Create a PDF document.

        Args:
            content_elements: List of reportlab flowables (Paragraphs, Tables, etc.)
            filename: Download name; defaults to the title

        Returns:
            HttpResponse with PDF file
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.pagesize,
            rightMargin=48,
            leftMargin=48,
            topMargin=60,
            bottomMargin=36,
            title=self.title,
        )

        story = [Paragraph(self.title, self.styles["CustomTitle"]), Spacer(1, 12)]
        story.extend(content_elements)
        doc.build(story)

        buffer.seek(0)
        filename = filename or f'{self.title.replace(" ", "_")}.pdf'
        response = HttpResponse(buffer.read(), content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

    def create_table(self, headers, data, col_widths=None):
        """
        Create a formatted table.

        Args:
            headers: List of column headers
            data: List of tuples/lists containing row data
            col_widths: Optional list of column widths

        Returns:
            Table object
        """
        table_data = [headers]
        table_data.extend(data)

        table = Table(table_data, colWidths=col_widths) if col_widths else Table(table_data)

        table.setStyle(TableStyle([
            # Header styling
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4A90E2")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, 0), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 11),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 10),

            # Body styling
            ("TEXTCOLOR", (0, 1), (-1, -1), colors.black),
            ("ALIGN", (0, 1), (-1, -1), "LEFT"),
            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 1), (-1, -1), 9),
            ("TOPPADDING", (0, 1), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 1), (-1, -1), 5),

            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.lightgrey]),
        ]))

        return table
