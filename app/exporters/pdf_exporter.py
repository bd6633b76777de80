"""
PDF quote export built on reportlab.

Provides ``QuotePdfExporter``, which renders one budget as an A4 portrait
document in memory and returns its bytes for streaming via FastAPI's
``StreamingResponse``.

Design notes
------------
- ``SimpleDocTemplate`` with Platypus story elements.
- Every page carries a footer with the budget number and page number.
- Long descriptions wrap through ``Paragraph`` cells.
- The line table repeats its header row on every page.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import cm, mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from app.schemas.budget import BudgetResponse

_PRIMARY = colors.HexColor("#1E3A5F")
_ACCENT = colors.HexColor("#F59E0B")
_LIGHT_GREY = colors.HexColor("#F3F4F6")
_MID_GREY = colors.HexColor("#E5E7EB")
_TEXT = colors.HexColor("#111827")
_WHITE = colors.white

_STATUS_LABELS: dict[str, str] = {
    "draft": "Borrador",
    "sent": "Enviado",
    "approved": "Aprobado",
    "rejected": "Rechazado",
}


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _qty(value: float) -> str:
    return f"{value:,.4f}".rstrip("0").rstrip(".")


class QuotePdfExporter:
    """Single-use PDF builder for one budget.

    Args:
        budget: Fully resolved budget read model.
        iva_rate: Tax rate shown next to the IVA amount (e.g. ``0.10``).
    """

    def __init__(self, budget: BudgetResponse, iva_rate: float) -> None:
        self._budget = budget
        self._iva_rate = iva_rate

        self._buffer = io.BytesIO()
        self._doc = SimpleDocTemplate(
            self._buffer,
            pagesize=A4,
            rightMargin=1.5 * cm,
            leftMargin=1.5 * cm,
            topMargin=1.8 * cm,
            bottomMargin=2 * cm,
            title=f"Presupuesto {budget.budget_number}",
        )
        self._story: list[Any] = []
        self._generated = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        self._styles = self._build_styles()

    # -----------------------------------------------------------------------
    # Style factory
    # -----------------------------------------------------------------------

    def _build_styles(self) -> dict[str, ParagraphStyle]:
        return {
            "title": ParagraphStyle(
                "quote_title", fontName="Helvetica-Bold", fontSize=17,
                textColor=_WHITE, alignment=TA_CENTER,
            ),
            "subtitle": ParagraphStyle(
                "quote_subtitle", fontName="Helvetica", fontSize=8,
                textColor=_WHITE, alignment=TA_CENTER,
            ),
            "info_key": ParagraphStyle(
                "info_key", fontName="Helvetica-Bold", fontSize=8,
                textColor=_PRIMARY, alignment=TA_RIGHT,
            ),
            "info_value": ParagraphStyle(
                "info_value", fontName="Helvetica", fontSize=8,
                textColor=_TEXT, alignment=TA_LEFT,
            ),
            "section": ParagraphStyle(
                "section", fontName="Helvetica-Bold", fontSize=11,
                textColor=_PRIMARY, spaceBefore=6, spaceAfter=4,
            ),
            "th": ParagraphStyle(
                "th", fontName="Helvetica-Bold", fontSize=8,
                textColor=_WHITE, alignment=TA_CENTER,
            ),
            "td": ParagraphStyle(
                "td", fontName="Helvetica", fontSize=8, textColor=_TEXT, alignment=TA_LEFT,
            ),
            "td_right": ParagraphStyle(
                "td_right", fontName="Helvetica", fontSize=8, textColor=_TEXT, alignment=TA_RIGHT,
            ),
            "notes": ParagraphStyle(
                "notes", fontName="Helvetica-Oblique", fontSize=8, textColor=_TEXT,
            ),
        }

    def _on_page(self, canvas: Any, doc: Any) -> None:
        """Footer callback for ``SimpleDocTemplate.build``."""
        canvas.saveState()
        canvas.setFont("Helvetica", 7)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(
            self._doc.pagesize[0] / 2,
            1.2 * cm,
            f"Presupuesto {self._budget.budget_number}  |  Generado: {self._generated}  |  "
            f"Página {doc.page}",
        )
        canvas.restoreState()

    # -----------------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------------

    def _add_header(self) -> None:
        width = self._doc.width
        band = Table(
            [
                [Paragraph(f"Presupuesto {self._budget.budget_number}", self._styles["title"])],
                [Paragraph(f"Generado: {self._generated}", self._styles["subtitle"])],
            ],
            colWidths=[width],
        )
        band.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), _PRIMARY),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        self._story.append(band)
        self._story.append(Spacer(1, 4 * mm))

    def _add_info(self) -> None:
        budget = self._budget
        client = budget.client
        info: list[tuple[str, str]] = [
            ("Cliente", client.name if client else f"ID {budget.client_id}"),
        ]
        if client is not None and client.ruc:
            info.append(("RUC", client.ruc))
        if client is not None and client.address:
            info.append(("Dirección", client.address))
        info += [
            ("Proyecto", budget.project_name or "-"),
            ("Estado", _STATUS_LABELS.get(budget.status, budget.status)),
            ("Fecha", budget.created_at.strftime("%d/%m/%Y")),
            ("Válido hasta", budget.valid_until.strftime("%d/%m/%Y") if budget.valid_until else "-"),
        ]
        if budget.project_description:
            info.append(("Descripción", budget.project_description))

        width = self._doc.width
        table = Table(
            [
                [
                    Paragraph(f"{key}:", self._styles["info_key"]),
                    Paragraph(escape(value), self._styles["info_value"]),
                ]
                for key, value in info
            ],
            colWidths=[3 * cm, width - 3 * cm],
        )
        table.setStyle(TableStyle([
            ("TOPPADDING", (0, 0), (-1, -1), 2),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ]))
        self._story.append(table)
        self._story.append(Spacer(1, 4 * mm))

    def _add_lines(self) -> None:
        styles = self._styles
        self._story.append(Paragraph("Detalle", styles["section"]))
        self._story.append(HRFlowable(width="100%", thickness=1, color=_PRIMARY))
        self._story.append(Spacer(1, 2 * mm))

        data: list[list[Any]] = [[
            Paragraph(h, styles["th"])
            for h in ("#", "Descripción", "Unidad", "Cantidad", "P. Unitario", "Subtotal")
        ]]
        for index, line in enumerate(self._budget.items, start=1):
            data.append([
                Paragraph(str(index), styles["td_right"]),
                Paragraph(escape(line.description), styles["td"]),
                Paragraph(escape(line.unit), styles["td"]),
                Paragraph(_qty(line.quantity), styles["td_right"]),
                Paragraph(_money(line.unit_price), styles["td_right"]),
                Paragraph(_money(line.subtotal), styles["td_right"]),
            ])

        widths = [1 * cm, 7.5 * cm, 1.8 * cm, 2.2 * cm, 2.5 * cm, 3 * cm]
        table = Table(data, colWidths=widths, repeatRows=1)

        commands: list[tuple[Any, ...]] = [
            ("BACKGROUND", (0, 0), (-1, 0), _PRIMARY),
            ("GRID", (0, 0), (-1, -1), 0.25, _MID_GREY),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]
        for ri in range(2, len(data), 2):
            commands.append(("BACKGROUND", (0, ri), (-1, ri), _LIGHT_GREY))
        table.setStyle(TableStyle(commands))

        self._story.append(table)
        self._story.append(Spacer(1, 4 * mm))

    def _add_totals(self) -> None:
        budget = self._budget
        styles = self._styles
        rows = [
            ["Subtotal", _money(budget.subtotal)],
            [f"IVA ({self._iva_rate * 100:g}%)", _money(budget.iva)],
            ["TOTAL", _money(budget.total)],
        ]
        table = Table(
            [[Paragraph(label, styles["info_key"]), Paragraph(amount, styles["td_right"])]
             for label, amount in rows],
            colWidths=[4 * cm, 3 * cm],
            hAlign="RIGHT",
        )
        table.setStyle(TableStyle([
            ("LINEABOVE", (0, 0), (-1, 0), 0.5, _PRIMARY),
            ("BACKGROUND", (0, 2), (-1, 2), _ACCENT),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        self._story.append(table)

        if budget.notes:
            self._story.append(Spacer(1, 6 * mm))
            self._story.append(Paragraph(f"Notas: {escape(budget.notes)}", styles["notes"]))

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def build(self) -> bytes:
        """Assemble the story, render the document and return its bytes."""
        self._add_header()
        self._add_info()
        self._add_lines()
        self._add_totals()

        self._doc.build(self._story, onFirstPage=self._on_page, onLaterPages=self._on_page)
        self._buffer.seek(0)
        return self._buffer.read()
