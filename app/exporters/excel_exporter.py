"""
Excel quote export built on xlsxwriter.

Provides ``QuoteExcelExporter``, which renders one budget as a styled
single-sheet workbook in memory and returns its bytes for streaming via
FastAPI's ``StreamingResponse``.

Usage example::

    budget = budget_service.get_by_id(db, 7)
    file_bytes = QuoteExcelExporter(budget, iva_rate=0.10).build()

Design notes
------------
- ``xlsxwriter`` in in-memory mode (``BytesIO``).
- Layout: title band, client/project block, line table, totals block.
- Amounts use ``#,##0.00``; quantities keep up to four decimals.
- Line rows alternate white / light grey.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any

import xlsxwriter

from app.schemas.budget import BudgetResponse

_COLOR_PRIMARY = "#1E3A5F"
_COLOR_ACCENT = "#F59E0B"
_COLOR_WHITE = "#FFFFFF"
_COLOR_LIGHT_GREY = "#F3F4F6"
_COLOR_BORDER = "#E5E7EB"

_HEADERS: list[str] = ["#", "Descripción", "Unidad", "Cantidad", "P. Unitario", "Subtotal"]
_COL_WIDTHS: list[int] = [5, 48, 10, 12, 14, 16]

_STATUS_LABELS: dict[str, str] = {
    "draft": "Borrador",
    "sent": "Enviado",
    "approved": "Aprobado",
    "rejected": "Rechazado",
}


class QuoteExcelExporter:
    """Single-use workbook builder for one budget.

    Args:
        budget: Fully resolved budget read model.
        iva_rate: Tax rate shown next to the IVA amount (e.g. ``0.10``).
    """

    def __init__(self, budget: BudgetResponse, iva_rate: float) -> None:
        self._budget = budget
        self._iva_rate = iva_rate

        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._worksheet = self._workbook.add_worksheet(budget.budget_number[:31])
        self._row = 0
        self._formats = self._build_formats()

    # -----------------------------------------------------------------------
    # Format factory
    # -----------------------------------------------------------------------

    def _build_formats(self) -> dict[str, Any]:
        wb = self._workbook
        cell = {"font_size": 9, "valign": "vcenter", "border": 1, "border_color": _COLOR_BORDER}

        return {
            "title": wb.add_format({
                "bold": True, "font_size": 16, "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY, "align": "center", "valign": "vcenter",
            }),
            "subtitle": wb.add_format({
                "font_size": 9, "font_color": _COLOR_WHITE, "bg_color": _COLOR_PRIMARY,
                "align": "center", "valign": "vcenter",
            }),
            "info_key": wb.add_format({
                "bold": True, "font_size": 9, "bg_color": "#E5E7EB", "align": "right",
            }),
            "info_value": wb.add_format({"font_size": 9, "align": "left"}),
            "col_header": wb.add_format({
                "bold": True, "font_size": 10, "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY, "align": "center", "valign": "vcenter",
                "border": 1, "border_color": "#CBD5E1",
            }),
            "text": wb.add_format({**cell, "bg_color": _COLOR_WHITE, "text_wrap": True}),
            "text_alt": wb.add_format({**cell, "bg_color": _COLOR_LIGHT_GREY, "text_wrap": True}),
            "qty": wb.add_format({**cell, "bg_color": _COLOR_WHITE, "num_format": "#,##0.####"}),
            "qty_alt": wb.add_format({**cell, "bg_color": _COLOR_LIGHT_GREY, "num_format": "#,##0.####"}),
            "money": wb.add_format({**cell, "bg_color": _COLOR_WHITE, "num_format": "#,##0.00"}),
            "money_alt": wb.add_format({**cell, "bg_color": _COLOR_LIGHT_GREY, "num_format": "#,##0.00"}),
            "total_label": wb.add_format({
                "bold": True, "font_size": 10, "align": "right", "top": 1,
            }),
            "total_value": wb.add_format({
                "bold": True, "font_size": 10, "num_format": "#,##0.00", "top": 1,
            }),
            "grand_total": wb.add_format({
                "bold": True, "font_size": 11, "num_format": "#,##0.00",
                "bg_color": _COLOR_ACCENT, "border": 1,
            }),
            "notes": wb.add_format({"font_size": 9, "italic": True, "text_wrap": True, "valign": "top"}),
        }

    # -----------------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------------

    def _write_header(self) -> None:
        ws = self._worksheet
        last_col = len(_HEADERS) - 1

        ws.set_row(self._row, 30)
        ws.merge_range(
            self._row, 0, self._row, last_col,
            f"Presupuesto {self._budget.budget_number}",
            self._formats["title"],
        )
        self._row += 1

        generated = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(
            self._row, 0, self._row, last_col,
            f"Generado: {generated}",
            self._formats["subtitle"],
        )
        self._row += 2

    def _write_info(self) -> None:
        budget = self._budget
        client = budget.client
        info: list[tuple[str, str]] = [
            ("Cliente", client.name if client else f"ID {budget.client_id}"),
            ("RUC", (client.ruc or "") if client else ""),
            ("Proyecto", budget.project_name or ""),
            ("Estado", _STATUS_LABELS.get(budget.status, budget.status)),
            ("Fecha", budget.created_at.strftime("%d/%m/%Y")),
            ("Válido hasta", budget.valid_until.strftime("%d/%m/%Y") if budget.valid_until else "-"),
        ]
        if budget.project_description:
            info.append(("Descripción", budget.project_description))

        for key, value in info:
            self._worksheet.write(self._row, 0, "", self._formats["info_key"])
            self._worksheet.write(self._row, 1, f"{key}:", self._formats["info_key"])
            self._worksheet.merge_range(
                self._row, 2, self._row, len(_HEADERS) - 1, value, self._formats["info_value"],
            )
            self._row += 1
        self._row += 1

    def _write_lines(self) -> None:
        ws = self._worksheet
        fmt = self._formats

        ws.set_row(self._row, 20)
        for ci, header in enumerate(_HEADERS):
            ws.write(self._row, ci, header, fmt["col_header"])
        self._row += 1

        for index, line in enumerate(self._budget.items):
            alt = "_alt" if index % 2 == 1 else ""
            ws.write_number(self._row, 0, index + 1, fmt["qty" + alt])
            ws.write(self._row, 1, line.description, fmt["text" + alt])
            ws.write(self._row, 2, line.unit, fmt["text" + alt])
            ws.write_number(self._row, 3, line.quantity, fmt["qty" + alt])
            ws.write_number(self._row, 4, line.unit_price, fmt["money" + alt])
            ws.write_number(self._row, 5, line.subtotal, fmt["money" + alt])
            self._row += 1

        for ci, width in enumerate(_COL_WIDTHS):
            ws.set_column(ci, ci, width)

    def _write_totals(self) -> None:
        ws = self._worksheet
        fmt = self._formats
        budget = self._budget

        self._row += 1
        rows = [
            ("Subtotal", budget.subtotal, fmt["total_value"]),
            (f"IVA ({self._iva_rate * 100:g}%)", budget.iva, fmt["total_value"]),
            ("TOTAL", budget.total, fmt["grand_total"]),
        ]
        for label, amount, amount_fmt in rows:
            ws.merge_range(self._row, 3, self._row, 4, label, fmt["total_label"])
            ws.write_number(self._row, 5, amount, amount_fmt)
            self._row += 1

        if budget.notes:
            self._row += 1
            ws.merge_range(
                self._row, 0, self._row + 2, len(_HEADERS) - 1,
                f"Notas: {budget.notes}",
                fmt["notes"],
            )

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def build(self) -> bytes:
        """Write every section, close the workbook and return its bytes.

        The exporter must not be reused afterwards.
        """
        self._write_header()
        self._write_info()
        self._write_lines()
        self._write_totals()

        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
