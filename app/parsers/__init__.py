"""Spreadsheet parsers package.

Public API
----------
PriceSheetParser  — Reads ``(id, price)`` rows for the bulk price import.
ParseResult       — Dataclass returned by ``PriceSheetParser.parse()``.

Usage example::

    from app.parsers import PriceSheetParser

    result = PriceSheetParser(await upload.read()).parse()
    if result.ok:
        for rec in result.records:
            ...
"""

from .price_sheet_parser import ParseResult, PriceSheetParser

__all__: list[str] = [
    "PriceSheetParser",
    "ParseResult",
]
