"""Parser for bulk price-update spreadsheets.

Expected layout: first worksheet, one header row containing (at least) the
columns ``id`` and ``price`` (case-insensitive; ``precio`` is accepted as an
alias), then one data row per resource. Extra columns such as ``name`` are
ignored so that a catalog export can be edited and uploaded back.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

_COLUMN_ALIASES: dict[str, str] = {
    "id": "id",
    "price": "price",
    "precio": "price",
}


@dataclass
class ParseResult:
    """Container returned by the parser.

    Attributes:
        records: ``{"id": int, "price": float}`` dicts ready for the bulk update.
        errors: Structural problems; when present no record is produced.
        rejected: Raw id cell values of rows that could not be parsed.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0


class PriceSheetParser:
    """Read ``(id, price)`` pairs from an ``.xlsx`` workbook.

    Args:
        workbook_bytes: Raw file content, e.g. from ``UploadFile.read()``.
    """

    def __init__(self, workbook_bytes: bytes) -> None:
        self.workbook_bytes = workbook_bytes
        self.result = ParseResult()

    @staticmethod
    def _clean_str(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, float) and pd.isna(value):
            return ""
        return str(value).strip()

    @staticmethod
    def _to_price(value: str) -> float | None:
        """Parse a price cell, stripping currency symbols and thousands separators."""
        cleaned = re.sub(r"[,\s]", "", value.lstrip("S/.$ "))
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None

    @staticmethod
    def _to_id(value: str) -> int | None:
        try:
            number = float(value)
        except ValueError:
            return None
        if not number.is_integer():
            return None
        return int(number)

    def _load_sheet(self) -> pd.DataFrame:
        try:
            return pd.read_excel(
                io.BytesIO(self.workbook_bytes),
                sheet_name=0,
                header=0,
                dtype=str,
                engine="openpyxl",
            )
        except Exception as exc:
            msg = f"No se pudo leer el archivo Excel: {exc}"
            logger.error(msg)
            self.result.errors.append(msg)
            return pd.DataFrame()

    def validate_structure(self, df: pd.DataFrame) -> list[str]:
        present = set(df.columns)
        return [
            f"Falta la columna requerida '{column}'."
            for column in ("id", "price")
            if column not in present
        ]

    def parse(self) -> ParseResult:
        df = self._load_sheet()
        if not self.result.ok:
            return self.result

        df = df.rename(
            columns=lambda c: _COLUMN_ALIASES.get(self._clean_str(c).lower(), self._clean_str(c))
        )
        self.result.errors.extend(self.validate_structure(df))
        if not self.result.ok:
            return self.result

        for _, row in df.iterrows():
            raw_id = self._clean_str(row["id"])
            raw_price = self._clean_str(row["price"])
            if not raw_id and not raw_price:
                continue

            resource_id = self._to_id(raw_id)
            price = self._to_price(raw_price)
            if resource_id is None or price is None:
                self.result.rejected.append(raw_id)
                continue

            self.result.records.append({"id": resource_id, "price": price})

        logger.info(
            "PriceSheetParser: records=%d rejected=%d",
            len(self.result.records), len(self.result.rejected),
        )
        return self.result
