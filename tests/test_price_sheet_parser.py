import io

from openpyxl import Workbook

from app.parsers.price_sheet_parser import PriceSheetParser


def _workbook(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_reads_id_and_price_with_aliases():
    content = _workbook([
        ["Id", "Nombre", "PRECIO"],
        [1, "Cemento", 28.5],
        [2, "Arena", "S/. 1,200.00"],
    ])
    result = PriceSheetParser(content).parse()

    assert result.ok
    assert result.records == [{"id": 1, "price": 28.5}, {"id": 2, "price": 1200.0}]
    assert result.rejected == []


def test_bad_rows_are_rejected_and_blank_rows_skipped():
    content = _workbook([
        ["id", "price"],
        [1, 10],
        [None, None],
        ["x7", 3],
        [3, "gratis"],
        [4.5, 2],
    ])
    result = PriceSheetParser(content).parse()

    assert result.records == [{"id": 1, "price": 10.0}]
    assert result.rejected == ["x7", "3", "4.5"]


def test_missing_columns_are_structural_errors():
    result = PriceSheetParser(_workbook([["id", "nombre"], [1, "Cemento"]])).parse()
    assert not result.ok
    assert result.records == []
    assert any("price" in e for e in result.errors)


def test_unreadable_file():
    result = PriceSheetParser(b"not an excel file").parse()
    assert not result.ok
