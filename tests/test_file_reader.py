"""
Tests for processing/file_reader.py

Covers: workbook reading (products sheet preference, first-sheet fallback,
__meta sheet, datetime cells, blank rows), delimited text (delimiter
sniffing, TSV, BOM, latin-1 fallback), input types (path, bytes,
file-like), and error collection for unsupported / empty files.
"""

import datetime as dt
import io
from pathlib import Path

import openpyxl
import pytest

from processing.file_reader import (
    FileReadResult,
    detect_delimiter,
    read_products_file,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_workbook(path: Path, sheets: dict[str, list[list]]) -> Path:
    """Write a workbook with one sheet per entry, in insertion order."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in rows:
            sheet.append(row)
    workbook.save(str(path))
    return path


# ═══════════════════════════════════════════════════════════════════════════
# Workbooks
# ═══════════════════════════════════════════════════════════════════════════

class TestWorkbooks:
    def test_prefers_products_sheet(self, tmp_path):
        path = _write_workbook(tmp_path / "a.xlsx", {
            "Cover": [["Nothing here"]],
            "Products": [["Name", "Qty"], ["Paracetamol", 10]],
        })
        result = read_products_file(path)

        assert isinstance(result, FileReadResult)
        assert result.errors == []
        assert result.origin == "workbook"
        assert result.sheet_name == "Products"
        assert result.matrix == [["Name", "Qty"], ["Paracetamol", 10]]

    def test_falls_back_to_first_sheet(self, tmp_path):
        path = _write_workbook(tmp_path / "b.xlsx", {
            "Sheet A": [["Name"], ["Ibuprofen"]],
            "Sheet B": [["Other"]],
        })
        result = read_products_file(path)
        assert result.sheet_name == "Sheet A"

    def test_meta_sheet_read(self, tmp_path):
        path = _write_workbook(tmp_path / "c.xlsx", {
            "products": [["Name"], ["Amoxicillin"]],
            "__meta": [
                ["template_version", "MedWay_Template_v3"],
                ["header_checksum", "f9802bc8"],
            ],
        })
        result = read_products_file(path)

        assert result.template_version == "MedWay_Template_v3"
        assert result.header_checksum == "f9802bc8"
        assert result.template_meta == {
            "template_version": "MedWay_Template_v3",
            "header_checksum": "f9802bc8",
        }

    def test_no_meta_sheet_gives_no_template_meta(self, tmp_path):
        path = _write_workbook(tmp_path / "d.xlsx", {"products": [["Name"], ["X"]]})
        assert read_products_file(path).template_meta is None

    def test_datetime_cells_become_iso_strings(self, tmp_path):
        path = _write_workbook(tmp_path / "e.xlsx", {
            "products": [["Name", "Expiry"], ["Paracetamol", dt.datetime(2027, 3, 31)]],
        })
        result = read_products_file(path)
        assert result.matrix[1][1] == "2027-03-31"

    def test_blank_rows_dropped(self, tmp_path):
        path = _write_workbook(tmp_path / "f.xlsx", {
            "products": [["Name"], [None], ["Paracetamol"], ["  "], ["Ibuprofen"]],
        })
        result = read_products_file(path)
        assert result.matrix == [["Name"], ["Paracetamol"], ["Ibuprofen"]]

    def test_rows_are_header_keyed(self, tmp_path):
        path = _write_workbook(tmp_path / "g.xlsx", {
            "products": [["Name", "Qty"], ["Paracetamol", 10]],
        })
        result = read_products_file(path)
        assert result.rows == [{"Name": "Paracetamol", "Qty": 10}]

    def test_bytes_input_needs_filename(self, tmp_path):
        path = _write_workbook(tmp_path / "h.xlsx", {"products": [["Name"], ["X"]]})
        result = read_products_file(path.read_bytes(), "upload.xlsx")
        assert result.origin == "workbook"
        assert len(result.matrix) == 2

    def test_corrupt_workbook_collects_error(self):
        result = read_products_file(b"not a zip file", "broken.xlsx")
        assert result.matrix == []
        assert any("Cannot open workbook" in e for e in result.errors)


# ═══════════════════════════════════════════════════════════════════════════
# Delimited text
# ═══════════════════════════════════════════════════════════════════════════

class TestDelimitedText:
    def test_comma_csv(self):
        payload = b"Name,Strength,Qty\nParacetamol,500 mg,10\n"
        result = read_products_file(payload, "items.csv")

        assert result.origin == "text"
        assert result.delimiter == ","
        assert result.matrix == [["Name", "Strength", "Qty"], ["Paracetamol", "500 mg", "10"]]

    def test_semicolon_sniffed(self):
        payload = b"Name;Strength;Qty\nParacetamol;500 mg;10\nIbuprofen;200 mg;5\n"
        result = read_products_file(payload, "items.csv")
        assert result.delimiter == ";"
        assert result.matrix[2] == ["Ibuprofen", "200 mg", "5"]

    def test_tsv_extension_forces_tab(self):
        payload = b"Name\tQty\nA, B\t3\n"
        result = read_products_file(payload, "items.tsv")
        assert result.delimiter == "\t"
        assert result.matrix[1] == ["A, B", "3"]

    def test_utf8_bom_stripped(self):
        payload = "\ufeffName,Qty\nParacetamol,1\n".encode("utf-8")
        result = read_products_file(payload, "bom.csv")
        assert result.matrix[0][0] == "Name"

    def test_latin1_fallback(self):
        payload = "Name,Qty\nCafé,1\n".encode("latin-1")
        result = read_products_file(payload, "latin.csv")
        assert result.matrix[1][0] == "Café"

    def test_file_like_input(self):
        buffer = io.BytesIO(b"Name,Qty\nA,1\n")
        result = read_products_file(buffer, "buffer.csv")
        assert len(result.matrix) == 2

    def test_path_input_uses_path_name(self, tmp_path):
        path = tmp_path / "items.txt"
        path.write_text("Name|Qty\nA|1\nB|2\n", encoding="utf-8")
        result = read_products_file(path)
        assert result.delimiter == "|"


class TestDetectDelimiter:
    @pytest.mark.parametrize("text, expected", [
        ("a,b,c\n1,2,3\n", ","),
        ("a;b;c\n1;2;3\n", ";"),
        ("a\tb\tc\n1\t2\t3\n", "\t"),
        ("a|b|c\n1|2|3\n", "|"),
    ])
    def test_stable_counts_win(self, text, expected):
        assert detect_delimiter(text) == expected

    def test_tie_keeps_comma(self):
        assert detect_delimiter("single\nvalue\n") == ","


# ═══════════════════════════════════════════════════════════════════════════
# Error handling
# ═══════════════════════════════════════════════════════════════════════════

class TestErrorHandling:
    def test_unsupported_extension(self):
        result = read_products_file(b"%PDF", "scan.pdf")
        assert result.matrix == []
        assert any("Unsupported file type" in e for e in result.errors)

    def test_empty_payload(self):
        result = read_products_file(b"", "empty.csv")
        assert any("is empty" in e for e in result.errors)

    def test_missing_path(self, tmp_path):
        result = read_products_file(tmp_path / "missing.csv")
        assert any("Cannot read file" in e for e in result.errors)
