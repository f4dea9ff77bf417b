"""
Tests for the wire transfer PDF renderer.

Covers row sizing, pagination and the rendered document itself.
"""
from dataclasses import replace
from typing import List

import pytest

from wiredesk.exceptions import RenderError
from wiredesk.models.wire_transfer import TableRow, WireTransferRequest
from wiredesk.services.letter_template import DEFAULT_TEMPLATE
from wiredesk.services.pdf_renderer import (
    DEFAULT_LAYOUT,
    PageCursor,
    TableLayout,
    beneficiary_account_block,
    build_table_rows,
    compute_row_height,
    measured_row_height,
    paginate_rows,
    render_wire_transfer_pdf,
    row_height,
)


def _rows(count: int, value: str = "x") -> List[TableRow]:
    return [TableRow(f"Label {i}", value) for i in range(count)]


class TestTableRows:
    """Tests for table content and ordering."""

    def test_row_order_and_labels(self, wire_request):
        """Test that rows come out in the fixed letter order."""
        rows = build_table_rows(wire_request)

        assert [row.label for row in rows] == [
            "Ordenante",
            "Cuenta del ordenante",
            "Importe y divisa",
            "Beneficiario",
            "Cuenta del beneficiario",
            "Dirección completa del beneficiario",
            "Dirección completa del banco del beneficiario",
        ]

    def test_row_values(self, wire_request):
        rows = build_table_rows(wire_request)
        values = {row.label: row.value for row in rows}

        assert values["Ordenante"] == DEFAULT_TEMPLATE.ordering_party
        assert values["Cuenta del ordenante"] == DEFAULT_TEMPLATE.ordering_account
        assert values["Importe y divisa"] == "1.234,50 USD"
        assert values["Beneficiario"] == "ACME Corporation"
        assert values["Dirección completa del banco del beneficiario"] == wire_request.dirBanco

    def test_beneficiary_account_block_order(self, wire_request):
        """Test the composite cell lists its seven sub-fields in order."""
        lines = beneficiary_account_block(wire_request).split("\n")

        assert lines == [
            "Banco Intermediario: Citibank",
            "Ciudad: New York",
            "Swift Code: CITIUS33",
            "ABA: 021000089",
            "Banco Beneficiario: JPMorgan Chase Bank",
            "Swift code: CHASUS33",
            "Beneficiario Final: 000123456789",
        ]

    def test_beneficiary_account_block_with_empty_fields(self, wire_request):
        """Test that empty sub-fields still produce their own line."""
        request = replace(
            wire_request,
            bancoIntermediario="",
            ciudadIntermediario="",
            swiftIntermediario="",
            aba="",
        )

        lines = beneficiary_account_block(request).split("\n")

        assert len(lines) == 7
        assert lines[0] == "Banco Intermediario: "
        assert lines[3] == "ABA: "
        assert lines[6] == "Beneficiario Final: 000123456789"


class TestRowHeight:
    """Tests for the line-count based row height estimate."""

    def test_single_line_uses_minimum(self):
        assert row_height("one line") == DEFAULT_LAYOUT.min_row_height

    def test_empty_value_uses_minimum(self):
        assert row_height("") == DEFAULT_LAYOUT.min_row_height

    def test_multi_line_height(self):
        """Test 2 * padding + lines * line_height once above the minimum."""
        assert row_height("\n".join(["x"] * 7)) == 6 * 2 + 7 * 14

    def test_monotonic_in_line_breaks(self):
        """Test height never decreases as line breaks are added."""
        heights = [row_height("\n".join(["x"] * n)) for n in range(1, 30)]

        assert heights == sorted(heights)
        assert min(heights) >= DEFAULT_LAYOUT.min_row_height

    def test_long_unbroken_line_not_detected(self):
        """Test that wrapping is ignored by the default estimate."""
        assert row_height("word " * 200) == DEFAULT_LAYOUT.min_row_height

    def test_measured_mode_counts_wrapped_lines(self):
        """Test the measured mode grows rows for long wrapped text."""
        layout = TableLayout(measure_wrapped_text=True)
        row = TableRow("Beneficiario", "word " * 200)

        assert compute_row_height(row, layout) > row_height(row.value, layout)
        assert compute_row_height(row, layout) == measured_row_height(row, layout)

    def test_measured_mode_keeps_minimum(self):
        layout = TableLayout(measure_wrapped_text=True)

        assert measured_row_height(TableRow("A", "b"), layout) == layout.min_row_height


class TestPagination:
    """Tests for manual table pagination."""

    def test_rows_fit_on_one_page(self):
        cursor = PageCursor(y=200)

        placements = paginate_rows(_rows(5), cursor)

        assert {p.page for p in placements} == {1}
        assert [p.top for p in placements] == [200, 228, 256, 284, 312]
        assert cursor.y == 340

    def test_row_ending_on_boundary_stays(self):
        """Test a row whose bottom lands exactly on the boundary is kept."""
        cursor = PageCursor(y=DEFAULT_LAYOUT.bottom_boundary - 28)

        placements = paginate_rows(_rows(1), cursor)

        assert placements[0].page == 1

    def test_overflowing_row_moves_to_next_page(self):
        """Test a row crossing the boundary starts at the top of a new page."""
        cursor = PageCursor(y=700)

        placements = paginate_rows(_rows(3), cursor)

        assert [(p.page, p.top) for p in placements] == [
            (1, 700),
            (2, 72),
            (2, 100),
        ]
        assert cursor.page == 2

    def test_tall_row_is_not_split(self):
        """Test a row taller than a page gets one break and is drawn whole."""
        tall = TableRow("Tall", "\n".join(["x"] * 60))
        cursor = PageCursor(y=100)

        placements = paginate_rows([tall, TableRow("Next", "y")], cursor)

        assert placements[0].page == 2
        assert placements[0].top == 72
        assert placements[0].height == 6 * 2 + 60 * 14
        assert placements[1].page == 3
        assert placements[1].top == 72

    def test_custom_boundary(self):
        layout = TableLayout(bottom_boundary=300)
        cursor = PageCursor(y=250)

        placements = paginate_rows(_rows(2), cursor, layout)

        assert [p.page for p in placements] == [1, 2]


class TestRenderWireTransferPdf:
    """Tests for the rendered document."""

    def test_returns_pdf_bytes(self, wire_request):
        document = render_wire_transfer_pdf(wire_request)

        assert document.content.startswith(b"%PDF")
        assert document.size == len(document.content)

    def test_single_page_letter(self, wire_request, pdf_pages_text):
        """Test a request with short values fits on one page."""
        document = render_wire_transfer_pdf(wire_request)

        assert document.page_count == 1
        assert len(pdf_pages_text(document.content)) == 1

    def test_letter_text(self, wire_request, pdf_pages_text):
        """Test the date, amount and fixed prose are on the page."""
        text = pdf_pages_text(render_wire_transfer_pdf(wire_request).content)[0]

        assert "15 de marzo de 2024" in text
        assert "Estimados Srs:" in text
        assert "1.234,50 USD" in text
        assert "Swift Code: CITIUS33" in text
        assert "Administrador Único" in text

    def test_long_composite_value_spills_to_more_pages(self, wire_request, pdf_pages_text):
        """Test that a tall composite cell pushes the table past one page."""
        request = replace(
            wire_request,
            bancoIntermediario="\n".join(f"Linea {i}" for i in range(40)),
        )

        document = render_wire_transfer_pdf(request)

        assert document.page_count > 1
        assert len(pdf_pages_text(document.content)) == document.page_count

    def test_closing_text_flows_to_new_page(self, wire_request, pdf_pages_text):
        """Test the closing block continues on a new page when the table fills the page."""
        # Last row ends just above the bottom boundary, leaving no room for the closing
        request = replace(
            wire_request,
            dirBanco="\n".join(f"Piso {i}" for i in range(21)),
        )

        pages = pdf_pages_text(render_wire_transfer_pdf(request).content)

        assert len(pages) == 2
        assert "Muchas gracias," in pages[-1]
        assert "Administrador Único" in pages[-1]
        assert "Muchas gracias," not in pages[0]

    def test_overlong_date_continues_on_next_page(self, wire_request, pdf_pages_text):
        """Test header text that outgrows the first page is carried over, not cut off."""
        request = replace(wire_request, date="fecha " * 3000)

        document = render_wire_transfer_pdf(request)
        pages = pdf_pages_text(document.content)

        assert document.page_count == len(pages)
        assert len(pages) >= 3
        assert "".join(pages).count("fecha") == 3000
        assert "Ordenante" not in pages[0]
        assert "Ordenante" in "".join(pages[1:])
        assert "Administrador Único" in pages[-1]

    def test_deterministic_output(self, wire_request):
        """Test that rendering the same request twice gives identical bytes."""
        first = render_wire_transfer_pdf(wire_request)
        second = render_wire_transfer_pdf(wire_request)

        assert first.content == second.content

    def test_markup_characters_in_values(self, wire_request, pdf_pages_text):
        """Test that characters special to paragraph markup render as text."""
        request = replace(wire_request, date="<b>1 & 2</b>", beneficiario="Smith & <Sons>")

        text = pdf_pages_text(render_wire_transfer_pdf(request).content)[0]

        assert "<b>1 & 2</b>" in text
        assert "Smith & <Sons>" in text

    def test_invalid_amount_raises_render_error(self, sample_submission):
        """Test that a non-numeric amount fails the render with RenderError."""
        sample_submission["amount"] = "mil euros"
        request = WireTransferRequest.from_mapping(sample_submission)

        with pytest.raises(RenderError) as exc_info:
            render_wire_transfer_pdf(request)

        assert isinstance(exc_info.value.cause, ValueError)
        assert "mil euros" in exc_info.value.message

    def test_measured_layout_renders(self, wire_request):
        layout = TableLayout(measure_wrapped_text=True)
        request = replace(wire_request, dirBeneficiario="Calle Mayor " * 40)

        document = render_wire_transfer_pdf(request, layout=layout)

        assert document.page_count >= 1
