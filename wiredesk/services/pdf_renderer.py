"""
PDF renderer for wire transfer letters.

Lays out a one-or-more page A4 letter with reportlab:

- Right-aligned date, salutation and body paragraph (flowing text)
- A bordered two-column label/value table, paginated by hand
- Closing prose and signature block (flowing text)

Flowing text is laid out by reportlab: paragraphs are wrapped and, when
the page runs out, split between lines onto the next page. Table rows
are never split.

Table rows are sized from the number of explicit line breaks in the
value, not from measured text. A single long value line can wrap past
the bottom of its cell; ``TableLayout.measure_wrapped_text`` switches to
counting wrapped lines instead.

Vertical positions are tracked top-down (0 is the top edge of the page)
and converted to reportlab's bottom-up coordinates only when drawing.
"""
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

import structlog
from reportlab.lib.enums import TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscent
from reportlab.pdfgen import canvas
from reportlab.platypus import Flowable, Paragraph, Spacer

from wiredesk.exceptions import RenderError
from wiredesk.middleware.logging import log_performance
from wiredesk.models.wire_transfer import RenderedDocument, TableRow, WireTransferRequest
from wiredesk.services.formatting import format_money
from wiredesk.services.letter_template import DEFAULT_TEMPLATE, LetterTemplate

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TableLayout:
    """Page geometry and table metrics, in PDF points."""

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 72

    font_name: str = "Helvetica"
    text_font_size: float = 11
    text_leading: float = 13
    table_font_size: float = 10

    label_width: float = 200
    min_row_height: float = 28
    cell_padding: float = 6
    line_height: float = 14
    # Rows whose bottom would pass this offset start a new page
    bottom_boundary: float = 750
    closing_gap: float = 24

    measure_wrapped_text: bool = False

    @property
    def usable_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def value_width(self) -> float:
        return self.usable_width - self.label_width

    @property
    def top_margin(self) -> float:
        return self.margin


DEFAULT_LAYOUT = TableLayout()


@dataclass
class PageCursor:
    """Current vertical offset from the top of the page and 1-based page number."""

    y: float
    page: int = 1

    def advance(self, amount: float) -> None:
        self.y += amount

    def new_page(self, top: float) -> None:
        self.page += 1
        self.y = top


@dataclass(frozen=True)
class RowPlacement:
    """Where a table row lands: page number, top offset and height."""

    row: TableRow
    page: int
    top: float
    height: float


# =============================================================================
# Table content
# =============================================================================

def beneficiary_account_block(request: WireTransferRequest) -> str:
    """
    Build the seven-line "Cuenta del beneficiario" value.

    The order is fixed and every line is present even when its value is empty.
    """
    return "\n".join([
        f"Banco Intermediario: {request.bancoIntermediario}",
        f"Ciudad: {request.ciudadIntermediario}",
        f"Swift Code: {request.swiftIntermediario}",
        f"ABA: {request.aba}",
        f"Banco Beneficiario: {request.bancoBeneficiario}",
        f"Swift code: {request.swiftBeneficiario}",
        f"Beneficiario Final: {request.ibanBeneficiario}",
    ])


def build_table_rows(
    request: WireTransferRequest,
    template: LetterTemplate = DEFAULT_TEMPLATE,
) -> List[TableRow]:
    """Build the letter table rows in their fixed order."""
    return [
        TableRow(template.label_ordering_party, template.ordering_party),
        TableRow(template.label_ordering_account, template.ordering_account),
        TableRow(template.label_amount, format_money(request.amount, request.currency)),
        TableRow(template.label_beneficiary, request.beneficiario),
        TableRow(template.label_beneficiary_account, beneficiary_account_block(request)),
        TableRow(template.label_beneficiary_address, request.dirBeneficiario),
        TableRow(template.label_bank_address, request.dirBanco),
    ]


# =============================================================================
# Row sizing and pagination
# =============================================================================

def _height_for_lines(line_count: int, layout: TableLayout) -> float:
    return max(layout.min_row_height, layout.cell_padding * 2 + line_count * layout.line_height)


def wrap_cell_text(text: str, width: float, layout: TableLayout = DEFAULT_LAYOUT) -> List[str]:
    """Split text on explicit breaks, then wrap each line to ``width``."""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        wrapped = simpleSplit(paragraph, layout.font_name, layout.table_font_size, width)
        lines.extend(wrapped or [""])
    return lines


def row_height(value: str, layout: TableLayout = DEFAULT_LAYOUT) -> float:
    """
    Estimate a row's height from the explicit line breaks in its value.

    height = max(min_row_height, 2 * padding + lines * line_height)
    """
    return _height_for_lines(len(value.split("\n")), layout)


def measured_row_height(row: TableRow, layout: TableLayout = DEFAULT_LAYOUT) -> float:
    """Row height from wrapped line counts of both cells."""
    inner = 2 * layout.cell_padding
    label_lines = wrap_cell_text(row.label, layout.label_width - inner, layout)
    value_lines = wrap_cell_text(row.value, layout.value_width - inner, layout)
    return _height_for_lines(max(len(label_lines), len(value_lines)), layout)


def compute_row_height(row: TableRow, layout: TableLayout = DEFAULT_LAYOUT) -> float:
    if layout.measure_wrapped_text:
        return measured_row_height(row, layout)
    return row_height(row.value, layout)


def paginate_rows(
    rows: Sequence[TableRow],
    cursor: PageCursor,
    layout: TableLayout = DEFAULT_LAYOUT,
) -> List[RowPlacement]:
    """
    Place rows top to bottom, breaking pages before any row that would
    cross the bottom boundary.

    Rows are never split. A row taller than a whole page still gets a
    single break and is placed on the new page as is. ``cursor`` is left
    just below the last row.
    """
    placements = []
    for row in rows:
        height = compute_row_height(row, layout)
        if cursor.y + height > layout.bottom_boundary:
            cursor.new_page(layout.top_margin)
        placements.append(RowPlacement(row=row, page=cursor.page, top=cursor.y, height=height))
        cursor.advance(height)
    return placements


# =============================================================================
# Drawing
# =============================================================================

def _styles(layout: TableLayout) -> Tuple[ParagraphStyle, ParagraphStyle]:
    body = ParagraphStyle(
        "LetterBody",
        fontName=layout.font_name,
        fontSize=layout.text_font_size,
        leading=layout.text_leading,
        alignment=TA_LEFT,
    )
    date = ParagraphStyle("LetterDate", parent=body, alignment=TA_RIGHT)
    return body, date


def _flow_story(
    pdf: canvas.Canvas,
    story: Sequence[Flowable],
    cursor: PageCursor,
    layout: TableLayout,
) -> None:
    """
    Draw flowables top to bottom from the cursor, onto new pages as needed.

    A flowable that does not fit in the space left is split when it can be
    (paragraphs break between lines); the remainder continues at the top of
    the next page. One that fits neither here nor on an empty page raises
    ``ValueError``.
    """
    pending: List[Flowable] = list(story)
    bottom = layout.page_height - layout.margin
    while pending:
        flowable = pending.pop(0)
        available = bottom - cursor.y
        _, height = flowable.wrapOn(pdf, layout.usable_width, available)
        if height <= available:
            _draw_flowable(pdf, flowable, height, cursor, layout)
            continue

        parts = flowable.splitOn(pdf, layout.usable_width, available)
        if parts:
            first = parts[0]
            _, first_height = first.wrapOn(pdf, layout.usable_width, available)
            _draw_flowable(pdf, first, first_height, cursor, layout)
            pending[0:0] = parts[1:]
        elif cursor.y <= layout.top_margin:
            raise ValueError("Letter text does not fit on an empty page")
        else:
            pending.insert(0, flowable)

        pdf.showPage()
        cursor.new_page(layout.top_margin)


def _draw_flowable(
    pdf: canvas.Canvas,
    flowable: Flowable,
    height: float,
    cursor: PageCursor,
    layout: TableLayout,
) -> None:
    flowable.drawOn(pdf, layout.margin, layout.page_height - cursor.y - height)
    cursor.advance(height)


def _header_story(
    request: WireTransferRequest,
    template: LetterTemplate,
    layout: TableLayout,
) -> List[Flowable]:
    body, date = _styles(layout)
    return [
        Paragraph(escape(request.date), date),
        Spacer(0, 2 * layout.text_leading),
        Paragraph(escape(template.salutation), body),
        Spacer(0, layout.text_leading),
        Paragraph(escape(template.body), body),
        Spacer(0, 1.5 * layout.text_leading),
    ]


def _draw_cell_text(
    pdf: canvas.Canvas,
    text: str,
    x: float,
    top: float,
    width: float,
    layout: TableLayout,
) -> None:
    ascent = getAscent(layout.font_name, layout.table_font_size)
    text_obj = pdf.beginText()
    text_obj.setFont(layout.font_name, layout.table_font_size, leading=layout.line_height)
    text_obj.setTextOrigin(x, layout.page_height - top - ascent)
    for line in wrap_cell_text(text, width, layout):
        text_obj.textLine(line)
    pdf.drawText(text_obj)


def _draw_row(pdf: canvas.Canvas, placement: RowPlacement, layout: TableLayout) -> None:
    left = layout.margin
    bottom = layout.page_height - placement.top - placement.height
    pad = layout.cell_padding

    pdf.rect(left, bottom, layout.label_width, placement.height, stroke=1, fill=0)
    pdf.rect(left + layout.label_width, bottom, layout.value_width, placement.height, stroke=1, fill=0)

    text_top = placement.top + pad
    _draw_cell_text(pdf, placement.row.label, left + pad, text_top, layout.label_width - 2 * pad, layout)
    _draw_cell_text(
        pdf,
        placement.row.value,
        left + layout.label_width + pad,
        text_top,
        layout.value_width - 2 * pad,
        layout,
    )


def _draw_table(
    pdf: canvas.Canvas,
    rows: Sequence[TableRow],
    cursor: PageCursor,
    layout: TableLayout,
) -> None:
    for placement in paginate_rows(rows, cursor, layout):
        while pdf.getPageNumber() < placement.page:
            pdf.showPage()
        _draw_row(pdf, placement, layout)


def _closing_story(template: LetterTemplate, layout: TableLayout) -> List[Flowable]:
    body, _ = _styles(layout)
    story: List[Flowable] = [Paragraph(escape(line), body) for line in template.closing_lines]
    story.append(Spacer(0, 3 * layout.text_leading))
    story.append(Paragraph(escape(template.signature_rule), body))
    story.append(Spacer(0, 0.3 * layout.text_leading))
    story.extend(Paragraph(escape(line), body) for line in template.signature_lines)
    return story


def _paint_letter(
    pdf: canvas.Canvas,
    request: WireTransferRequest,
    template: LetterTemplate,
    layout: TableLayout,
) -> int:
    cursor = PageCursor(y=layout.top_margin)
    _flow_story(pdf, _header_story(request, template, layout), cursor, layout)
    _draw_table(pdf, build_table_rows(request, template), cursor, layout)
    cursor.advance(layout.closing_gap)
    _flow_story(pdf, _closing_story(template, layout), cursor, layout)
    return pdf.getPageNumber()


@log_performance("pdf_render")
def render_wire_transfer_pdf(
    request: WireTransferRequest,
    template: LetterTemplate = DEFAULT_TEMPLATE,
    layout: Optional[TableLayout] = None,
) -> RenderedDocument:
    """
    Render a wire transfer letter to PDF.

    The canvas writes into an in-memory buffer and the bytes are only read
    back once ``save()`` has finished, so a failure never leaks a partial
    document.

    Args:
        request: Validated wire transfer request
        template: Fixed letter wording
        layout: Page geometry (defaults to A4 with 72pt margins)

    Returns:
        RenderedDocument with the PDF bytes and page count

    Raises:
        RenderError: If anything goes wrong while laying out or saving
    """
    layout = layout or DEFAULT_LAYOUT
    buffer = BytesIO()
    # invariant=1 pins creation date and document id so output is reproducible
    pdf = canvas.Canvas(buffer, pagesize=(layout.page_width, layout.page_height), invariant=1)
    pdf.setTitle(f"Wire Transfer {request.ref}".strip())
    pdf.setAuthor(template.ordering_party)

    try:
        page_count = _paint_letter(pdf, request, template, layout)
        pdf.save()
    except Exception as e:
        logger.error(
            "pdf_render_failed",
            ref=request.ref,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise RenderError(f"Failed to render wire transfer document: {e}", cause=e) from e

    content = buffer.getvalue()
    logger.info("pdf_rendered", ref=request.ref, pages=page_count, size_bytes=len(content))
    return RenderedDocument(content=content, page_count=page_count)
