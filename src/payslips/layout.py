from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from PIL import Image as PilImage
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from .assets import AssetFetcher, AssetSource
from .calculator import parse_amount
from .logging import get_logger
from .models import DEDUCTION_LINE_ITEMS, EARNING_LINE_ITEMS, CalculatedPayrollRecord
from .render import Color, ImageOp, LineOp, PageLayout, RectOp, RenderedDocument, TextOp, render_pdf

logger = get_logger(__name__)

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"


@dataclass(frozen=True)
class PageStyle:
    """Fixed A4 geometry, palette and type scale. Lengths in mm, font sizes in points."""

    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 15.0

    primary: Color = (48, 71, 94)
    text_dark: Color = (0, 0, 0)
    text_muted: Color = (100, 100, 100)
    border_light: Color = (200, 200, 200)
    summary_fill: Color = (235, 242, 252)
    summary_border: Color = (200, 220, 245)
    card_fill: Color = (255, 255, 255)
    card_border: Color = (230, 230, 230)
    card_label: Color = (150, 150, 150)
    words_label: Color = (40, 86, 182)
    white: Color = (255, 255, 255)

    font_title: float = 22
    font_subtitle: float = 9
    font_section: float = 11
    font_normal: float = 9
    font_small: float = 8
    font_table_header: float = 8

    line_normal: float = 6
    line_small: float = 4.5
    section_spacing: float = 7
    item_spacing: float = 3.5
    table_header_gap: float = 2.5

    logo_width: float = 35
    logo_height: float = 15
    employee_label_width: float = 28
    employer_wrap_ratio: float = 0.45

    summary_padding_x: float = 5
    summary_padding_y: float = 5
    card_height: float = 14
    bar_height: float = 10
    footer_bottom_offset: float = 15

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def right_edge(self) -> float:
        return self.page_width - self.margin


def format_amount(value: float) -> str:
    return f"{value:,.2f}"


def text_width(text: str, font: str, size: float) -> float:
    return stringWidth(text, font, size) / mm


def wrap_text(text: str, font: str, size: float, max_width: float) -> List[str]:
    return simpleSplit(text, font, size, max_width * mm)


class PageBuilder:
    """Collects drawing operations and owns the downward-only vertical cursor."""

    def __init__(self, style: PageStyle):
        self.style = style
        self.y = style.margin
        self.page = PageLayout(width=style.page_width, height=style.page_height)

    def advance(self, delta: float) -> float:
        return self.move_to(self.y + delta)

    def move_to(self, y: float) -> float:
        if y < self.y:
            raise ValueError(f"Layout cursor cannot move up from {self.y:.2f} to {y:.2f}")
        self.y = y
        return self.y

    def mark(self, step: str) -> None:
        self.page.marks.append((step, self.y))

    def centered_baseline(self, top: float, line_height: float, font_size: float) -> float:
        """Baseline that visually centres a line of text inside a row starting at ``top``."""
        return top + line_height / 2 - font_size / mm / 2.5

    def text(self, text: str, x: float, y: float, font: str, size: float, color: Color, align: str = "left") -> None:
        self.page.operations.append(TextOp(x=x, y=y, text=text, font=font, size=size, color=color, align=align))

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float, color: Color) -> None:
        self.page.operations.append(LineOp(x1=x1, y1=y1, x2=x2, y2=y2, width=width, color=color))

    def rect(self, x: float, y: float, width: float, height: float, **kwargs) -> None:
        self.page.operations.append(RectOp(x=x, y=y, width=width, height=height, **kwargs))

    def image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        self.page.operations.append(ImageOp(x=x, y=y, width=width, height=height, data=data))


class DocumentLayoutEngine:
    """Lay out a calculated payslip on one A4 page.

    Sections are placed strictly top to bottom: header, party details, earnings
    and deductions tables, summary, payment details and footer. Content that
    does not fit simply runs past the bottom margin; there is no pagination.
    """

    def __init__(self, style: Optional[PageStyle] = None, fetch_asset: Optional[AssetSource] = None):
        self.style = style or PageStyle()
        self.fetch_asset = fetch_asset or AssetFetcher()

    def layout(self, record: CalculatedPayrollRecord) -> RenderedDocument:
        page = self.compose(record)
        title = f"Payslip - {record.employee.full_name} - {record.pay_period}"
        return RenderedDocument(content=render_pdf(page, title=title))

    def compose(self, record: CalculatedPayrollRecord) -> PageLayout:
        builder = PageBuilder(self.style)
        self._draw_header(builder, record)
        builder.mark("header")
        self._draw_party_details(builder, record)
        builder.mark("party_details")
        self._draw_table(builder, "Earnings", record.employee.amounts(EARNING_LINE_ITEMS), record.currency_code)
        builder.advance(self.style.section_spacing)
        self._draw_table(builder, "Deductions", record.employee.amounts(DEDUCTION_LINE_ITEMS), record.currency_code)
        builder.advance(self.style.section_spacing * 1.5)
        builder.mark("tables")
        self._draw_summary(builder, record)
        builder.mark("summary")
        self._draw_payment_details(builder, record)
        builder.mark("payment_details")
        self._draw_footer(builder, record)
        builder.mark("footer")
        return builder.page

    def _load_logo(self, url: Optional[str]) -> Optional[Tuple[bytes, int, int]]:
        if not url:
            return None
        try:
            data = self.fetch_asset(url)
            with PilImage.open(BytesIO(data)) as image:
                image.load()
                width, height = image.size
            if not width or not height:
                raise ValueError("Logo has no pixels")
        except Exception as exc:
            logger.warning("logo_unavailable", url=url, error=str(exc))
            return None
        return data, width, height

    def _draw_header(self, page: PageBuilder, record: CalculatedPayrollRecord) -> None:
        style = self.style
        top = page.y

        title_y = top + 7
        page.text("Payslip", style.margin, title_y, FONT_BOLD, style.font_title, style.primary)
        subtitle_y = title_y + style.line_normal + style.item_spacing / 2
        page.text(f"Pay Date : {record.pay_date}", style.margin, subtitle_y, FONT_REGULAR, style.font_subtitle, style.text_muted)
        page.text(
            f"Pay Period : {record.pay_period.upper()}",
            style.margin,
            subtitle_y + style.line_small,
            FONT_REGULAR,
            style.font_subtitle,
            style.text_muted,
        )
        text_height = subtitle_y + style.line_small - top

        logo_height = style.logo_height
        logo = self._load_logo(record.logo_url)
        if logo is not None:
            data, pixel_width, pixel_height = logo
            logo_height = pixel_height * style.logo_width / pixel_width
            page.image(data, style.right_edge - style.logo_width, top, style.logo_width, logo_height)

        page.advance(max(logo_height, text_height) + style.section_spacing * 1.5)

    def _draw_party_details(self, page: PageBuilder, record: CalculatedPayrollRecord) -> None:
        style = self.style
        employee = record.employee
        employer = record.employer

        left_y = page.y
        page.text("Employee Details", style.margin, left_y, FONT_BOLD, style.font_section, style.primary)
        left_y += style.line_normal * 1.5
        for label, value in (
            ("Name:", employee.full_name),
            ("CNIC:", employee.cnic_number),
            ("Designation:", employee.designation),
            ("DOJ:", employee.date_of_joining),
        ):
            baseline = page.centered_baseline(left_y, style.line_normal, style.font_normal)
            page.text(label, style.margin, baseline, FONT_BOLD, style.font_normal, style.text_dark)
            page.text(
                str(value),
                style.margin + style.employee_label_width,
                baseline,
                FONT_REGULAR,
                style.font_normal,
                style.text_dark,
            )
            left_y += style.line_normal

        right_x = style.right_edge
        right_y = page.y
        page.text("Employer Details", right_x, right_y, FONT_BOLD, style.font_section, style.primary, align="right")
        right_y += style.line_normal * 1.5
        page.text(employer.name, right_x, right_y, FONT_BOLD, style.font_normal, style.text_dark, align="right")
        right_y += style.line_normal

        address_lines = wrap_text(
            employer.address, FONT_REGULAR, style.font_normal, style.content_width * style.employer_wrap_ratio
        )
        for index, line in enumerate(address_lines):
            page.text(
                line,
                right_x,
                right_y + index * style.line_small,
                FONT_REGULAR,
                style.font_normal,
                style.text_dark,
                align="right",
            )
        right_y += len(address_lines) * style.line_small
        if len(address_lines) > 1:
            right_y += style.item_spacing / 2
        page.text(
            f"Phone & WhatsApp: {employer.phone}",
            right_x,
            right_y,
            FONT_REGULAR,
            style.font_normal,
            style.text_dark,
            align="right",
        )

        page.move_to(max(left_y, right_y) + style.section_spacing * 1.5)

    def _draw_table(self, page: PageBuilder, title: str, items: Sequence[Tuple[str, str]], currency_code: str) -> None:
        style = self.style
        right_x = style.right_edge
        y = page.y

        page.text(
            title,
            style.margin,
            page.centered_baseline(y, style.line_normal, style.font_section),
            FONT_BOLD,
            style.font_section,
            style.primary,
        )
        y += style.line_normal * 1.2

        header_y = page.centered_baseline(y, style.line_small, style.font_table_header)
        page.text("Description", style.margin, header_y, FONT_REGULAR, style.font_table_header, style.text_muted)
        page.text(
            f"Amount ({currency_code})",
            right_x,
            header_y,
            FONT_REGULAR,
            style.font_table_header,
            style.text_muted,
            align="right",
        )
        y += style.table_header_gap
        page.line(style.margin, y, right_x, y, 0.2, style.border_light)
        y += style.item_spacing * 1.5

        # Zero-valued rows are printed too; the row set never changes.
        for label, value in items:
            baseline = page.centered_baseline(y, style.line_normal, style.font_normal)
            page.text(label, style.margin, baseline, FONT_REGULAR, style.font_normal, style.text_dark)
            page.text(
                format_amount(parse_amount(value)),
                right_x,
                baseline,
                FONT_REGULAR,
                style.font_normal,
                style.text_dark,
                align="right",
            )
            y += style.line_normal
            divider_y = y - style.item_spacing / 1.5
            page.line(style.margin, divider_y, right_x, divider_y, 0.1, style.border_light)

        page.move_to(y)

    def _draw_summary(self, page: PageBuilder, record: CalculatedPayrollRecord) -> None:
        style = self.style
        pad_x, pad_y = style.summary_padding_x, style.summary_padding_y
        left = style.margin
        top = page.y

        card_width = style.content_width / 2 - pad_x * 1.5
        card_y = top + pad_y
        bar_y = card_y + style.card_height + 6
        words_y = bar_y + style.bar_height + 2
        container_height = words_y + style.bar_height + pad_y - top

        page.rect(
            left,
            top,
            style.content_width,
            container_height,
            fill=style.summary_fill,
            stroke=style.summary_border,
            line_width=0.3,
            radius=3,
        )

        cards = (
            ("TOTAL EARNINGS", record.total_earnings, left + pad_x, left + card_width),
            ("TOTAL DEDUCTIONS", record.total_deductions, left + card_width + pad_x * 2, left + card_width * 2 + pad_x),
        )
        for label, amount, card_x, amount_x in cards:
            page.rect(
                card_x,
                card_y,
                card_width,
                style.card_height,
                fill=style.card_fill,
                stroke=style.card_border,
                line_width=0.3,
                radius=2,
            )
            page.text(label, card_x + pad_x, card_y + 4, FONT_BOLD, style.font_small, style.card_label)
            page.text(record.currency_code, card_x + pad_x, card_y + 9, FONT_REGULAR, style.font_normal, style.text_dark)
            page.text(format_amount(amount), amount_x, card_y + 9, FONT_BOLD, style.font_normal, style.text_dark, align="right")

        divider_y = card_y + style.card_height + 3
        page.line(left + pad_x, divider_y, style.right_edge - pad_x, divider_y, 0.3, style.summary_border)

        inner_width = style.content_width - pad_x * 2
        page.rect(
            left + pad_x,
            bar_y,
            inner_width,
            style.bar_height,
            fill=style.primary,
            stroke=style.primary,
            line_width=0.3,
            radius=2,
        )
        page.text("NET PAYABLE", left + pad_x * 2, bar_y + 6, FONT_BOLD, style.font_normal, style.white)
        page.text(
            f"{record.currency_code} {format_amount(record.net_payable)}",
            style.right_edge - pad_x * 2,
            bar_y + 6,
            FONT_BOLD,
            style.font_normal + 1,
            style.white,
            align="right",
        )

        page.rect(
            left + pad_x,
            words_y,
            inner_width,
            style.bar_height,
            fill=style.card_fill,
            stroke=style.card_border,
            line_width=0.3,
            radius=2,
        )
        page.text("AMOUNT IN WORDS", left + pad_x * 2, words_y + 4, FONT_BOLD, style.font_small, style.words_label)
        page.text(record.net_payable_in_words, left + pad_x * 2, words_y + 8, FONT_REGULAR, style.font_normal, style.text_dark)

        page.move_to(words_y + style.bar_height + 2 + style.section_spacing * 1.5)

    def _draw_payment_details(self, page: PageBuilder, record: CalculatedPayrollRecord) -> None:
        style = self.style
        page.text(
            "Payment Details:",
            style.margin,
            page.centered_baseline(page.y, style.line_normal, style.font_section),
            FONT_BOLD,
            style.font_section,
            style.primary,
        )
        page.advance(style.line_normal * 1.5)
        page.text(
            record.payment_details,
            style.margin,
            page.centered_baseline(page.y, style.line_normal, style.font_normal),
            FONT_REGULAR,
            style.font_normal,
            style.text_dark,
        )
        page.advance(style.line_normal + style.section_spacing)

    def _draw_footer(self, page: PageBuilder, record: CalculatedPayrollRecord) -> None:
        style = self.style
        footer_y = max(page.y, style.page_height - style.footer_bottom_offset - style.margin)
        rule_y = footer_y - 6
        page.line(style.margin, rule_y, style.right_edge, rule_y, 0.2, style.border_light)

        note_width = text_width(record.footer_note, FONT_ITALIC, style.font_small)
        note_x = style.margin + (style.content_width - note_width) / 2
        page.text(record.footer_note, note_x, footer_y, FONT_ITALIC, style.font_small, style.text_muted)
        page.move_to(footer_y)
