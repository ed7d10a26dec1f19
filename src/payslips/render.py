from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Tuple, Union

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float  # baseline
    text: str
    font: str
    size: float
    color: Color
    align: str = "left"  # left, right or center, anchored at x


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    color: Color


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float  # top edge
    width: float
    height: float
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    line_width: float = 0.2
    radius: float = 0.0


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float  # top edge
    width: float
    height: float
    data: bytes = field(repr=False)


DrawOp = Union[TextOp, LineOp, RectOp, ImageOp]


@dataclass
class PageLayout:
    """A single page of drawing operations in millimetres, origin at the top-left corner."""

    width: float
    height: float
    operations: List[DrawOp] = field(default_factory=list)
    marks: List[Tuple[str, float]] = field(default_factory=list)

    def texts(self) -> List[str]:
        return [op.text for op in self.operations if isinstance(op, TextOp)]

    def find_text(self, text: str) -> Optional[TextOp]:
        return next((op for op in self.operations if isinstance(op, TextOp) and op.text == text), None)

    def images(self) -> List[ImageOp]:
        return [op for op in self.operations if isinstance(op, ImageOp)]


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes = field(repr=False)
    media_type: str = "application/pdf"

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{base64.b64encode(self.content).decode('ascii')}"

    @classmethod
    def from_data_uri(cls, data_uri: str) -> "RenderedDocument":
        header, separator, payload = data_uri.partition(",")
        if not separator or not payload or not header.startswith("data:"):
            raise ValueError("Malformed data URI")
        media_type = header[len("data:"):].split(";")[0] or "application/pdf"
        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Malformed base64 payload: {exc}") from exc
        return cls(content=content, media_type=media_type)


def _rgb(color: Color) -> Tuple[float, float, float]:
    return color[0] / 255, color[1] / 255, color[2] / 255


def _draw_text(pdf: canvas.Canvas, page_height: float, op: TextOp) -> None:
    pdf.setFont(op.font, op.size)
    pdf.setFillColorRGB(*_rgb(op.color))
    x, y = op.x * mm, (page_height - op.y) * mm
    if op.align == "right":
        pdf.drawRightString(x, y, op.text)
    elif op.align == "center":
        pdf.drawCentredString(x, y, op.text)
    else:
        pdf.drawString(x, y, op.text)


def _draw_line(pdf: canvas.Canvas, page_height: float, op: LineOp) -> None:
    pdf.setStrokeColorRGB(*_rgb(op.color))
    pdf.setLineWidth(op.width * mm)
    pdf.line(op.x1 * mm, (page_height - op.y1) * mm, op.x2 * mm, (page_height - op.y2) * mm)


def _draw_rect(pdf: canvas.Canvas, page_height: float, op: RectOp) -> None:
    if op.fill is not None:
        pdf.setFillColorRGB(*_rgb(op.fill))
    if op.stroke is not None:
        pdf.setStrokeColorRGB(*_rgb(op.stroke))
    pdf.setLineWidth(op.line_width * mm)
    x, y = op.x * mm, (page_height - op.y - op.height) * mm
    stroke = 1 if op.stroke is not None else 0
    fill = 1 if op.fill is not None else 0
    if op.radius:
        pdf.roundRect(x, y, op.width * mm, op.height * mm, op.radius * mm, stroke=stroke, fill=fill)
    else:
        pdf.rect(x, y, op.width * mm, op.height * mm, stroke=stroke, fill=fill)


def _draw_image(pdf: canvas.Canvas, page_height: float, op: ImageOp) -> None:
    pdf.drawImage(
        ImageReader(BytesIO(op.data)),
        op.x * mm,
        (page_height - op.y - op.height) * mm,
        width=op.width * mm,
        height=op.height * mm,
        mask="auto",
    )


def render_pdf(page: PageLayout, title: Optional[str] = None) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page.width * mm, page.height * mm))
    if title:
        pdf.setTitle(title)
    for op in page.operations:
        if isinstance(op, TextOp):
            _draw_text(pdf, page.height, op)
        elif isinstance(op, LineOp):
            _draw_line(pdf, page.height, op)
        elif isinstance(op, RectOp):
            _draw_rect(pdf, page.height, op)
        elif isinstance(op, ImageOp):
            _draw_image(pdf, page.height, op)
        else:
            raise TypeError(f"Unsupported drawing operation: {op!r}")
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
