"""
Canvas Helpers

Text measurement, font fitting, image decoding and a top-down page builder
on top of the ReportLab canvas. Coordinates passed to PageCanvas are
measured from the top-left corner of the page, in points.
"""

import base64
import binascii
import logging
from io import BytesIO
from typing import Callable, Optional

from PIL import Image
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscent, stringWidth
from reportlab.pdfgen import canvas as pdf_canvas

from docgen.services.config import RenderConfig
from .styles import FONT_REGULAR, TEXT_COLOR


logger = logging.getLogger(__name__)

LINE_HEIGHT_FACTOR = 1.2


def text_width(text: str, font_name: str, font_size: float) -> float:
    """Measured width of a single line of text."""
    return stringWidth(text or '', font_name, font_size)


def split_lines(text, font_name: str, font_size: float, width: float) -> list[str]:
    """
    Wrap text into lines that fit within width.

    Explicit newlines are kept. Empty text still occupies one line.
    """
    text = '' if text is None else str(text)
    if width <= 0:
        return text.split('\n')
    return simpleSplit(text, font_name, font_size, width) or ['']


def line_height(font_size: float) -> float:
    return font_size * LINE_HEIGHT_FACTOR


def measure_text_height(text, font_name: str, font_size: float, width: float) -> float:
    """Height of text wrapped to width."""
    return len(split_lines(text, font_name, font_size, width)) * line_height(font_size)


def fit_font_size(
    text: str,
    font_name: str,
    preferred: float,
    floor: float,
    max_width: float,
    step: float = 0.5,
) -> float:
    """
    Find the largest font size at which text fits on one line.

    Starts at preferred and shrinks by step while the text is wider than
    max_width. Never goes below floor; text that still overflows at the
    floor is accepted as is.
    """
    size = preferred
    while size > floor and text_width(text, font_name, size) > max_width:
        size -= step
    return max(size, floor)


def decode_image(data: Optional[str]) -> Optional[ImageReader]:
    """
    Decode a base64 (optionally data-URL) encoded raster image.

    Returns:
        ImageReader for drawing, or None if data is empty or not a
        decodable image
    """
    if not data:
        return None

    encoded = data.split(',', 1)[1] if ',' in data else data
    try:
        raw = base64.b64decode(encoded)
        image = Image.open(BytesIO(raw))
        image.load()
    except (binascii.Error, ValueError, OSError) as e:
        logger.warning(f"Failed to decode embedded image: {e}")
        return None

    return ImageReader(image)


class PageCanvas:
    """
    Top-down drawing surface that accumulates a PDF in memory.

    The vertical cursor `y` starts at the top margin. finish() closes the
    document and returns the PDF bytes.
    """

    def __init__(self, config: RenderConfig, title: Optional[str] = None,
                 footer_reserve: float = 0):
        self.config = config
        self.width, self.height = config.page_size
        self.margin = config.margin
        self.footer_reserve = footer_reserve
        self.page_count = 1
        self.on_page_end: Optional[Callable[['PageCanvas'], None]] = None
        self.y = self.margin

        self._buffer = BytesIO()
        self.canvas = pdf_canvas.Canvas(self._buffer, pagesize=config.page_size, invariant=1)
        if title:
            self.canvas.setTitle(title)

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.width - self.margin

    @property
    def bottom(self) -> float:
        return self.height - self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    def _pdf_y(self, top: float) -> float:
        return self.height - top

    def text(
        self,
        text,
        x: float,
        top: float,
        width: float,
        font: str = FONT_REGULAR,
        size: float = 10,
        color=TEXT_COLOR,
        align: str = 'left',
        wrap: bool = True,
    ) -> float:
        """
        Draw text whose first line box starts at top.

        Returns:
            Height consumed by the drawn lines
        """
        text = '' if text is None else str(text)
        lines = split_lines(text, font, size, width) if wrap else [text]
        leading = line_height(size)
        baseline = top + getAscent(font, size)

        c = self.canvas
        c.saveState()
        c.setFont(font, size)
        c.setFillColor(color)
        for line in lines:
            y = self._pdf_y(baseline)
            if align == 'center':
                c.drawCentredString(x + width / 2, y, line)
            elif align == 'right':
                c.drawRightString(x + width, y, line)
            else:
                c.drawString(x, y, line)
            baseline += leading
        c.restoreState()

        return len(lines) * leading

    def line(self, x1: float, top1: float, x2: float, top2: float,
             width: float = 1, color=TEXT_COLOR) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(color)
        c.setLineWidth(width)
        c.line(x1, self._pdf_y(top1), x2, self._pdf_y(top2))
        c.restoreState()

    def rect(self, x: float, top: float, w: float, h: float, fill=None, stroke=None,
             line_width: float = 1, radius: float = 0) -> None:
        c = self.canvas
        c.saveState()
        if fill is not None:
            c.setFillColor(fill)
        if stroke is not None:
            c.setStrokeColor(stroke)
            c.setLineWidth(line_width)
        y = self._pdf_y(top + h)
        fill_flag = 1 if fill is not None else 0
        stroke_flag = 1 if stroke is not None else 0
        if radius > 0:
            c.roundRect(x, y, w, h, radius, stroke=stroke_flag, fill=fill_flag)
        else:
            c.rect(x, y, w, h, stroke=stroke_flag, fill=fill_flag)
        c.restoreState()

    def circle(self, cx: float, cy: float, r: float, fill) -> None:
        c = self.canvas
        c.saveState()
        c.setFillColor(fill)
        c.circle(cx, self._pdf_y(cy), r, stroke=0, fill=1)
        c.restoreState()

    def image(self, image, x: float, top: float, w: float, h: float) -> None:
        """Draw an image fitted into the box, aspect ratio preserved, centred."""
        self.canvas.drawImage(
            image, x, self._pdf_y(top + h), width=w, height=h,
            preserveAspectRatio=True, anchor='c', mask='auto',
        )

    def logo(self, path: str, x: float, top: float, w: float, h: float) -> bool:
        """
        Draw the institution logo.

        A logo that cannot be read is skipped so the rest of the page still
        renders.
        """
        try:
            self.canvas.drawImage(path, x, self._pdf_y(top + h), width=w, height=h, mask='auto')
        except OSError as e:
            logger.warning(f"Failed to draw logo {path}: {e}")
            return False
        return True

    def ensure_space(self, height: float) -> bool:
        """
        Start a new page when height would cross into the footer reserve.

        Returns:
            True if a new page was started
        """
        if self.y + height <= self.bottom - self.footer_reserve:
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        if self.on_page_end:
            self.on_page_end(self)
        self.canvas.showPage()
        self.page_count += 1
        self.y = self.margin

    def finish(self) -> bytes:
        """Close the document and return the PDF bytes."""
        if self.on_page_end:
            self.on_page_end(self)
        self.canvas.save()
        pdf_bytes = self._buffer.getvalue()
        self._buffer.close()
        return pdf_bytes
