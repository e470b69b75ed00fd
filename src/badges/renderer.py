"""Printable badge rendering.

The page is painted with Pillow at ``dpi`` pixels per inch and saved as a one-page
PDF. All geometry comes from ``badges.layout`` in points and is scaled here.
Missing header art and failed encoders degrade to fallback visuals, never to errors.
"""

import io
import typing as t

import structlog
from django.conf import settings
from PIL import Image, ImageDraw, ImageFont

from . import encoders, layout

logger = structlog.get_logger(__name__)

Color = tuple[int, int, int]
Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

WHITE: Color = (255, 255, 255)
BLACK: Color = (0, 0, 0)
DARK_BLUE: Color = (26, 26, 102)
TEXT_GRAY: Color = (51, 51, 51)
GUIDE_GRAY: Color = (179, 179, 179)

SYSTEM_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",  # Linux
    "/System/Library/Fonts/Helvetica.ttc",  # macOS
]
SYSTEM_BOLD_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
]


class BadgeContent(t.NamedTuple):
    full_name: str
    company: str
    pass_id: str


def _load_font(paths: t.Iterable[str], size: int) -> Font:
    for path in paths:
        if not path:
            continue
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


class BadgeRenderer:
    """Paints badge pages. Instances hold configuration and a font cache only."""

    def __init__(
        self,
        *,
        dpi: int = 216,
        label: str = "VISITOR",
        header_image: str = "",
        header_caption: str = "YOU ARE INVITED",
        header_subcaption: str = "",
        font_path: str = "",
        bold_font_path: str = "",
    ) -> None:
        self.dpi = dpi
        self.scale = dpi / 72
        self.label = label
        self.header_image = header_image
        self.header_caption = header_caption
        self.header_subcaption = header_subcaption
        self.font_paths = [font_path, *SYSTEM_FONT_PATHS]
        self.bold_font_paths = [bold_font_path, font_path, *SYSTEM_BOLD_FONT_PATHS]
        self._fonts: dict[tuple[float, bool], Font] = {}

    @classmethod
    def from_settings(cls) -> "BadgeRenderer":
        return cls(
            dpi=settings.BADGE_DPI,
            label=settings.BADGE_LABEL,
            header_image=settings.BADGE_HEADER_IMAGE,
            header_caption=settings.BADGE_HEADER_CAPTION,
            header_subcaption=settings.BADGE_HEADER_SUBCAPTION,
            font_path=settings.BADGE_FONT_PATH,
            bold_font_path=settings.BADGE_BOLD_FONT_PATH,
        )

    def px(self, value: float) -> int:
        return round(value * self.scale)

    def font(self, size: float, bold: bool = False) -> Font:
        key = (size, bold)
        if key not in self._fonts:
            paths = self.bold_font_paths if bold else self.font_paths
            self._fonts[key] = _load_font(paths, self.px(size))
        return self._fonts[key]

    def measure(self, text: str, size: float, bold: bool = False) -> float:
        """Width of ``text`` in points at ``size``."""
        return self.font(size, bold).getlength(text) / self.scale

    def render(self, content: BadgeContent) -> bytes:
        """Render one page with a badge in every slot and return it as PDF bytes."""
        page = self.render_page(content)
        buffer = io.BytesIO()
        # RGBA pages are embedded with lossless JPEG 2000, RGB ones as lossy JPEG
        page.convert("RGBA").save(
            buffer, format="PDF", resolution=float(self.dpi), title=f"Pass {content.pass_id}"
        )
        return buffer.getvalue()

    def render_page(self, content: BadgeContent) -> Image.Image:
        """Paint the page as an RGB image."""
        page = Image.new("RGB", (self.px(layout.PAGE_WIDTH), self.px(layout.PAGE_HEIGHT)), WHITE)
        draw = ImageDraw.Draw(page)

        header = self._load_header()
        qr = encoders.qr_code_or_fallback(content.pass_id, (self.px(layout.QR_SIZE), self.px(layout.QR_SIZE)))
        barcode = encoders.code128_or_fallback(
            content.pass_id, (self.px(layout.BARCODE_WIDTH), self.px(layout.BARCODE_HEIGHT))
        )
        texts = {
            "name": content.full_name.upper(),
            "company": content.company.upper(),
            "pass_id": content.pass_id,
            "label": self.label,
        }
        for slot in layout.badge_slots():
            geometry = layout.badge_geometry(slot, self.measure, texts)
            self._draw_header(page, draw, geometry.header, header)
            self._text(draw, geometry.name, texts["name"], BLACK, bold=True)
            self._text(draw, geometry.company, texts["company"], TEXT_GRAY)
            self._paste_centered(page, barcode, geometry.barcode)
            self._paste(page, qr, geometry.qr, Image.Resampling.NEAREST)
            self._text(draw, geometry.pass_id, texts["pass_id"], BLACK)
            self._text(draw, geometry.label, texts["label"], DARK_BLUE, bold=True)
        self._draw_guides(page, draw)
        return page

    def _load_header(self) -> Image.Image | None:
        if not self.header_image:
            return None
        try:
            with Image.open(self.header_image) as img:
                return img.convert("RGB")
        except (OSError, ValueError) as e:
            logger.warning("badge_header_unavailable", path=self.header_image, error=str(e))
            return None

    def _paste(
        self, page: Image.Image, image: Image.Image, box: layout.Box, resample: Image.Resampling
    ) -> None:
        resized = image.resize((self.px(box.width), self.px(box.height)), resample)
        page.paste(resized, (self.px(box.x), self.px(box.y)))

    def _paste_centered(self, page: Image.Image, image: Image.Image, box: layout.Box) -> None:
        """Paste ``image`` unscaled, centered in ``box``."""
        left = self.px(box.x) + (self.px(box.width) - image.width) // 2
        top = self.px(box.y) + (self.px(box.height) - image.height) // 2
        page.paste(image, (left, top))

    def _text(
        self,
        draw: ImageDraw.ImageDraw,
        line: layout.TextLine,
        text: str,
        fill: Color,
        bold: bool = False,
    ) -> None:
        font = self.font(line.size, bold)
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text((self.px(line.x), self.px(line.baseline)), text, font=font, fill=fill, anchor="ls")
        else:
            # bitmap fonts have no baseline anchor
            draw.text((self.px(line.x), self.px(line.baseline - line.size)), text, font=font, fill=fill)

    def _draw_header(
        self, page: Image.Image, draw: ImageDraw.ImageDraw, box: layout.Box, header: Image.Image | None
    ) -> None:
        if header is not None:
            self._paste(page, header, box, Image.Resampling.LANCZOS)
            return
        draw.rectangle(
            [self.px(box.x), self.px(box.y), self.px(box.x + box.width), self.px(box.y + box.height)],
            fill=DARK_BLUE,
        )
        size = layout.HEADER_CAPTION_FONT_SIZE
        baseline = box.y + box.height / 2 + (0 if self.header_subcaption else size / 3)
        caption = layout.TextLine(
            layout.centered_x(box.center_x, self.measure(self.header_caption, size, True)), baseline, size
        )
        self._text(draw, caption, self.header_caption, WHITE, bold=True)
        if self.header_subcaption:
            size = layout.HEADER_SUBCAPTION_FONT_SIZE
            subcaption = layout.TextLine(
                layout.centered_x(box.center_x, self.measure(self.header_subcaption, size)), baseline + 18, size
            )
            self._text(draw, subcaption, self.header_subcaption, WHITE)

    def _draw_guides(self, page: Image.Image, draw: ImageDraw.ImageDraw) -> None:
        center_x, center_y = layout.PAGE_WIDTH / 2, layout.PAGE_HEIGHT / 2
        for start, end in layout.dashes(0, layout.PAGE_WIDTH):
            draw.line([(self.px(start), self.px(center_y)), (self.px(end), self.px(center_y))], fill=GUIDE_GRAY)
        for start, end in layout.dashes(0, layout.PAGE_HEIGHT):
            draw.line([(self.px(center_x), self.px(start)), (self.px(center_x), self.px(end))], fill=GUIDE_GRAY)

        size = layout.CAPTION_FONT_SIZE
        self._text(draw, layout.TextLine(center_x - 55, center_y - layout.GUIDE_GAP, size), "FRONT", GUIDE_GRAY)
        self._rotated_text(page, center_x + 30, center_y - layout.GUIDE_GAP - size, "BACK", 180)
        self._rotated_text(page, center_x - layout.GUIDE_GAP - size, center_y + 10, "FOLD", 90)

        arrow_y = self.px(center_y - layout.ARROW_RISE)
        tip = self.px(center_x + layout.ARROW_END)
        draw.line([(self.px(center_x + layout.ARROW_START), arrow_y), (tip, arrow_y)], fill=GUIDE_GRAY)
        head = self.px(layout.ARROW_HEAD)
        draw.line([(tip - head, arrow_y - head // 2), (tip, arrow_y)], fill=GUIDE_GRAY)
        draw.line([(tip - head, arrow_y + head // 2), (tip, arrow_y)], fill=GUIDE_GRAY)

    def _rotated_text(self, page: Image.Image, x: float, y: float, text: str, angle: int) -> None:
        """Draw ``text`` rotated counter-clockwise by ``angle`` with its box's top-left corner at x, y."""
        font = self.font(layout.CAPTION_FONT_SIZE)
        left, top, right, bottom = font.getbbox(text)
        tile = Image.new("L", (int(right - left) + 2, int(bottom - top) + 2), 0)
        ImageDraw.Draw(tile).text((-left, -top), text, font=font, fill=255)
        tile = tile.rotate(angle, expand=True)
        page.paste(Image.new("RGB", tile.size, GUIDE_GRAY), (self.px(x), self.px(y)), mask=tile)
