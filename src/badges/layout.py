"""Badge geometry in PDF points, origin at the top-left corner of the page.

The page is an A4 sheet split into quadrants by a horizontal cut line and a vertical
fold line. Each badge instance occupies one quadrant; everything inside a badge is
positioned relative to its quadrant.
"""

import typing as t

PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89

# quadrants (column, row) that receive a badge: front and back of one foldable pass
BADGE_SLOTS: tuple[tuple[int, int], ...] = ((0, 0), (1, 0))

PADDING = 10
HEADER_HEIGHT = 70

NAME_FONT_SIZE = 18
NAME_BASELINE = 130
COMPANY_FONT_SIZE = 14
COMPANY_BASELINE = 155

CODES_BLOCK_WIDTH = 220
BARCODE_WIDTH = 110
BARCODE_HEIGHT = 20
BARCODE_TOP = 230
QR_SIZE = 100
QR_TOP = 195
QR_OFFSET = 120
PASS_ID_FONT_SIZE = 10
PASS_ID_BASELINE = 265

LABEL_FONT_SIZE = 28
LABEL_BOTTOM_OFFSET = 40

CAPTION_FONT_SIZE = 10
HEADER_CAPTION_FONT_SIZE = 16
HEADER_SUBCAPTION_FONT_SIZE = 10

# lines drawn with the bold face
BOLD_LINES = frozenset({"name", "label"})

DASH_LENGTH = 5
GUIDE_GAP = 5
ARROW_START = 10
ARROW_END = 25
ARROW_RISE = 15
ARROW_HEAD = 5


class Box(t.NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2


class TextLine(t.NamedTuple):
    x: float
    baseline: float
    size: float


class BadgeGeometry(t.NamedTuple):
    header: Box
    name: TextLine
    company: TextLine
    barcode: Box
    qr: Box
    pass_id: TextLine
    label: TextLine


def centered_x(anchor_x: float, text_width: float) -> float:
    """Left edge of a run of ``text_width`` centered on ``anchor_x``."""
    return anchor_x - text_width / 2


def slot_box(column: int, row: int) -> Box:
    """The quadrant at ``column``/``row`` (0 or 1 each)."""
    width, height = PAGE_WIDTH / 2, PAGE_HEIGHT / 2
    return Box(column * width, row * height, width, height)


def badge_slots() -> list[Box]:
    return [slot_box(column, row) for column, row in BADGE_SLOTS]


def badge_geometry(
    slot: Box, measure: t.Callable[[str, float, bool], float], texts: dict[str, str]
) -> BadgeGeometry:
    """Place every element of one badge inside ``slot``.

    Args:
        slot: The quadrant the badge occupies.
        measure: Returns the width in points of a string at a font size, bold or not.
        texts: The ``name``, ``company``, ``pass_id`` and ``label`` strings as they will be drawn.
    """
    center = slot.center_x
    codes_left = slot.x + slot.width / 2 - CODES_BLOCK_WIDTH / 2
    barcode = Box(codes_left, slot.y + BARCODE_TOP, BARCODE_WIDTH, BARCODE_HEIGHT)

    def line(key: str, size: float, anchor_x: float, baseline: float) -> TextLine:
        width = measure(texts[key], size, key in BOLD_LINES)
        return TextLine(centered_x(anchor_x, width), slot.y + baseline, size)

    return BadgeGeometry(
        header=Box(slot.x + PADDING, slot.y + PADDING, slot.width - 2 * PADDING, HEADER_HEIGHT),
        name=line("name", NAME_FONT_SIZE, center, NAME_BASELINE),
        company=line("company", COMPANY_FONT_SIZE, center, COMPANY_BASELINE),
        barcode=barcode,
        qr=Box(codes_left + QR_OFFSET, slot.y + QR_TOP, QR_SIZE, QR_SIZE),
        pass_id=line("pass_id", PASS_ID_FONT_SIZE, barcode.center_x, PASS_ID_BASELINE),
        label=line("label", LABEL_FONT_SIZE, center, slot.height - LABEL_BOTTOM_OFFSET),
    )


def dashes(start: float, end: float) -> t.Iterator[tuple[float, float]]:
    """Segments of a dashed guide line between ``start`` and ``end``."""
    position = start
    while position < end:
        yield position, min(position + DASH_LENGTH, end)
        position += DASH_LENGTH + GUIDE_GAP
