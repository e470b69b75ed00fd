"""Machine-readable encodings of a pass id.

Both encoders return Pillow images. When an encoder fails, a marked placeholder of the
same size is returned instead so that a badge can always be printed.
"""

import qrcode
import structlog
from barcode import Code128
from PIL import Image, ImageDraw

logger = structlog.get_logger(__name__)

FALLBACK_CAPTION = "BARCODE UNAVAILABLE"
# blank modules required on each side of a Code 128 symbol
QUIET_ZONE_MODULES = 10


def fallback_image(size: tuple[int, int], caption: str = FALLBACK_CAPTION) -> Image.Image:
    """A crossed-out light gray box with a caption, used in place of a code that could not be drawn."""
    img = Image.new("RGB", size, (235, 235, 235))
    draw = ImageDraw.Draw(img)
    width, height = size
    draw.rectangle([0, 0, width - 1, height - 1], outline=(200, 0, 0), width=max(1, min(size) // 40))
    draw.line([0, 0, width - 1, height - 1], fill=(200, 0, 0))
    draw.line([0, height - 1, width - 1, 0], fill=(200, 0, 0))
    bbox = draw.textbbox((0, 0), caption)
    draw.text(
        ((width - (bbox[2] - bbox[0])) // 2, (height - (bbox[3] - bbox[1])) // 2),
        caption,
        fill=(200, 0, 0),
    )
    return img


def qr_code(data: str) -> Image.Image:
    """Encode ``data`` as a QR code."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")


def code128(data: str, size: tuple[int, int]) -> Image.Image:
    """Encode ``data`` as a Code 128 linear barcode, without the human-readable line.

    Bars are drawn on a whole-pixel grid: every module is the same number of pixels wide,
    the widest that fits ``size``, with a quiet zone on both sides. The image is never
    wider than ``size`` and exactly as tall.
    """
    pattern = Code128(data).build()[0]
    modules = len(pattern) + 2 * QUIET_ZONE_MODULES
    width, height = size
    module_width = max(1, width // modules)
    img = Image.new("RGB", (modules * module_width, height), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    for index, bit in enumerate(pattern):
        if bit == "1":
            left = (QUIET_ZONE_MODULES + index) * module_width
            draw.rectangle([left, 0, left + module_width - 1, height - 1], fill=(0, 0, 0))
    if img.width > width:
        # too narrow even at one pixel per module
        img = img.resize((width, height), Image.Resampling.NEAREST)
    return img


def qr_code_or_fallback(data: str, size: tuple[int, int]) -> Image.Image:
    try:
        return qr_code(data)
    except Exception as e:
        logger.warning("qr_code_encoding_failed", data=data, error=str(e))
        return fallback_image(size, caption="QR UNAVAILABLE")


def code128_or_fallback(data: str, size: tuple[int, int]) -> Image.Image:
    try:
        return code128(data, size)
    except Exception as e:
        logger.warning("barcode_encoding_failed", data=data, error=str(e))
        return fallback_image(size)
