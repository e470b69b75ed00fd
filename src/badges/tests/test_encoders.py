from unittest import mock
from unittest.mock import MagicMock

import zxingcpp
from barcode import Code128
from PIL import Image

from badges import encoders


def test_qr_code_is_square() -> None:
    image = encoders.qr_code("PASS-1001")

    assert image.mode == "RGB"
    assert image.width == image.height


def test_code128_is_wider_than_tall() -> None:
    image = encoders.code128("PASS-1001", (330, 60))

    assert image.mode == "RGB"
    assert image.width > image.height


def test_code128_modules_are_whole_pixels() -> None:
    modules = len(Code128("PASS-1001").build()[0]) + 2 * encoders.QUIET_ZONE_MODULES

    image = encoders.code128("PASS-1001", (330, 60))

    assert image.size == (modules * (330 // modules), 60)
    assert [(r.format, r.text) for r in zxingcpp.read_barcodes(image.convert("L"))] == [
        (zxingcpp.BarcodeFormat.Code128, "PASS-1001")
    ]


def test_code128_is_squeezed_into_a_narrow_box() -> None:
    image = encoders.code128("PASS-1001", (50, 20))

    assert image.size == (50, 20)


def test_fallback_image_has_requested_size() -> None:
    image = encoders.fallback_image((200, 40))

    assert image.size == (200, 40)
    # the border is drawn in red
    assert image.getpixel((0, 0)) == (200, 0, 0)


@mock.patch("badges.encoders.code128", side_effect=ValueError("unsupported character"))
def test_code128_failure_returns_fallback(mock_code128: MagicMock) -> None:
    image = encoders.code128_or_fallback("PASS-1001", (200, 40))

    assert isinstance(image, Image.Image)
    assert image.size == (200, 40)


@mock.patch("badges.encoders.qr_code", side_effect=RuntimeError("data too long"))
def test_qr_failure_returns_fallback(mock_qr: MagicMock) -> None:
    image = encoders.qr_code_or_fallback("PASS-1001", (100, 100))

    assert image.size == (100, 100)
