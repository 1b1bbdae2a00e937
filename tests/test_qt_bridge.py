import pytest

QtGui = pytest.importorskip("PySide6.QtGui")

from conftest import gradient_image  # noqa: E402
from icocodec.qt_bridge import from_qimage, to_qimage  # noqa: E402


def test_round_trip_through_qimage():
    image = gradient_image(12, 7)
    image.pixels[0, 0] = (200, 100, 50, 255)

    qimage = to_qimage(image)
    assert (qimage.width(), qimage.height()) == (12, 7)
    color = qimage.pixelColor(0, 0)
    assert (color.red(), color.green(), color.blue(), color.alpha()) == (200, 100, 50, 255)

    assert from_qimage(qimage) == image


def test_from_qimage_converts_other_formats():
    qimage = QtGui.QImage(3, 3, QtGui.QImage.Format.Format_RGB32)
    qimage.fill(QtGui.QColor(10, 20, 30))

    image = from_qimage(qimage)
    assert image.size == (3, 3)
    assert image.pixel(2, 2) == (10, 20, 30, 255)
