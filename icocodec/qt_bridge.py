"""
QImage <-> RasterImage conversion for Qt hosts (requires the ``qt`` extra).
"""

import numpy as np
from PySide6 import QtGui

from .raster import RasterImage


def from_qimage(qimage: QtGui.QImage) -> RasterImage:
    # Format_RGBA8888 is byte-ordered R,G,B,A on every platform
    qimage = qimage.convertToFormat(QtGui.QImage.Format.Format_RGBA8888)
    width = qimage.width()
    height = qimage.height()
    stride = qimage.bytesPerLine()
    arr = np.frombuffer(bytes(qimage.constBits()), dtype=np.uint8)
    arr = arr.reshape((height, stride))[:, :width * 4].reshape((height, width, 4))
    return RasterImage(arr.copy())


def to_qimage(image: RasterImage) -> QtGui.QImage:
    data = image.tobytes()
    qimage = QtGui.QImage(data, image.width, image.height, image.width * 4,
                          QtGui.QImage.Format.Format_RGBA8888)
    # detach from the Python buffer before it goes away
    return qimage.copy()
