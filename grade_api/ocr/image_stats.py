from io import BytesIO

import numpy as np
from PIL import Image, ImageFile, UnidentifiedImageError

from ..scoring.models import ChannelStats, PixelStatistics
from .schema import InvalidImageError

ImageFile.LOAD_TRUNCATED_IMAGES = True


def load_pil(image_bytes: bytes) -> Image.Image:
    try:
        im = Image.open(BytesIO(image_bytes))
        im.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidImageError("Invalid image bytes") from e
    return im.convert("RGB")


def pixel_statistics(pil_rgb: Image.Image) -> PixelStatistics:
    """Per-channel mean / population stdev / min / max over the RGB bands."""
    arr = np.asarray(pil_rgb.convert("RGB"), dtype=np.float64)
    width, height = pil_rgb.size
    if arr.size == 0:
        empty = ChannelStats(mean=0.0, stdev=0.0, min=0.0, max=0.0)
        return PixelStatistics(channels=(empty, empty, empty), width=width, height=height)

    channels = []
    for c in range(3):
        band = arr[:, :, c]
        channels.append(
            ChannelStats(
                mean=float(band.mean()),
                stdev=float(band.std()),
                min=float(band.min()),
                max=float(band.max()),
            )
        )
    return PixelStatistics(channels=tuple(channels), width=width, height=height)
