# site_qa/diagnostics/layout_diff.py
"""
Pixel comparison of two screenshots of the same page taken apart in time.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageChops, ImageOps

__all__ = ("LayoutDiff", "DimensionMismatch", "compare_screenshots")

_DIFF_COLOR: Tuple[int, int, int] = (255, 0, 0)


class DimensionMismatch(ValueError):
    """The two screenshots have different sizes and cannot be compared."""

    def __init__(self, before: Tuple[int, int], after: Tuple[int, int]) -> None:
        self.before = before
        self.after = after
        super().__init__(
            f"screenshot size mismatch: {before[0]}x{before[1]} vs {after[0]}x{after[1]}"
        )


@dataclass(slots=True)
class LayoutDiff:
    changed_pixels: int
    total_pixels: int
    diff_png: bytes

    @property
    def ratio(self) -> float:
        return self.changed_pixels / self.total_pixels if self.total_pixels else 0.0


def _decode(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as img:
        return img.convert("RGB")


def compare_screenshots(before: bytes, after: bytes, threshold: float = 0.1) -> LayoutDiff:
    """Сравнивает два PNG-скриншота и считает долю изменившихся пикселей.

    Расстояние пикселя — максимальная разница по каналам, нормированная в 0..1;
    пиксели с расстоянием не выше *threshold* (шум сглаживания) не считаются.
    Diff-картинка: блеклая серая копия первого снимка, изменения — красным.

    Raises:
        DimensionMismatch: снимки разного размера.
    """
    img1 = _decode(before)
    img2 = _decode(after)
    if img1.size != img2.size:
        raise DimensionMismatch(img1.size, img2.size)

    width, height = img1.size
    r, g, b = ImageChops.difference(img1, img2).split()
    distance = ImageChops.lighter(ImageChops.lighter(r, g), b)
    cutoff = int(threshold * 255)
    mask = distance.point(lambda v: 255 if v > cutoff else 0)
    changed = mask.histogram()[255]

    faded = Image.blend(
        ImageOps.grayscale(img1).convert("RGB"), Image.new("RGB", img1.size, "white"), 0.9
    )
    diff = Image.composite(Image.new("RGB", img1.size, _DIFF_COLOR), faded, mask)
    buf = io.BytesIO()
    diff.save(buf, format="PNG")
    return LayoutDiff(changed_pixels=changed, total_pixels=width * height, diff_png=buf.getvalue())
