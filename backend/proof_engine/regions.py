"""Rectangular region helpers for the crop-edit-recomposite pattern."""

from dataclasses import dataclass

from PIL import Image

from .exceptions import InvalidTransformation


@dataclass(frozen=True)
class Box:
    """Half-open pixel box ``[left, right) x [top, bottom)``."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def offset(self) -> tuple[int, int]:
        return (self.left, self.top)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


def clip_region(
    size: tuple[int, int],
    x: int,
    y: int,
    width: int,
    height: int,
    error: type[InvalidTransformation] = InvalidTransformation,
) -> Box:
    """Intersect the requested rectangle with an image of ``size``.

    Args:
        size: ``(width, height)`` of the image.
        x, y, width, height: Requested region.
        error: Exception class raised when the region is unusable.

    Returns:
        The clipped :class:`Box`, never empty.

    Raises:
        InvalidTransformation: Non-positive requested size, or the region lies
            entirely outside the image.
    """
    if width <= 0 or height <= 0:
        raise error(f"Region has non-positive size {width}x{height}")

    image_width, image_height = size
    box = Box(
        left=max(x, 0),
        top=max(y, 0),
        right=min(x + width, image_width),
        bottom=min(y + height, image_height),
    )
    if box.width <= 0 or box.height <= 0:
        raise error(
            f"Region ({x}, {y}, {width}, {height}) lies outside "
            f"{image_width}x{image_height} image"
        )
    return box


def extract(image: Image.Image, box: Box) -> Image.Image:
    """Copy the sub-buffer under ``box``."""
    return image.crop(box.as_tuple())


def composite(base: Image.Image, patch: Image.Image, box: Box) -> Image.Image:
    """Return a copy of ``base`` with ``patch`` pasted at ``box.offset``.

    ``base`` is never mutated.
    """
    if patch.size != (box.width, box.height):
        raise ValueError(
            f"Patch size {patch.size} does not match region {box.width}x{box.height}"
        )
    result = base.copy()
    result.paste(patch, box.offset)
    return result
