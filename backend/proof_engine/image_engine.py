"""Deterministic image transformation engine.

Applies an ordered edit chain to a decoded raster and re-encodes the result
with a fixed, documented encoder configuration. Given the same input bytes,
the same chain and the same Pillow build, the output bytes are identical.
"""

import io
import logging
import math
from dataclasses import dataclass
from typing import Callable

import numpy as np
from PIL import Image, ImageFilter, UnidentifiedImageError

from .exceptions import InvalidTransformation, OutOfBounds, SizeExceeded, UnsupportedFormat
from .regions import Box, clip_region, composite, extract
from .transformations import (
    BaseTransformation,
    BlurRegion,
    Brightness,
    ColorAdjust,
    Contrast,
    Crop,
    PixelateRegion,
    RedactRegion,
    Resize,
    Rotate,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_BYTES = 100 * 1024 * 1024  # 100MB
DEFAULT_MAX_WIDTH = 7680  # 8K
DEFAULT_MAX_HEIGHT = 4320
DEFAULT_CHUNK_ROWS = 256

REDACT_FILL = (0, 0, 0)
CONTRAST_PIVOT = 128.0

_RESAMPLING = {
    "nearest": Image.Resampling.NEAREST,
    "linear": Image.Resampling.BILINEAR,
    "cubic": Image.Resampling.BICUBIC,
    "average": Image.Resampling.BOX,
}


@dataclass(frozen=True)
class OutputEncoding:
    """Fixed re-encode step applied after the last transformation.

    JPEG output uses the given quality with 4:4:4 chroma subsampling and no
    optimize/progressive passes; PNG output is lossless.
    """

    format: str = "JPEG"
    quality: int = 95

    def __post_init__(self) -> None:
        if self.format not in ("JPEG", "PNG"):
            raise ValueError(f"Unsupported output format: {self.format}")
        if not 1 <= self.quality <= 100:
            raise ValueError(f"JPEG quality must be in 1..100, got {self.quality}")

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self.format == "JPEG" else "image/png"

    @property
    def extension(self) -> str:
        return "jpg" if self.format == "JPEG" else "png"

    def save_options(self) -> dict:
        if self.format == "JPEG":
            return {
                "format": "JPEG",
                "quality": self.quality,
                "subsampling": 0,
                "optimize": False,
                "progressive": False,
            }
        return {"format": "PNG", "optimize": False, "compress_level": 6}


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    format: str
    size_bytes: int

    @property
    def megapixels(self) -> int:
        return round(self.width * self.height / 1_000_000)


def rotated_size(size: tuple[int, int], angle: float) -> tuple[int, int]:
    """Canvas size of an expanding clockwise rotation, computed the way Pillow does."""
    width, height = size
    radians = -math.radians(-angle % 360.0)
    a, b = round(math.cos(radians), 15), round(math.sin(radians), 15)
    d, e = -b, a
    cx, cy = width / 2, height / 2
    c = a * -cx + b * -cy + cx
    f = d * -cx + e * -cy + cy
    corners = [(0, 0), (width, 0), (width, height), (0, height)]
    xs = [a * x + b * y + c for x, y in corners]
    ys = [d * x + e * y + f for x, y in corners]
    return (
        math.ceil(max(xs)) - math.floor(min(xs)),
        math.ceil(max(ys)) - math.floor(min(ys)),
    )


class TransformationEngine:
    """Applies edit chains to encoded images."""

    def __init__(
        self,
        encoding: OutputEncoding | None = None,
        max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES,
        max_width: int = DEFAULT_MAX_WIDTH,
        max_height: int = DEFAULT_MAX_HEIGHT,
        chunk_rows: int = DEFAULT_CHUNK_ROWS,
    ) -> None:
        if chunk_rows < 1:
            raise ValueError("chunk_rows must be positive")
        self.encoding = encoding or OutputEncoding()
        self.max_input_bytes = max_input_bytes
        self.max_width = max_width
        self.max_height = max_height
        self.chunk_rows = chunk_rows
        self._handlers: dict[type, Callable[[Image.Image, BaseTransformation], Image.Image]] = {
            Crop: self._crop,
            Resize: self._resize,
            Rotate: self._rotate,
            BlurRegion: self._blur_region,
            RedactRegion: self._redact_region,
            PixelateRegion: self._pixelate_region,
            ColorAdjust: self._color_adjust,
            Brightness: self._brightness,
            Contrast: self._contrast,
        }

    def apply(self, image_bytes: bytes, transformations: list[BaseTransformation]) -> bytes:
        """Decode, apply ``transformations`` in order, and re-encode.

        Raises:
            SizeExceeded: Input bytes or dimensions above the configured ceiling.
            UnsupportedFormat: Input cannot be decoded.
            InvalidTransformation: A transformation's geometry or parameters are
                unusable for the image it receives.
        """
        image = self.decode(image_bytes)
        image = self.apply_to_image(image, transformations)
        return self.encode(image)

    def apply_to_image(
        self, image: Image.Image, transformations: list[BaseTransformation]
    ) -> Image.Image:
        for index, transformation in enumerate(transformations):
            handler = self._handlers.get(type(transformation))
            if handler is None:
                raise InvalidTransformation(
                    f"Unsupported transformation at index {index}: {transformation!r}"
                )
            for name, value in transformation.params().items():
                if isinstance(value, float) and not math.isfinite(value):
                    raise InvalidTransformation(
                        f"{transformation.op}.{name} at index {index} is not finite: {value}"
                    )
            image = handler(image, transformation)
            logger.debug(f"Applied {transformation.op} -> {image.size[0]}x{image.size[1]}")
        return image

    def decode(self, image_bytes: bytes) -> Image.Image:
        """Decode an image buffer into an RGB raster (alpha is dropped)."""
        if len(image_bytes) > self.max_input_bytes:
            raise SizeExceeded(
                f"Image is {len(image_bytes)} bytes, limit is {self.max_input_bytes}"
            )
        try:
            image = Image.open(io.BytesIO(image_bytes))
            self._check_dimensions(image.size)
            image.load()
        except Image.DecompressionBombError as e:
            raise SizeExceeded(str(e)) from e
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise UnsupportedFormat(f"Failed to decode image: {e}") from e
        if image.mode != "RGB":
            image = image.convert("RGB")
        return image

    def encode(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, **self.encoding.save_options())
        return buffer.getvalue()

    def inspect(self, image_bytes: bytes) -> ImageInfo:
        """Read dimensions and container format without applying anything."""
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                width, height = image.size
                image_format = (image.format or "unknown").lower()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise UnsupportedFormat(f"Failed to decode image: {e}") from e
        return ImageInfo(width=width, height=height, format=image_format, size_bytes=len(image_bytes))

    def _check_dimensions(self, size: tuple[int, int]) -> None:
        width, height = size
        if width > self.max_width or height > self.max_height:
            raise SizeExceeded(
                f"Image is {width}x{height}, limit is {self.max_width}x{self.max_height}"
            )

    # Geometry

    def _crop(self, image: Image.Image, t: Crop) -> Image.Image:
        box = clip_region(image.size, t.x, t.y, t.width, t.height, error=OutOfBounds)
        return image.crop(box.as_tuple())

    def _resize(self, image: Image.Image, t: Resize) -> Image.Image:
        if t.width <= 0 or t.height <= 0:
            raise InvalidTransformation(f"Resize target {t.width}x{t.height} is not positive")
        self._check_dimensions((t.width, t.height))
        resample = _RESAMPLING.get(t.interpolation)
        if resample is None:
            logger.warning(f"Unknown interpolation '{t.interpolation}', falling back to cubic")
            resample = Image.Resampling.BICUBIC
        return image.resize((t.width, t.height), resample=resample)

    def _rotate(self, image: Image.Image, t: Rotate) -> Image.Image:
        angle = t.angle % 360.0
        if angle == 0:
            return image.copy()
        self._check_dimensions(rotated_size(image.size, angle))
        # PIL rotates counter-clockwise; multiples of 90 are exact transposes.
        return image.rotate(
            -angle,
            resample=Image.Resampling.BICUBIC,
            expand=True,
            fillcolor=REDACT_FILL,
        )

    # Regions

    def _region(self, image: Image.Image, t) -> Box:
        return clip_region(image.size, t.x, t.y, t.width, t.height)

    def _blur_region(self, image: Image.Image, t: BlurRegion) -> Image.Image:
        box = self._region(image, t)
        if t.radius <= 0:
            return image
        # Larger radii blur the patch no further; Pillow crashes on huge ones.
        radius = min(t.radius, float(max(box.width, box.height)))
        patch = extract(image, box).filter(ImageFilter.GaussianBlur(radius))
        return composite(image, patch, box)

    def _redact_region(self, image: Image.Image, t: RedactRegion) -> Image.Image:
        box = self._region(image, t)
        patch = Image.new(image.mode, (box.width, box.height), REDACT_FILL)
        return composite(image, patch, box)

    def _pixelate_region(self, image: Image.Image, t: PixelateRegion) -> Image.Image:
        if t.block_size < 1:
            raise InvalidTransformation(f"Block size must be at least 1, got {t.block_size}")
        box = self._region(image, t)
        small_size = (-(-box.width // t.block_size), -(-box.height // t.block_size))
        small = extract(image, box).resize(small_size, resample=Image.Resampling.NEAREST)
        patch = small.resize((box.width, box.height), resample=Image.Resampling.NEAREST)
        return composite(image, patch, box)

    # Pointwise

    def _pointwise(
        self,
        image: Image.Image,
        fn: Callable[[np.ndarray], np.ndarray],
        mode: str = "RGB",
    ) -> Image.Image:
        """Apply ``fn`` to float64 row bands and clamp into 0..255.

        Bands are independent, so ``chunk_rows`` never affects the output.
        """
        source = image if image.mode == mode else image.convert(mode)
        width, height = source.size
        pixels = np.frombuffer(source.tobytes(), dtype=np.uint8).reshape(height, width, 3)
        out = np.empty_like(pixels)
        for start in range(0, pixels.shape[0], self.chunk_rows):
            stop = start + self.chunk_rows
            band = fn(pixels[start:stop].astype(np.float64))
            out[start:stop] = np.clip(np.rint(band), 0, 255).astype(np.uint8)
        result = Image.frombytes(mode, source.size, out.tobytes())
        return result if mode == "RGB" else result.convert("RGB")

    def _color_adjust(self, image: Image.Image, t: ColorAdjust) -> Image.Image:
        # Pillow stores hue on a 0..255 scale.
        shift = (t.hue % 360.0) / 360.0 * 256.0

        def adjust(band: np.ndarray) -> np.ndarray:
            band[..., 0] = np.mod(np.rint(band[..., 0] + shift), 256.0)
            band[..., 1] *= t.saturation
            band[..., 2] *= t.value
            return band

        return self._pointwise(image, adjust, mode="HSV")

    def _brightness(self, image: Image.Image, t: Brightness) -> Image.Image:
        return self._pointwise(image, lambda band: band + t.offset)

    def _contrast(self, image: Image.Image, t: Contrast) -> Image.Image:
        return self._pointwise(
            image, lambda band: CONTRAST_PIVOT + t.factor * (band - CONTRAST_PIVOT)
        )
