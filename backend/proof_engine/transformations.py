"""Typed image transformation records.

Each operation is a frozen pydantic model tagged by ``op``. A list of them is
an ordered edit chain; the order is part of what gets committed, so it is
preserved exactly through (de)serialization.
"""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .exceptions import InvalidTransformation

# Always store intensity/angle values as float so "10" and "10.0" encode alike.
# NaN and infinities are rejected by the model config.
Real = Annotated[float, AfterValidator(float)]

INTERPOLATIONS = ("nearest", "linear", "cubic", "average")
DEFAULT_INTERPOLATION = "cubic"


class BaseTransformation(BaseModel):
    """Common behaviour for all transformation records."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True, allow_inf_nan=False)

    op: str

    def params(self) -> dict[str, Any]:
        """Parameter values without the operation tag."""
        return self.model_dump(exclude={"op"})

    def canonical_encoding(self) -> bytes:
        """Deterministic byte encoding: ``<op>:<sorted compact JSON params>``."""
        payload = json.dumps(self.params(), sort_keys=True, separators=(",", ":"))
        return f"{self.op}:{payload}".encode("utf-8")


class RegionTransformation(BaseTransformation):
    """Transformation confined to the rectangle ``(x, y, width, height)``."""

    x: int
    y: int
    width: int
    height: int


class Crop(BaseTransformation):
    op: Literal["crop"] = "crop"
    x: int
    y: int
    width: int
    height: int


class Resize(BaseTransformation):
    """Resize to ``width`` x ``height``.

    ``interpolation`` is kept verbatim (it is committed as given); values
    outside :data:`INTERPOLATIONS` fall back to cubic when applied.
    """

    op: Literal["resize"] = "resize"
    width: int
    height: int
    interpolation: str = DEFAULT_INTERPOLATION


class Rotate(BaseTransformation):
    """Clockwise rotation in degrees, taken modulo 360."""

    op: Literal["rotate"] = "rotate"
    angle: Real


class BlurRegion(RegionTransformation):
    op: Literal["blur_region"] = "blur_region"
    radius: Real


class RedactRegion(RegionTransformation):
    op: Literal["redact_region"] = "redact_region"


class PixelateRegion(RegionTransformation):
    op: Literal["pixelate_region"] = "pixelate_region"
    block_size: int


class ColorAdjust(BaseTransformation):
    """HSV adjustment: hue shift in degrees, saturation/value multipliers."""

    op: Literal["color_adjust"] = "color_adjust"
    hue: Real = 0.0
    saturation: Real = 1.0
    value: Real = 1.0


class Brightness(BaseTransformation):
    """Additive brightness offset in channel units (0-255 scale)."""

    op: Literal["brightness"] = "brightness"
    offset: Real


class Contrast(BaseTransformation):
    """Contrast factor applied around mid-grey (128)."""

    op: Literal["contrast"] = "contrast"
    factor: Real


Transformation = Annotated[
    Union[
        Crop,
        Resize,
        Rotate,
        BlurRegion,
        RedactRegion,
        PixelateRegion,
        ColorAdjust,
        Brightness,
        Contrast,
    ],
    Field(discriminator="op"),
]

_chain_adapter = TypeAdapter(list[Transformation])


def parse_transformations(data: Any) -> list[BaseTransformation]:
    """Parse an edit chain from a JSON string/bytes or a list of dicts.

    Raises:
        InvalidTransformation: Unknown op tag, missing or mistyped parameter.
    """
    try:
        if isinstance(data, (str, bytes, bytearray)):
            return _chain_adapter.validate_json(data)
        return _chain_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidTransformation(f"Invalid transformation list: {e}") from e


def dump_transformations(transformations: list[BaseTransformation]) -> list[dict[str, Any]]:
    """Serialize an edit chain to plain dicts, preserving order."""
    return [t.model_dump() for t in transformations]
