"""
Shared validation helpers used by the upload rules.
"""

import math
from typing import Any, Iterable, List, Optional, Tuple
from PIL import Image, UnidentifiedImageError

from utils.error_handlers import ConfigurationError, ValidationError

# Size unit names mapped to powers of 1024
SIZE_UNITS = {
    '': 0, 'bytes': 0, 'b': 0,
    'kb': 1, 'kilobytes': 1,
    'mb': 2, 'megabytes': 2,
    'gb': 3, 'gigabytes': 3,
    'tb': 4, 'terabyte': 4,
    'pb': 5, 'petabyte': 5,
}


def is_in_range(value: Any, lower: Optional[float] = None, upper: Optional[float] = None) -> bool:
    """
    Check that a numeric value lies within an inclusive range.

    Either bound may be omitted. Non-numeric values are never in range.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def is_in_list(value: Any, items: Iterable[Any], strict: bool = True) -> bool:
    """
    Check list membership.

    Strict mode requires an exact match. Loose mode compares the string
    forms of both sides case-insensitively.
    """
    if strict:
        return any(value == item and type(value) is type(item) for item in items)
    needle = str(value).lower()
    return any(needle == str(item).lower() for item in items)


def size_unit_power(unit: Any) -> int:
    """
    Return the power of 1024 for a size unit name or abbreviation.

    Raises:
        ConfigurationError: If the unit is unknown
    """
    name = '' if unit is None else str(unit).strip().lower()
    if not is_in_list(name, SIZE_UNITS.keys()):
        raise ConfigurationError(
            f"Invalid unit `{name}` for size.",
            details={"unit": name, "allowed": sorted(SIZE_UNITS)}
        )
    return SIZE_UNITS[name]


def _round_half_up(number: float) -> float:
    # Half away from zero, unlike the builtin round(); infinities stay open
    if math.isinf(number):
        return number
    return int(math.copysign(math.floor(abs(number) + 0.5), number))


def parse_size_range(declared: List[Any]) -> Tuple[float, float]:
    """
    Turn a ``[lower, upper, unit]`` declaration into a byte range.

    An infinite bound leaves that side of the range open.

    Args:
        declared: Lower bound, upper bound and a trailing unit name

    Returns:
        Tuple of (lower, upper) in bytes, rounded to whole bytes

    Raises:
        ConfigurationError: If the bounds or the unit are malformed
    """
    bounds = list(declared or [])
    unit = bounds.pop() if bounds else ''

    if len(bounds) != 2:
        raise ConfigurationError(
            "You must specify an upper and lower bound for `in`.",
            details={"in": list(declared or [])}
        )

    power = size_unit_power(unit)

    try:
        lower_bound, upper_bound = (float(bound) for bound in bounds)
    except (TypeError, ValueError):
        raise ConfigurationError(
            "Size bounds in `in` must be numeric.",
            details={"in": list(declared)}
        )

    if math.isnan(lower_bound) or math.isnan(upper_bound):
        raise ConfigurationError(
            "Size bounds in `in` must be numbers, not NaN.",
            details={"in": [str(bound) for bound in declared]}
        )

    # Float multiplication saturates to inf rather than overflowing
    multiplier = float(1024 ** power)
    return _round_half_up(lower_bound * multiplier), _round_half_up(upper_bound * multiplier)


def read_image_size(image_path: str) -> Tuple[int, int]:
    """
    Read the pixel dimensions of an image file.

    Only the header is decoded.

    Args:
        image_path: Path to the image file

    Returns:
        Tuple of (width, height)

    Raises:
        ValidationError: If the file is missing or not a readable image
    """
    try:
        with Image.open(image_path) as img:
            return img.size
    except UnidentifiedImageError:
        raise ValidationError(
            "File is not a valid image or is corrupted",
            code="INVALID_IMAGE",
            details={"path": image_path}
        )
    except Exception as e:
        # Includes DecompressionBombError for oversized headers
        raise ValidationError(
            f"Could not read image: {str(e)}",
            code="INVALID_IMAGE",
            details={"path": image_path, "error": str(e)}
        )
