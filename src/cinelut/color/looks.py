"""Creative grades applied after the display transfer function."""

from enum import Enum
from typing import Callable, Dict, Optional

from .transforms import RGB

# Rec.709 luma weights used to split shadows from highlights.
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

TEAL_ORANGE_PIVOT = 0.5

# Blend weights are kept as literals; 1.0 - 0.3 is not exactly 0.7.
TEAL_ORANGE_KEEP = 0.7
TEAL_ORANGE_BLEND = 0.3
WARM_VINTAGE_KEEP = 0.9
WARM_VINTAGE_FADE = 0.1
MID_GRAY = 0.5


class Look(Enum):
    """Named creative looks."""
    NONE = "none"
    TEAL_ORANGE = "tealorange"
    WARM_VINTAGE = "warmvintage"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Look":
        """Resolve a look name case-insensitively.

        Unrecognized or empty names resolve to ``Look.NONE``.
        """
        if not name:
            return cls.NONE
        try:
            return cls(name.lower())
        except ValueError:
            return cls.NONE


def luminance(r: float, g: float, b: float) -> float:
    """Rec.709 relative luminance of an encoded triple."""
    wr, wg, wb = LUMA_WEIGHTS
    return wr * r + wg * g + wb * b


def apply_teal_orange(r: float, g: float, b: float) -> RGB:
    """Teal shadows, orange highlights.

    Red and blue are scaled according to which side of the luminance pivot
    the sample falls on, then blended 70/30 with the ungraded value. Only the
    upper bound is clamped.
    """
    orig_r, orig_g, orig_b = r, g, b

    if luminance(r, g, b) < TEAL_ORANGE_PIVOT:
        r_new = r * 0.95
        b_new = b * 1.1
    else:
        r_new = r * 1.1
        b_new = b * 0.95

    r = TEAL_ORANGE_KEEP * orig_r + TEAL_ORANGE_BLEND * r_new
    # Green blends with itself; not always bit-equal to orig_g
    g = TEAL_ORANGE_KEEP * orig_g + TEAL_ORANGE_BLEND * orig_g
    b = TEAL_ORANGE_KEEP * orig_b + TEAL_ORANGE_BLEND * b_new

    return min(r, 1.0), min(g, 1.0), min(b, 1.0)


def apply_warm_vintage(r: float, g: float, b: float) -> RGB:
    """Warm tint with faded contrast toward mid-gray.

    Only the upper bound is clamped.
    """
    r = r * 1.05
    b = b * 0.95

    lift = WARM_VINTAGE_FADE * MID_GRAY
    r = WARM_VINTAGE_KEEP * r + lift
    g = WARM_VINTAGE_KEEP * g + lift
    b = WARM_VINTAGE_KEEP * b + lift

    return min(r, 1.0), min(g, 1.0), min(b, 1.0)


LOOKS: Dict[Look, Callable[[float, float, float], RGB]] = {
    Look.TEAL_ORANGE: apply_teal_orange,
    Look.WARM_VINTAGE: apply_warm_vintage,
}


def apply_look(look: Look, r: float, g: float, b: float) -> RGB:
    """Apply ``look`` to an encoded triple. ``Look.NONE`` passes through."""
    grade = LOOKS.get(look)
    if grade is None:
        return r, g, b
    return grade(r, g, b)
