"""Per-channel and per-pixel transforms of the log-to-display pipeline.

These are deliberately simplified approximations of an Apple Log decode, a
Rec.2020 to Rec.709 gamut conversion and the Rec.709 OETF. Constants and
operation order are fixed; changing either changes the generated tables.
"""

import math
from typing import Tuple

RGB = Tuple[float, float, float]

# Decode curve exponent applied after the exposure offset.
LOG_DECODE_EXPONENT = 1.5

# Rec.2020 linear -> Rec.709 linear (approximation).
REC2020_TO_REC709 = (
    (1.660, -0.587, -0.073),
    (-0.124, 1.132, -0.008),
    (-0.018, -0.100, 1.118),
)

# Rec.709 OETF parameters
OETF_BREAKPOINT = 0.018
OETF_LINEAR_SLOPE = 4.5
OETF_SCALE = 1.099
OETF_EXPONENT = 0.45
OETF_OFFSET = 0.099


def log_to_linear(x: float, exposure_offset: float) -> float:
    """Decode a normalized log-encoded value to linear light.

    The exposure offset scales the input before an upper clip at 1.0; the
    lower end is not clipped.

    Args:
        x: Normalized channel value, nominally in [0, 1]
        exposure_offset: Exposure multiplier

    Returns:
        ``min(x * exposure_offset, 1) ** 1.5``

    Raises:
        ValueError: If ``x * exposure_offset`` is negative
    """
    v = min(x * exposure_offset, 1.0)
    return math.pow(v, LOG_DECODE_EXPONENT)


def rec2020_to_rec709(r: float, g: float, b: float) -> RGB:
    """Convert linear Rec.2020 to linear Rec.709 and hard-clip to [0, 1].

    All three outputs are computed from the unclipped inputs before any
    channel is clipped.
    """
    (m00, m01, m02), (m10, m11, m12), (m20, m21, m22) = REC2020_TO_REC709

    r709 = m00 * r + m01 * g + m02 * b
    g709 = m10 * r + m11 * g + m12 * b
    b709 = m20 * r + m21 * g + m22 * b

    return (
        _clip_unit(r709),
        _clip_unit(g709),
        _clip_unit(b709),
    )


def rec709_oetf(linear: float) -> float:
    """Apply the Rec.709 opto-electronic transfer function to one channel.

    No clipping is performed here.
    """
    if linear < OETF_BREAKPOINT:
        return OETF_LINEAR_SLOPE * linear
    return OETF_SCALE * math.pow(linear, OETF_EXPONENT) - OETF_OFFSET


def _clip_unit(value: float) -> float:
    if value < 0:
        value = 0.0
    if value > 1:
        value = 1.0
    return value
