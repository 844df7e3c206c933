"""Per-sample color pipeline.

Each grid coordinate is normalized and pushed through four fixed stages:

1. Log decode to linear light (with exposure offset)
2. Rec.2020 linear to Rec.709 linear, clipped to [0, 1]
3. Rec.709 OETF
4. Optional creative look

Samples are independent of each other; there is no shared state.
"""

from typing import TYPE_CHECKING, Tuple, Union

from .looks import Look, apply_look
from .transforms import RGB, log_to_linear, rec2020_to_rec709, rec709_oetf

if TYPE_CHECKING:
    from ..config import LUTConfig

GridCoord = Tuple[int, int, int]


def normalize_index(index: int, size: int) -> float:
    """Map a grid index in ``[0, size - 1]`` onto ``[0, 1]``."""
    return float(index) / float(size - 1)


def process_sample(
    r: float,
    g: float,
    b: float,
    exposure_offset: float = 1.0,
    look: Union[Look, str] = Look.NONE,
) -> RGB:
    """Run a normalized input triple through all pipeline stages.

    Args:
        r, g, b: Normalized log-encoded input values
        exposure_offset: Multiplier applied during the log decode
        look: Creative look, as a ``Look`` or a look name

    Returns:
        Display-encoded (and optionally graded) triple
    """
    if not isinstance(look, Look):
        look = Look.from_name(look)

    lin_r = log_to_linear(r, exposure_offset)
    lin_g = log_to_linear(g, exposure_offset)
    lin_b = log_to_linear(b, exposure_offset)

    conv_r, conv_g, conv_b = rec2020_to_rec709(lin_r, lin_g, lin_b)

    enc_r = rec709_oetf(conv_r)
    enc_g = rec709_oetf(conv_g)
    enc_b = rec709_oetf(conv_b)

    return apply_look(look, enc_r, enc_g, enc_b)


def sample(coord: GridCoord, config: "LUTConfig") -> RGB:
    """Compute the output triple for one grid coordinate of ``config``."""
    i, j, k = coord
    size = config.size
    return process_sample(
        normalize_index(i, size),
        normalize_index(j, size),
        normalize_index(k, size),
        exposure_offset=config.exposure_offset,
        look=config.look,
    )
