"""Color pipeline for cinelut.

Example:
    >>> from cinelut.color import process_sample, Look
    >>> r, g, b = process_sample(0.5, 0.25, 0.75, exposure_offset=1.0, look=Look.TEAL_ORANGE)
"""

from cinelut.color.transforms import (
    RGB,
    REC2020_TO_REC709,
    OETF_BREAKPOINT,
    log_to_linear,
    rec2020_to_rec709,
    rec709_oetf,
)

from cinelut.color.looks import (
    Look,
    LOOKS,
    luminance,
    apply_teal_orange,
    apply_warm_vintage,
    apply_look,
)

from cinelut.color.pipeline import (
    GridCoord,
    normalize_index,
    process_sample,
    sample,
)

__all__ = [
    # Transforms
    "RGB",
    "REC2020_TO_REC709",
    "OETF_BREAKPOINT",
    "log_to_linear",
    "rec2020_to_rec709",
    "rec709_oetf",
    # Looks
    "Look",
    "LOOKS",
    "luminance",
    "apply_teal_orange",
    "apply_warm_vintage",
    "apply_look",
    # Pipeline
    "GridCoord",
    "normalize_index",
    "process_sample",
    "sample",
]
