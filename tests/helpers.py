"""Shared expectations and small helpers for cinelut tests."""

# Corner colors of a size-2 LUT with no look. Every corner clips back onto
# itself in the gamut conversion, so the table is an identity.
IDENTITY_CORNER_LINES = [
    "0.000000 0.000000 0.000000",
    "0.000000 0.000000 1.000000",
    "0.000000 1.000000 0.000000",
    "0.000000 1.000000 1.000000",
    "1.000000 0.000000 0.000000",
    "1.000000 0.000000 1.000000",
    "1.000000 1.000000 0.000000",
    "1.000000 1.000000 1.000000",
]

HEADER_LINE = "# Generated Cinematic LUT for Apple Log to Rec.709 conversion"


def data_lines(text):
    """Return the data lines of a generated .cube document."""
    return text.splitlines()[2:]


def parse_line(line):
    """Split a data line into floats."""
    return tuple(float(v) for v in line.split())
