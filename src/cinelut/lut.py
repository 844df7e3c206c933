"""3D LUT generation and ``.cube`` serialization.

Generated tables are written in this layout::

    # Generated Cinematic LUT for Apple Log to Rec.709 conversion
    LUT_3D_SIZE 17
    0.000000 0.000000 0.000000
    ...

Data lines follow the generator's nested order: red index outermost, blue
index innermost (blue varies fastest).
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np

from .color import RGB, GridCoord, Look, normalize_index, process_sample
from .config import LUTConfig
from .exceptions import CubeFormatError, LUTWriteError

logger = logging.getLogger(__name__)

HEADER_COMMENT = "Generated Cinematic LUT for Apple Log to Rec.709 conversion"


def iter_grid(size: int) -> Iterator[GridCoord]:
    """Yield every ``(i, j, k)`` grid coordinate, ``k`` varying fastest."""
    for i in range(size):
        for j in range(size):
            for k in range(size):
                yield i, j, k


@dataclass
class LUT:
    """A 3D look-up table.

    ``samples`` holds ``size ** 3`` output triples in generator order, so the
    sample for grid coordinate ``(i, j, k)`` lives at
    ``(i * size + j) * size + k``.
    """
    name: str = "Untitled"
    size: int = 17
    samples: List[RGB] = field(default_factory=list)

    # Domain (input range)
    domain_min: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    domain_max: Tuple[float, float, float] = (1.0, 1.0, 1.0)

    # Metadata
    title: str = ""
    comments: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    def at(self, i: int, j: int, k: int) -> RGB:
        """Return the sample stored for grid coordinate ``(i, j, k)``."""
        return self.samples[(i * self.size + j) * self.size + k]

    def to_array(self) -> np.ndarray:
        """Return the table as a ``(size, size, size, 3)`` float64 array.

        The array is indexed ``[r_index, g_index, b_index]``.
        """
        return np.asarray(self.samples, dtype=np.float64).reshape(
            self.size, self.size, self.size, 3
        )

    def value_range(self) -> Tuple[np.ndarray, np.ndarray]:
        """Per-channel minimum and maximum over all samples."""
        table = np.asarray(self.samples, dtype=np.float64).reshape(-1, 3)
        return table.min(axis=0), table.max(axis=0)

    def apply_to_rgb(self, r: float, g: float, b: float) -> RGB:
        """Look up a normalized RGB triple with trilinear interpolation."""
        # Clamp to domain
        r = max(self.domain_min[0], min(self.domain_max[0], r))
        g = max(self.domain_min[1], min(self.domain_max[1], g))
        b = max(self.domain_min[2], min(self.domain_max[2], b))

        # Normalize to 0-1 within domain
        r = (r - self.domain_min[0]) / (self.domain_max[0] - self.domain_min[0])
        g = (g - self.domain_min[1]) / (self.domain_max[1] - self.domain_min[1])
        b = (b - self.domain_min[2]) / (self.domain_max[2] - self.domain_min[2])

        size = self.size

        r_idx = r * (size - 1)
        g_idx = g * (size - 1)
        b_idx = b * (size - 1)

        r0 = int(r_idx)
        g0 = int(g_idx)
        b0 = int(b_idx)

        r1 = min(r0 + 1, size - 1)
        g1 = min(g0 + 1, size - 1)
        b1 = min(b0 + 1, size - 1)

        r_frac = r_idx - r0
        g_frac = g_idx - g0
        b_frac = b_idx - b0

        def trilinear(c: int) -> float:
            c000 = self.at(r0, g0, b0)[c]
            c001 = self.at(r0, g0, b1)[c]
            c010 = self.at(r0, g1, b0)[c]
            c011 = self.at(r0, g1, b1)[c]
            c100 = self.at(r1, g0, b0)[c]
            c101 = self.at(r1, g0, b1)[c]
            c110 = self.at(r1, g1, b0)[c]
            c111 = self.at(r1, g1, b1)[c]

            c00 = c000 * (1 - r_frac) + c100 * r_frac
            c01 = c001 * (1 - r_frac) + c101 * r_frac
            c10 = c010 * (1 - r_frac) + c110 * r_frac
            c11 = c011 * (1 - r_frac) + c111 * r_frac

            c0 = c00 * (1 - g_frac) + c10 * g_frac
            c1 = c01 * (1 - g_frac) + c11 * g_frac

            return c0 * (1 - b_frac) + c1 * b_frac

        return (trilinear(0), trilinear(1), trilinear(2))


def build_lut(config: LUTConfig, name: Optional[str] = None) -> LUT:
    """Evaluate the color pipeline over the full grid of ``config``."""
    size = config.size
    look = Look.from_name(config.look)
    coords = [normalize_index(n, size) for n in range(size)]

    samples = [
        process_sample(coords[i], coords[j], coords[k], config.exposure_offset, look)
        for i, j, k in iter_grid(size)
    ]

    return LUT(
        name=name or Path(config.output).stem,
        size=size,
        samples=samples,
        comments=[HEADER_COMMENT],
    )


def generate_lut(config: LUTConfig) -> str:
    """Generate the complete ``.cube`` document for ``config``."""
    return CubeWriter().render(build_lut(config))


def format_sample(rgb: RGB) -> str:
    """Format one data line (without newline)."""
    return f"{rgb[0]:.6f} {rgb[1]:.6f} {rgb[2]:.6f}"


class CubeWriter:
    """Write LUTs as ``.cube`` text."""

    def render(self, lut: LUT) -> str:
        """Render ``lut`` as a ``.cube`` document."""
        lines = [f"# {comment}" for comment in lut.comments]

        if lut.title:
            lines.append(f'TITLE "{lut.title}"')

        if lut.domain_min != (0.0, 0.0, 0.0):
            lines.append(f"DOMAIN_MIN {lut.domain_min[0]} {lut.domain_min[1]} {lut.domain_min[2]}")

        if lut.domain_max != (1.0, 1.0, 1.0):
            lines.append(f"DOMAIN_MAX {lut.domain_max[0]} {lut.domain_max[1]} {lut.domain_max[2]}")

        lines.append(f"LUT_3D_SIZE {lut.size}")
        lines.extend(format_sample(rgb) for rgb in lut.samples)

        return "\n".join(lines) + "\n"

    def write(self, lut: LUT, path: Union[str, Path]) -> Path:
        """Write ``lut`` to ``path``.

        Raises:
            LUTWriteError: If the file cannot be created or written, or the
                path is not a valid file name
        """
        path = Path(path)
        content = self.render(lut)
        try:
            path.write_text(content, encoding="utf-8")
        except (OSError, ValueError) as e:
            # ValueError: the path itself is unusable (e.g. embedded NUL)
            raise LUTWriteError(f"Cannot write LUT file: {e}", path=str(path), cause=e) from e

        logger.debug(f"Written LUT to {path}")
        return path


class CubeParser:
    """Parse ``.cube`` text produced by :class:`CubeWriter`.

    Data lines are read back in generator order (blue fastest).
    """

    def parse(self, content: str, name: str = "Untitled", path: Optional[str] = None) -> LUT:
        """Parse ``.cube`` text.

        Raises:
            CubeFormatError: If the document is malformed
        """
        lut = LUT(name=name, size=0)
        samples: List[RGB] = []

        for line_number, raw in enumerate(content.splitlines(), 1):
            line = raw.strip()

            if not line:
                continue

            if line.startswith("#"):
                lut.comments.append(line[1:].strip())
                continue

            if line.startswith("TITLE"):
                match = re.match(r'TITLE\s+"?([^"]*)"?', line)
                if match:
                    lut.title = match.group(1)
                continue

            if line.startswith("LUT_1D_SIZE"):
                raise CubeFormatError("1D LUTs are not supported", line_number=line_number, path=path)

            if line.startswith("LUT_3D_SIZE"):
                match = re.match(r"LUT_3D_SIZE\s+(\d+)$", line)
                if not match:
                    raise CubeFormatError(f"Invalid size line: {line}", line_number=line_number, path=path)
                lut.size = int(match.group(1))
                continue

            if line.startswith("DOMAIN_MIN") or line.startswith("DOMAIN_MAX"):
                values = self._parse_triple(line.split()[1:], line_number, path)
                if line.startswith("DOMAIN_MIN"):
                    lut.domain_min = values
                else:
                    lut.domain_max = values
                continue

            samples.append(self._parse_triple(line.split(), line_number, path))

        if lut.size < 2:
            raise CubeFormatError("Missing or invalid LUT_3D_SIZE", path=path)

        expected = lut.size ** 3
        if len(samples) != expected:
            raise CubeFormatError(
                f"Expected {expected} data lines for size {lut.size}, got {len(samples)}",
                path=path,
            )

        lut.samples = samples
        return lut

    def load(self, path: Union[str, Path]) -> LUT:
        """Read and parse a ``.cube`` file."""
        path = Path(path)
        content = path.read_text(encoding="utf-8", errors="replace")
        return self.parse(content, name=path.stem, path=str(path))

    @staticmethod
    def _parse_triple(parts: List[str], line_number: int, path: Optional[str]) -> RGB:
        if len(parts) != 3:
            raise CubeFormatError(
                f"Expected 3 values, got {len(parts)}",
                line_number=line_number,
                path=path,
            )
        try:
            return float(parts[0]), float(parts[1]), float(parts[2])
        except ValueError as e:
            raise CubeFormatError(
                f"Invalid number: {e}",
                line_number=line_number,
                path=path,
                cause=e,
            ) from e
