"""Batch conversion of JSON config trees into ``.cube`` files.

Each config file is handled in isolation: read, parse, configuration and
write failures are logged and the file is skipped while the rest of the
batch continues. Failing to create the output directory or to traverse the
config tree aborts the run.
"""

import stat
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .config import LUTConfig, load_config
from .exceptions import CinelutError, ConfigDiscoveryError, OutputDirectoryError
from .lut import CubeWriter, build_lut
from .utils.logging import ErrorAggregator, get_logger

logger = get_logger("batch")

CONFIG_SUFFIX = ".json"


def iter_config_files(config_dir: Union[str, Path]) -> Iterator[Path]:
    """Yield JSON config files under ``config_dir``.

    The tree is walked depth-first with entries visited in lexical order,
    so files and subdirectories interleave by name. Symlinks are not
    followed. Only non-directories whose name ends in ``.json``
    (case-sensitive) are yielded.

    Raises:
        ConfigDiscoveryError: If any part of the tree cannot be read
    """
    root = Path(config_dir)
    try:
        yield from _walk(root)
    except OSError as e:
        raise ConfigDiscoveryError(
            f"Error walking through config directory: {e}",
            path=str(root),
            cause=e,
        ) from e


def _walk(path: Path) -> Iterator[Path]:
    st = path.lstat()
    if not stat.S_ISDIR(st.st_mode):
        if path.name.endswith(CONFIG_SUFFIX):
            yield path
        return

    for name in sorted(entry.name for entry in path.iterdir()):
        yield from _walk(path / name)


def discover_configs(config_dir: Union[str, Path]) -> List[Path]:
    """Return all JSON config files under ``config_dir`` in walk order."""
    return list(iter_config_files(config_dir))


def ensure_output_dir(output_dir: Union[str, Path]) -> Path:
    """Create ``output_dir`` (and parents) if needed.

    Raises:
        OutputDirectoryError: If the directory cannot be created
    """
    path = Path(output_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(
            f"Error creating output directory: {e}",
            path=str(path),
            cause=e,
        ) from e
    return path


@dataclass
class FileResult:
    """Outcome of converting one config file."""
    config_path: Path
    output_path: Optional[Path] = None
    config: Optional[LUTConfig] = None
    error: Optional[CinelutError] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config_path": str(self.config_path),
            "output_path": str(self.output_path) if self.output_path else None,
            "success": self.success,
            "error": self.error.to_dict() if self.error else None,
            "duration_seconds": round(self.duration_seconds, 3),
        }


def process_config_file(
    config_path: Union[str, Path],
    output_dir: Union[str, Path],
    writer: Optional[CubeWriter] = None,
) -> FileResult:
    """Convert one JSON config file into a ``.cube`` file.

    Never raises for file-level failures; they are logged and returned in
    the result.
    """
    config_path = Path(config_path)
    writer = writer or CubeWriter()
    result = FileResult(config_path=config_path)
    start = time.time()

    logger.info(f"Processing config: {config_path}")

    try:
        config = load_config(config_path)
        result.config = config

        lut = build_lut(config)
        output_path = config.resolve_output_path(output_dir)
        result.output_path = output_path

        writer.write(lut, output_path)
    except CinelutError as e:
        result.error = e
        logger.file_skipped(config_path, e)
    else:
        logger.lut_written(output_path, size=config.size, look=config.look)

    result.duration_seconds = time.time() - start
    return result


@dataclass
class BatchSummary:
    """Results of a batch run, in discovery order."""
    results: List[FileResult] = field(default_factory=list)
    error_summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> List[FileResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.success]

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "error_summary": self.error_summary,
            "results": [r.to_dict() for r in self.results],
        }


class BatchProcessor:
    """Convert every config file under a directory tree.

    Args:
        config_dir: Directory scanned recursively for ``*.json`` files
        output_dir: Directory relative ``output`` names are resolved against
        workers: Number of files converted concurrently (1 = sequential)
    """

    def __init__(
        self,
        config_dir: Union[str, Path],
        output_dir: Union[str, Path],
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")

        self.config_dir = Path(config_dir)
        self.output_dir = Path(output_dir)
        self.workers = workers
        self.writer = CubeWriter()

    def run(self) -> BatchSummary:
        """Run the batch.

        Raises:
            OutputDirectoryError: If the output directory cannot be created
            ConfigDiscoveryError: If the config tree cannot be traversed
        """
        ensure_output_dir(self.output_dir)

        aggregator = ErrorAggregator("batch")
        summary = BatchSummary()

        if self.workers == 1:
            # Files are converted as they are discovered
            for config_path in iter_config_files(self.config_dir):
                summary.results.append(self._process(config_path))
        else:
            config_paths = discover_configs(self.config_dir)
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                summary.results.extend(executor.map(self._process, config_paths))

        for result in summary.failed:
            aggregator.add_error(result.error, context={"config_path": str(result.config_path)})

        summary.error_summary = aggregator.get_summary()["by_type"]
        aggregator.log_summary()

        logger.info(
            f"Batch complete: {len(summary.succeeded)}/{summary.total} LUTs written",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
        )
        return summary

    def _process(self, config_path: Path) -> FileResult:
        return process_config_file(config_path, self.output_dir, writer=self.writer)


def run_batch(
    config_dir: Union[str, Path],
    output_dir: Union[str, Path],
    workers: int = 1,
) -> BatchSummary:
    """Convenience wrapper around :class:`BatchProcessor`."""
    return BatchProcessor(config_dir, output_dir, workers=workers).run()
