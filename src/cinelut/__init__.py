"""cinelut - batch generator for Apple Log to Rec.709 3D LUTs."""
__version__ = "1.0.0"

from .config import LUTConfig, load_config, parse_config

from .color import (
    Look,
    log_to_linear,
    rec2020_to_rec709,
    rec709_oetf,
    apply_teal_orange,
    apply_warm_vintage,
    apply_look,
    process_sample,
    sample,
)

from .lut import (
    LUT,
    CubeParser,
    CubeWriter,
    build_lut,
    generate_lut,
    iter_grid,
)

from .batch import (
    BatchProcessor,
    BatchSummary,
    FileResult,
    discover_configs,
    process_config_file,
    run_batch,
)

from .exceptions import (
    CinelutError,
    ConfigurationError,
    ConfigReadError,
    ConfigParseError,
    LUTWriteError,
    CubeFormatError,
    OutputDirectoryError,
    ConfigDiscoveryError,
    is_fatal,
)

# Structured logging
from .utils.logging import (
    LogConfig,
    CinelutLogger,
    configure_logging,
    get_logger,
    configure_from_cli,
)

__all__ = [
    "__version__",
    # Configuration
    "LUTConfig",
    "load_config",
    "parse_config",
    # Color pipeline
    "Look",
    "log_to_linear",
    "rec2020_to_rec709",
    "rec709_oetf",
    "apply_teal_orange",
    "apply_warm_vintage",
    "apply_look",
    "process_sample",
    "sample",
    # LUT generation
    "LUT",
    "CubeParser",
    "CubeWriter",
    "build_lut",
    "generate_lut",
    "iter_grid",
    # Batch
    "BatchProcessor",
    "BatchSummary",
    "FileResult",
    "discover_configs",
    "process_config_file",
    "run_batch",
    # Exceptions
    "CinelutError",
    "ConfigurationError",
    "ConfigReadError",
    "ConfigParseError",
    "LUTWriteError",
    "CubeFormatError",
    "OutputDirectoryError",
    "ConfigDiscoveryError",
    "is_fatal",
    # Logging
    "LogConfig",
    "CinelutLogger",
    "configure_logging",
    "get_logger",
    "configure_from_cli",
]
