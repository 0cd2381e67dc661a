"""pixloader - pixel-art loading icon generator."""

__version__: str = "0.1.0"

from .config import DEFAULT_LOADER_CONFIG, EngineConfig, LoaderConfig, PathConfig
from .error_handling import BuildError, ConfigurationError, EngineError, PixLoaderError
from .noise import hash01
from .orchestrator import FrameSequencer
from .style import STANDARD_VARIANTS, StyleVariant

__all__ = [
    "DEFAULT_LOADER_CONFIG",
    "BuildError",
    "ConfigurationError",
    "EngineConfig",
    "EngineError",
    "FrameSequencer",
    "LoaderConfig",
    "PathConfig",
    "PixLoaderError",
    "STANDARD_VARIANTS",
    "StyleVariant",
    "hash01",
    "__version__",
]
