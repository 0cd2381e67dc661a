"""Configuration settings for pixloader."""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

logger = logging.getLogger(__name__)

VALID_MODES = ("custom", "sweep")


def _clamp_int(name: str, value: int, minimum: int) -> int:
    if value < minimum:
        logger.debug(f"Clamping {name}={value} to {minimum}")
        return minimum
    return value


@dataclass
class LoaderConfig:
    """Settings for one loader render pass.

    Numeric values that are out of range are clamped to the nearest valid
    value instead of raising, so an animation can always be produced.
    """

    # Logical grid size (icon pixels per side)
    GRID_SIZE: int = 32

    # Output pixels per grid cell
    CELL_SIZE: int = 8

    # Length of the idle loop at the end of the animation
    FRAME_COUNT: int = 16

    # Per-frame duration in milliseconds
    FRAME_MS: int = 40

    # Colour limit for palette generation (0 disables palettegen)
    PALETTE_SIZE: int = 32

    # Dissolve frames before the speed multiplier is applied
    TRANSITION_FRAMES: int = 10

    # Angular sweep phase lengths ("sweep" mode)
    CLEAR_FRAMES: int = 8
    REBUILD_FRAMES: int = 12

    # Fraction of the rebuild sweep that passes before the bar starts filling
    BAR_DELAY: float = 0.55

    # Every hold/overlap/transition length is multiplied by this
    SPEED_MULTIPLIER: int = 1

    # Static hold of the fully dissolved frame before the custom build
    TRANSITION_HOLD_FRAMES: int = 22

    # Leading custom-build frames repeated SPEED_MULTIPLIER times
    SLOW_LOADING_FRAMES: int = 0

    # Build frames are padded up to this length
    CUSTOM_TARGET_LENGTH: int = 73

    # "custom" (hold + custom build) or "sweep" (clear + rebuild)
    MODE: str = "custom"

    # Render the settled variants from the built-in 24x24 design mask
    USE_ICON_MASK: bool = True

    def __post_init__(self) -> None:
        if self.MODE not in VALID_MODES:
            from .error_handling import ConfigurationError

            raise ConfigurationError(f"Invalid mode: {self.MODE!r} (expected one of {', '.join(VALID_MODES)})")

        self.GRID_SIZE = _clamp_int("GRID_SIZE", int(self.GRID_SIZE), 1)
        self.CELL_SIZE = _clamp_int("CELL_SIZE", int(self.CELL_SIZE), 1)
        self.FRAME_COUNT = _clamp_int("FRAME_COUNT", int(self.FRAME_COUNT), 1)
        self.FRAME_MS = _clamp_int("FRAME_MS", int(self.FRAME_MS), 1)
        self.PALETTE_SIZE = _clamp_int("PALETTE_SIZE", int(self.PALETTE_SIZE), 0)
        self.TRANSITION_FRAMES = _clamp_int("TRANSITION_FRAMES", int(self.TRANSITION_FRAMES), 1)
        self.CLEAR_FRAMES = _clamp_int("CLEAR_FRAMES", int(self.CLEAR_FRAMES), 1)
        self.REBUILD_FRAMES = _clamp_int("REBUILD_FRAMES", int(self.REBUILD_FRAMES), 1)
        self.SPEED_MULTIPLIER = _clamp_int("SPEED_MULTIPLIER", int(self.SPEED_MULTIPLIER), 1)
        self.TRANSITION_HOLD_FRAMES = _clamp_int("TRANSITION_HOLD_FRAMES", int(self.TRANSITION_HOLD_FRAMES), 0)
        self.SLOW_LOADING_FRAMES = _clamp_int("SLOW_LOADING_FRAMES", int(self.SLOW_LOADING_FRAMES), 0)
        self.CUSTOM_TARGET_LENGTH = _clamp_int("CUSTOM_TARGET_LENGTH", int(self.CUSTOM_TARGET_LENGTH), 1)

        # Bar delay lives in [0, 1)
        self.BAR_DELAY = min(max(float(self.BAR_DELAY), 0.0), 0.99)

    @property
    def output_size(self) -> int:
        return self.GRID_SIZE * self.CELL_SIZE

    def with_overrides(self, **overrides) -> "LoaderConfig":
        """Return a copy with the given (upper-case) fields replaced."""
        return replace(self, **overrides)


@dataclass
class PathConfig:
    """Locations of the source icon, generated assets and scratch space."""

    ROOT_DIR: Path = Path(".")
    ASSETS_DIR: Path = Path("src/assets")
    TMP_DIR: Path = Path(".tmp")
    LOGS_DIR: Path = Path("logs")

    # Source icon candidates, first existing one wins
    ICON_NAMES: tuple[str, ...] = ("icon-source.png",)

    ZIP_NAME: str = "loading-icons.zip"

    @property
    def assets_dir(self) -> Path:
        return self.ROOT_DIR / self.ASSETS_DIR

    @property
    def frames_root(self) -> Path:
        return self.assets_dir / "frames"

    @property
    def scratch_dir(self) -> Path:
        return self.ROOT_DIR / self.TMP_DIR / "frames"

    @property
    def palette_path(self) -> Path:
        return self.ROOT_DIR / self.TMP_DIR / "palette.png"

    @property
    def zip_staging_dir(self) -> Path:
        return self.ROOT_DIR / self.TMP_DIR / "zip-export"

    @property
    def zip_path(self) -> Path:
        return self.assets_dir / self.ZIP_NAME

    def icon_candidates(self) -> list[Path]:
        return [self.assets_dir / name for name in self.ICON_NAMES]

    def find_icon(self) -> Path | None:
        for candidate in self.icon_candidates():
            if candidate.exists():
                return candidate
        return None


@dataclass
class EngineConfig:
    """Paths of the external tools, with environment variable overrides."""

    # Override with: PIXLOADER_FFMPEG_PATH
    FFMPEG_PATH: str = "ffmpeg"

    # Override with: PIXLOADER_GIFSICLE_PATH
    GIFSICLE_PATH: str = "gifsicle"

    # GIF encoder: "ffmpeg" (two-pass palette) or "pillow" (in-process)
    # Override with: PIXLOADER_ENCODER
    ENCODER: str = "ffmpeg"

    # Hard timeout for each external command, in seconds
    COMMAND_TIMEOUT: int = 120

    env_overrides: dict[str, str] = field(
        default_factory=lambda: {
            "FFMPEG_PATH": "PIXLOADER_FFMPEG_PATH",
            "GIFSICLE_PATH": "PIXLOADER_GIFSICLE_PATH",
            "ENCODER": "PIXLOADER_ENCODER",
        }
    )

    def __post_init__(self) -> None:
        """Apply environment variable overrides after initialization."""
        for attr_name, env_var_name in self.env_overrides.items():
            env_value = os.environ.get(env_var_name)
            if env_value:
                setattr(self, attr_name, env_value)

        if self.ENCODER not in ("ffmpeg", "pillow"):
            from .error_handling import ConfigurationError

            raise ConfigurationError(f"Unknown encoder: {self.ENCODER!r}")


DEFAULT_LOADER_CONFIG = LoaderConfig()
DEFAULT_PATH_CONFIG = PathConfig()
DEFAULT_ENGINE_CONFIG = EngineConfig()
