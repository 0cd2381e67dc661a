"""Variant pipeline: render, stage, encode and package every loader variant.

For each style variant the pipeline produces a static loop GIF (the settled
icon repeated ``FRAME_COUNT`` times) and a transition GIF (the full
orchestrated sequence), and exports the transition frames with a manifest
for the preview page. All variants share one scratch directory, so builds
must not overlap; :class:`BuildQueue` serialises them.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import numpy as np

from .config import DEFAULT_ENGINE_CONFIG, DEFAULT_PATH_CONFIG, EngineConfig, LoaderConfig, PathConfig
from .custom_build import ICON_MASK_24, CustomSequence, build_custom_sequence, centred_mask
from .error_handling import BuildError, EngineError, RenderError, error_context, log_info_with_context
from .external_engines import ffmpeg_build_gif, gifsicle_optimize_gif, pillow_build_gif
from .grid import mask_from_raster
from .io import export_frames, format_bytes, image_dimensions, load_icon, negate_rgb, prepare_frames_dir, write_frames
from .orchestrator import FrameSequencer
from .style import STANDARD_VARIANTS, StyleVariant, render_variant
from .system_tools import discover_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantOutputs:
    static_name: str
    transition_name: str

    @property
    def optimized_name(self) -> str:
        return self.transition_name.replace(".gif", "-opt.gif")


VARIANT_OUTPUTS: dict[str, VariantOutputs] = {
    "border-light": VariantOutputs("loader.gif", "loader-transition.gif"),
    "border-dark": VariantOutputs("loader-dark.gif", "loader-transition-dark.gif"),
    "solid-light": VariantOutputs("loader-solid.gif", "loader-solid-transition.gif"),
    "solid-dark": VariantOutputs("loader-solid-dark.gif", "loader-solid-transition-dark.gif"),
}

# Published names inside the zip archive
ZIP_NAMES: dict[str, str] = {
    "solid-light": "loading-light-44.gif",
    "border-light": "loading-light-128.gif",
    "solid-dark": "loading-dark-44.gif",
    "border-dark": "loading-dark-128.gif",
}


@dataclass
class LoaderAssets:
    """Inputs shared by every variant of one render pass."""

    original: np.ndarray
    original_dark: np.ndarray
    grid_mask: np.ndarray
    settled: dict[str, np.ndarray]
    sequence: CustomSequence | None = None

    def original_for(self, variant: StyleVariant) -> np.ndarray:
        return self.original_dark if variant.dark else self.original


@dataclass
class VariantResult:
    """What one variant build produced."""

    variant: str
    static_path: Path
    transition_path: Path | None = None
    frames_dir: Path | None = None
    manifest: dict[str, int] = field(default_factory=dict)
    encoder: dict[str, Any] = field(default_factory=dict)


def prepare_assets(
    icon_path: Path,
    config: LoaderConfig,
    variants: Iterable[StyleVariant] = STANDARD_VARIANTS,
) -> LoaderAssets:
    """Load the icon and render the settled raster of each variant.

    Raises:
        BuildError: If the icon is missing or unreadable
    """
    base = load_icon(icon_path, config.GRID_SIZE, nearest=True)
    original = load_icon(icon_path, config.output_size, nearest=False)

    if config.USE_ICON_MASK:
        settled = {
            v.name: render_variant(v, config.GRID_SIZE, config.CELL_SIZE, design_mask=ICON_MASK_24)
            for v in variants
        }
        grid_mask = centred_mask(ICON_MASK_24, config.GRID_SIZE)
    else:
        settled = {v.name: render_variant(v, config.GRID_SIZE, config.CELL_SIZE, base=base) for v in variants}
        grid_mask = mask_from_raster(base, config.GRID_SIZE)

    sequence = None
    if config.MODE == "custom":
        sequence = build_custom_sequence(target_length=config.CUSTOM_TARGET_LENGTH)

    return LoaderAssets(
        original=original,
        original_dark=negate_rgb(original),
        grid_mask=grid_mask,
        settled=settled,
        sequence=sequence,
    )


def encode_gif(
    frames_dir: Path,
    output_path: Path,
    frame_count: int,
    config: LoaderConfig,
    engine_config: EngineConfig,
    palette_path: Path | None = None,
) -> dict[str, Any]:
    """Encode a staged frame sequence with the configured encoder."""
    with error_context(f"encode {output_path.name}", EngineError, context={"encoder": engine_config.ENCODER}):
        if engine_config.ENCODER == "pillow":
            return pillow_build_gif(
                frames_dir,
                output_path,
                frame_ms=config.FRAME_MS,
                frame_count=frame_count,
                palette_size=config.PALETTE_SIZE,
            )

        return ffmpeg_build_gif(
            frames_dir,
            output_path,
            frame_ms=config.FRAME_MS,
            palette_size=config.PALETTE_SIZE,
            palette_path=palette_path,
            engine_config=engine_config,
            timeout=engine_config.COMMAND_TIMEOUT,
        )


def build_static_loop(
    variant: StyleVariant,
    assets: LoaderAssets,
    config: LoaderConfig,
    out_dir: Path,
    scratch_dir: Path,
    engine_config: EngineConfig,
    palette_path: Path | None = None,
) -> VariantResult:
    """Encode the settled raster as a ``FRAME_COUNT`` frame loop."""
    settled = assets.settled[variant.name]
    prepare_frames_dir(scratch_dir)
    count = write_frames((settled for _ in range(config.FRAME_COUNT)), scratch_dir)

    output_path = out_dir / VARIANT_OUTPUTS[variant.name].static_name
    meta = encode_gif(scratch_dir, output_path, count, config, engine_config, palette_path)
    return VariantResult(variant=variant.name, static_path=output_path, encoder=meta)


def build_transition(
    variant: StyleVariant,
    assets: LoaderAssets,
    config: LoaderConfig,
    out_dir: Path,
    frames_root: Path,
    scratch_dir: Path,
    engine_config: EngineConfig,
    palette_path: Path | None = None,
) -> tuple[Path, Path, dict[str, int], dict[str, Any]]:
    """Render, encode and export the transition animation of *variant*."""
    sequencer = FrameSequencer(
        config,
        original=assets.original_for(variant),
        settled=assets.settled[variant.name],
        mask=assets.grid_mask,
        sequence=assets.sequence,
    )

    prepare_frames_dir(scratch_dir)
    with error_context(f"render {variant.name} transition frames", RenderError):
        count = write_frames(sequencer.iter_frames(), scratch_dir)
    if count != sequencer.total_frames:
        raise BuildError(f"Rendered {count} frames, planned {sequencer.total_frames}")

    output_path = out_dir / VARIANT_OUTPUTS[variant.name].transition_name
    meta = encode_gif(scratch_dir, output_path, count, config, engine_config, palette_path)

    manifest = sequencer.manifest()
    frames_dir = export_frames(scratch_dir, frames_root / variant.name, count, manifest)
    return output_path, frames_dir, manifest, meta


def build_loader_set(
    config: LoaderConfig,
    path_config: PathConfig = DEFAULT_PATH_CONFIG,
    engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    icon_path: Path | None = None,
    variants: Iterable[StyleVariant] = STANDARD_VARIANTS,
    out_dir: Path | None = None,
    transitions: bool = True,
) -> list[VariantResult]:
    """Build the static and transition GIFs of every variant.

    Args:
        config: Loader configuration
        path_config: Asset and scratch locations
        engine_config: Encoder selection and tool paths
        icon_path: Source icon, defaults to the first existing candidate of
            *path_config*
        variants: Style variants to build
        out_dir: GIF output directory, defaults to the assets directory
        transitions: Also build the transition animations

    Raises:
        BuildError: If the icon is missing
        RenderError: If a variant's transition frames fail to render
        EngineError: If the encoder is missing or fails
    """
    variants = tuple(variants)
    icon_path = icon_path or path_config.find_icon()
    if icon_path is None:
        candidates = ", ".join(str(p) for p in path_config.icon_candidates())
        raise BuildError(f"Missing input icon. Copy your source icon to one of: {candidates}")

    if engine_config.ENCODER == "ffmpeg":
        discover_tool("ffmpeg", engine_config).require()

    out_dir = out_dir or path_config.assets_dir
    frames_root = out_dir / "frames" if out_dir != path_config.assets_dir else path_config.frames_root
    scratch_dir = path_config.scratch_dir
    palette_path = path_config.palette_path

    assets = prepare_assets(icon_path, config, variants)
    results = []
    for variant in variants:
        log_info_with_context(
            f"Building {variant.name}",
            context={"mode": config.MODE, "size": config.output_size},
            logger=logger,
        )
        result = build_static_loop(variant, assets, config, out_dir, scratch_dir, engine_config, palette_path)

        if transitions:
            path, frames_dir, manifest, meta = build_transition(
                variant, assets, config, out_dir, frames_root, scratch_dir, engine_config, palette_path
            )
            result.transition_path = path
            result.frames_dir = frames_dir
            result.manifest = manifest
            result.encoder = meta
        results.append(result)

    logger.info(f"Generated {len(results)} loader variants ({config.FRAME_COUNT} frames @ {config.FRAME_MS}ms)")
    return results


def build_resolutions(
    config: LoaderConfig,
    cell_sizes: Iterable[int],
    path_config: PathConfig = DEFAULT_PATH_CONFIG,
    engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    icon_path: Path | None = None,
    variants: Iterable[StyleVariant] = STANDARD_VARIANTS,
) -> dict[int, list[VariantResult]]:
    """Build the loader set once per output cell size.

    A single size writes to the assets directory; several sizes each get a
    ``<pixels>px`` subdirectory. Sizes are built one at a time through a
    :class:`BuildQueue`; a failing size does not stop the remaining ones.

    Raises:
        BuildError: After all sizes ran, if any of them failed
    """
    sizes = list(dict.fromkeys(cell_sizes)) or [config.CELL_SIZE]
    variants = tuple(variants)

    futures = {}
    with BuildQueue() as queue:
        for cell_size in sizes:
            sized = replace(config, CELL_SIZE=cell_size)
            out_dir = None
            if len(sizes) > 1:
                out_dir = path_config.assets_dir / f"{sized.output_size}px"
            futures[cell_size] = queue.submit(
                build_loader_set, sized, path_config, engine_config, icon_path, variants, out_dir=out_dir
            )

    results = {}
    failures = {}
    for cell_size, future in futures.items():
        error = future.exception()
        if error is None:
            results[cell_size] = future.result()
        else:
            logger.error(f"Build for cell size {cell_size} failed: {error}")
            failures[cell_size] = error

    if failures:
        first = next(iter(failures.values()))
        raise BuildError(
            f"{len(failures)} of {len(sizes)} builds failed",
            cause=first,
            context={"failed_cell_sizes": sorted(failures)},
        ) from first
    return results


def optimize_outputs(
    path_config: PathConfig = DEFAULT_PATH_CONFIG,
    engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    variants: Iterable[str] = ("solid-light", "border-light", "solid-dark", "border-dark"),
) -> dict[str, Path]:
    """Run gifsicle over each transition GIF, writing the ``-opt`` copies."""
    optimized = {}
    for name in variants:
        outputs = VARIANT_OUTPUTS[name]
        source = path_config.assets_dir / outputs.transition_name
        if not source.exists():
            raise BuildError(f"Nothing to optimize: {source} does not exist, run a build first")
        target = path_config.assets_dir / outputs.optimized_name
        gifsicle_optimize_gif(source, target, engine_config=engine_config, timeout=engine_config.COMMAND_TIMEOUT)
        optimized[name] = target
        logger.info(f"Optimized {source.name} -> {target.name}")
    return optimized


def export_zip(
    path_config: PathConfig = DEFAULT_PATH_CONFIG,
    engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Path:
    """Optimise the transition GIFs and package them under their published names."""
    optimized = optimize_outputs(path_config, engine_config, variants=tuple(ZIP_NAMES))

    staging = prepare_frames_dir(path_config.zip_staging_dir)
    zip_path = path_config.zip_path
    zip_path.unlink(missing_ok=True)

    with error_context("write zip archive", BuildError, context={"zip": str(zip_path)}):
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, published in ZIP_NAMES.items():
                staged = staging / published
                shutil.copyfile(optimized[name], staged)
                archive.write(staged, arcname=published)

    logger.info(f"Wrote {zip_path}")
    return zip_path


def asset_stats(path_config: PathConfig = DEFAULT_PATH_CONFIG) -> list[dict[str, Any]]:
    """Dimensions and sizes of the source icon and the static loader GIFs."""
    targets = path_config.icon_candidates() + [
        path_config.assets_dir / outputs.static_name for outputs in VARIANT_OUTPUTS.values()
    ]
    rows = []
    for target in targets:
        if not target.exists():
            rows.append({"path": target, "exists": False})
            continue
        size = target.stat().st_size
        dims = image_dimensions(target)
        rows.append(
            {
                "path": target,
                "exists": True,
                "dimensions": f"{dims[0]}x{dims[1]}" if dims else "unknown",
                "bytes": size,
                "size": format_bytes(size),
            }
        )
    return rows


class BuildQueue:
    """Run build tasks one at a time, in submission order.

    A failing task does not block later ones; its exception is delivered
    through the returned future.
    """

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pixloader-build")

    def submit(self, task: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        return self._executor.submit(task, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BuildQueue":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
