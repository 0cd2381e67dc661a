"""Frame-sequence orchestrator for the loader transition.

The animation is planned as an ordered list of phases, each an integer frame
range. A strategy decides which phases sit between the dissolve and the idle
loop:

- ``SweepStrategy``: Hold, Break, Clear, Rebuild, Idle
- ``CustomBuildStrategy``: Hold, Break, Hold2, CustomBuild, Idle

The nominal hold lasts ``10 * speed`` frames but Break starts ``2 * speed``
frames before it ends, so the dissolve begins while the original icon is
still showing: Break frames below the nominal hold are drawn over the
original. The total still counts the full nominal hold, so Idle is
``2 * speed`` frames longer than the idle loop length. Each phase starts
where the previous one ends and Idle runs to ``total_frames``, so the phases
tile ``[0, total_frames)`` with no gaps.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from .config import LoaderConfig
from .custom_build import CustomSequence, build_custom_sequence, expand_loading_frames, render_custom_frame
from .dissolve import build_break_frame
from .error_handling import FramePlanError
from .grid import composite_over, ensure_rgba
from .sweep import AngularSweep, sweep_progress

logger = logging.getLogger(__name__)

HOLD_BASE_FRAMES = 10
OVERLAP_BASE_FRAMES = 2


class PhaseKind(Enum):
    HOLD = "hold"
    BREAK = "break"
    HOLD2 = "hold2"
    CLEAR = "clear"
    REBUILD = "rebuild"
    CUSTOM_BUILD = "custom_build"
    IDLE = "idle"


@dataclass(frozen=True)
class Phase:
    """A half-open frame range ``[start, end)`` of one kind."""

    kind: PhaseKind
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def __contains__(self, index: int) -> bool:
        return self.start <= index < self.end


@dataclass(frozen=True)
class PhasePlan:
    """Ordered phases covering ``[0, total_frames)``."""

    phases: tuple[Phase, ...]
    total_frames: int
    hold_frames: int
    speed: int
    transition_steps: int

    def get(self, kind: PhaseKind) -> Phase | None:
        for phase in self.phases:
            if phase.kind is kind:
                return phase
        return None

    def phase_at(self, index: int) -> Phase:
        """Return the phase that draws frame *index*.

        Raises:
            FramePlanError: If *index* lies outside ``[0, total_frames)``
        """
        if not 0 <= index < self.total_frames:
            raise FramePlanError(
                f"Frame index {index} outside planned range [0, {self.total_frames})",
                context={"index": index, "total_frames": self.total_frames},
            )
        for phase in self.phases:
            if index in phase:
                return phase
        raise FramePlanError(f"No phase covers frame {index}", context={"index": index})


@dataclass(frozen=True)
class _Timing:
    speed: int
    hold: int
    overlap: int
    transition_steps: int
    transition: int
    idle: int

    @property
    def break_start(self) -> int:
        return max(0, self.hold - self.overlap)

    @property
    def break_end(self) -> int:
        return self.break_start + self.transition


def _timing(config: LoaderConfig) -> _Timing:
    speed = max(1, config.SPEED_MULTIPLIER)
    steps = max(1, config.TRANSITION_FRAMES)
    return _Timing(
        speed=speed,
        hold=HOLD_BASE_FRAMES * speed,
        overlap=OVERLAP_BASE_FRAMES * speed,
        transition_steps=steps,
        transition=steps * speed,
        idle=max(1, config.FRAME_COUNT),
    )


def _assemble(timing: _Timing, middle: Sequence[tuple[PhaseKind, int]]) -> PhasePlan:
    """Lay out Hold, Break, the *middle* phases and Idle end to end.

    The total counts the full nominal hold, so Idle also absorbs the frames
    Break borrowed from the hold and runs ``idle + overlap`` frames.
    """
    phases = [
        Phase(PhaseKind.HOLD, 0, timing.break_start),
        Phase(PhaseKind.BREAK, timing.break_start, timing.break_end),
    ]
    cursor = timing.break_end
    for kind, length in middle:
        if length <= 0:
            continue
        phases.append(Phase(kind, cursor, cursor + length))
        cursor += length
    middle_frames = sum(length for _, length in middle if length > 0)
    total = timing.hold + timing.transition + middle_frames + timing.idle
    phases.append(Phase(PhaseKind.IDLE, cursor, total))
    return PhasePlan(
        phases=tuple(phases),
        total_frames=total,
        hold_frames=timing.hold,
        speed=timing.speed,
        transition_steps=timing.transition_steps,
    )


class SweepStrategy:
    """Break, then angular clear and rebuild."""

    name = "sweep"

    def plan(self, config: LoaderConfig) -> PhasePlan:
        middle = [
            (PhaseKind.CLEAR, max(1, config.CLEAR_FRAMES)),
            (PhaseKind.REBUILD, max(1, config.REBUILD_FRAMES)),
        ]
        return _assemble(_timing(config), middle)


class CustomBuildStrategy:
    """Break, hold the broken frame, then replay the custom build sequence."""

    name = "custom"

    def __init__(self, sequence: CustomSequence | None = None):
        self.sequence = sequence

    def loading_frames(self, config: LoaderConfig) -> list[np.ndarray]:
        sequence = self.sequence
        if sequence is None:
            sequence = build_custom_sequence(target_length=config.CUSTOM_TARGET_LENGTH)
        return expand_loading_frames(sequence.frames, config.SLOW_LOADING_FRAMES, config.SPEED_MULTIPLIER)

    def plan(self, config: LoaderConfig, loading_count: int | None = None) -> PhasePlan:
        if loading_count is None:
            loading_count = len(self.loading_frames(config))
        middle = [
            (PhaseKind.HOLD2, config.TRANSITION_HOLD_FRAMES),
            (PhaseKind.CUSTOM_BUILD, loading_count),
        ]
        return _assemble(_timing(config), middle)


def strategy_for(config: LoaderConfig, sequence: CustomSequence | None = None) -> Any:
    if config.MODE == "sweep":
        return SweepStrategy()
    return CustomBuildStrategy(sequence)


def total_frames(config: LoaderConfig, loading_count: int | None = None) -> int:
    """Total frame count of the transition animation for *config*."""
    strategy = strategy_for(config)
    if isinstance(strategy, CustomBuildStrategy):
        return strategy.plan(config, loading_count).total_frames
    return strategy.plan(config).total_frames


def break_progress(index: int, plan: PhasePlan) -> float:
    """Dissolve progress for global frame *index* inside the Break phase."""
    phase = plan.get(PhaseKind.BREAK)
    step = (index - phase.start) // plan.speed
    return min(1.0, step / max(1, plan.transition_steps - 1))


class FrameSequencer:
    """Render the frames of one variant's transition animation.

    Args:
        config: Loader configuration
        original: Full-size original icon raster (shown during Hold)
        settled: Settled variant raster (dissolve target and idle frame)
        mask: Grid mask of the settled icon, used by the sweep phases
        sequence: Prebuilt custom sequence, shared between variants
    """

    def __init__(
        self,
        config: LoaderConfig,
        original: np.ndarray,
        settled: np.ndarray,
        mask: np.ndarray | None = None,
        sequence: CustomSequence | None = None,
    ):
        self.config = config
        self.original = ensure_rgba(original)
        self.settled = ensure_rgba(settled)
        expected = (config.output_size, config.output_size)
        for label, raster in (("original", self.original), ("settled", self.settled)):
            if raster.shape[:2] != expected:
                raise ValueError(
                    f"{label} raster must be {expected[0]}x{expected[1]}, got {raster.shape[1]}x{raster.shape[0]}"
                )

        self.strategy = strategy_for(config, sequence)
        self.loading_frames: list[np.ndarray] = []
        self.sweep: AngularSweep | None = None

        if isinstance(self.strategy, CustomBuildStrategy):
            self.loading_frames = self.strategy.loading_frames(config)
            self.plan = self.strategy.plan(config, len(self.loading_frames))
        else:
            if mask is None:
                raise ValueError("Sweep mode needs the grid mask of the settled icon")
            self.sweep = AngularSweep(mask, config.BAR_DELAY)
            self.plan = self.strategy.plan(config)

        self._final_break: np.ndarray | None = None
        logger.debug(
            f"Planned {self.plan.total_frames} frames: "
            + ", ".join(f"{p.kind.value}[{p.start},{p.end})" for p in self.plan.phases)
        )

    @property
    def total_frames(self) -> int:
        return self.plan.total_frames

    def _break_frame(self, progress: float) -> np.ndarray:
        return build_break_frame(self.settled, self.config.GRID_SIZE, self.config.CELL_SIZE, progress)

    def final_break_frame(self) -> np.ndarray:
        if self._final_break is None:
            self._final_break = self._break_frame(1.0)
        return self._final_break

    def render(self, index: int) -> np.ndarray:
        """Render global frame *index* as a new RGBA raster."""
        phase = self.plan.phase_at(index)
        kind = phase.kind

        if kind is PhaseKind.HOLD:
            return self.original.copy()

        if kind is PhaseKind.BREAK:
            frame = self._break_frame(break_progress(index, self.plan))
            if index < self.plan.hold_frames:
                return composite_over(self.original, frame)
            return frame

        if kind is PhaseKind.HOLD2:
            return self.final_break_frame().copy()

        if kind is PhaseKind.CLEAR:
            progress = sweep_progress(index - phase.start, self.config.GRID_SIZE)
            return self.sweep.clear_frame(self.settled, self.config.CELL_SIZE, progress)

        if kind is PhaseKind.REBUILD:
            progress = sweep_progress(index - phase.start, self.config.GRID_SIZE)
            return self.sweep.rebuild_frame(self.settled, self.config.CELL_SIZE, progress)

        if kind is PhaseKind.CUSTOM_BUILD:
            frame_mask = self.loading_frames[index - phase.start]
            return render_custom_frame(self.settled, frame_mask, self.config.GRID_SIZE, self.config.CELL_SIZE)

        return self.settled.copy()

    def iter_frames(self) -> Iterator[np.ndarray]:
        """Yield every frame in index order."""
        for index in range(self.total_frames):
            yield self.render(index)

    def frames(self) -> list[np.ndarray]:
        return list(self.iter_frames())

    def manifest(self) -> dict[str, int]:
        """Frame count, duration and size for the exported manifest."""
        return {
            "frames": self.total_frames,
            "ms": self.config.FRAME_MS,
            "width": self.config.output_size,
            "height": self.config.output_size,
        }
