from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClockConfig:
    max_frames: int
    frame_ms: int = 1


@dataclass(frozen=True)
class DiagramConfig:
    default_error: str = "error"


@dataclass(frozen=True)
class HarnessConfig:
    clock: ClockConfig
    diagrams: DiagramConfig


def validate_config(config: HarnessConfig) -> None:
    _require_positive(config.clock.max_frames, "clock.max_frames")
    _require_positive(config.clock.frame_ms, "clock.frame_ms")
    if not config.diagrams.default_error:
        raise ValueError("diagrams.default_error must be set")


def _require_positive(value: int | None, field_name: str) -> None:
    if value is None or value <= 0:
        raise ValueError(f"{field_name} must be > 0")
