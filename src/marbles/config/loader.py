from __future__ import annotations

import importlib
from collections.abc import Mapping
from importlib import resources

from marbles.config.schema import ClockConfig, DiagramConfig, HarnessConfig, validate_config

_ROOT_KEYS = {"clock", "diagrams"}
_CLOCK_KEYS = {"max_frames", "frame_ms"}
_DIAGRAM_KEYS = {"default_error"}


def load_default_config() -> HarnessConfig:
    payload = _load_default_payload()
    config = parse_config(payload)
    validate_config(config)
    return config


def parse_config(payload: Mapping[str, object]) -> HarnessConfig:
    _reject_unknown(payload, _ROOT_KEYS, "marbles config")
    return HarnessConfig(
        clock=_parse_clock(payload.get("clock")),
        diagrams=_parse_diagrams(payload.get("diagrams")),
    )


def _load_default_payload() -> Mapping[str, object]:
    text = (
        resources.files("marbles.config")
        .joinpath("default.yaml")
        .read_text(encoding="utf-8")
    )
    yaml = importlib.import_module("yaml")
    data = yaml.safe_load(text)
    if not isinstance(data, Mapping):
        raise ValueError("marbles default config must be a mapping")
    return data


def _parse_clock(data: object) -> ClockConfig:
    if not isinstance(data, Mapping):
        raise ValueError("clock must be a mapping")
    _reject_unknown(data, _CLOCK_KEYS, "clock")
    max_frames = data.get("max_frames")
    frame_ms = data.get("frame_ms", 1)
    if isinstance(max_frames, bool) or not isinstance(max_frames, int):
        raise ValueError("clock.max_frames must be an int")
    if isinstance(frame_ms, bool) or not isinstance(frame_ms, int):
        raise ValueError("clock.frame_ms must be an int")
    return ClockConfig(max_frames=max_frames, frame_ms=frame_ms)


def _parse_diagrams(data: object) -> DiagramConfig:
    if data is None:
        return DiagramConfig()
    if not isinstance(data, Mapping):
        raise ValueError("diagrams must be a mapping")
    _reject_unknown(data, _DIAGRAM_KEYS, "diagrams")
    default_error = data.get("default_error", "error")
    if not isinstance(default_error, str):
        raise ValueError("diagrams.default_error must be a string")
    return DiagramConfig(default_error=default_error)


def _reject_unknown(payload: Mapping[str, object], allowed: set[str], label: str) -> None:
    unknown = set(payload.keys()) - allowed
    if unknown:
        unknown_list = ", ".join(sorted(str(item) for item in unknown))
        raise ValueError(f"unknown {label} keys: {unknown_list}")
