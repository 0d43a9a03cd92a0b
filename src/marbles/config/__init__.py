from marbles.config.loader import load_default_config, parse_config
from marbles.config.schema import ClockConfig, DiagramConfig, HarnessConfig, validate_config

__all__ = [
    "ClockConfig",
    "DiagramConfig",
    "HarnessConfig",
    "load_default_config",
    "parse_config",
    "validate_config",
]
