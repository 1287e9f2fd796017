"""Configuration loading and validation for the entry points."""

from pseudo_hilbert.configs.loader import (
    BenchCase,
    BenchConfig,
    ConfigError,
    GenerateConfig,
    LoggingConfig,
    OutputConfig,
    RotateConfig,
    ScanConfig,
    load_config,
    load_raw_config,
    validate_config,
)

__all__ = [
    "BenchCase",
    "BenchConfig",
    "ConfigError",
    "GenerateConfig",
    "LoggingConfig",
    "OutputConfig",
    "RotateConfig",
    "ScanConfig",
    "load_config",
    "load_raw_config",
    "validate_config",
]
