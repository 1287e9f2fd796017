"""Configuration loader for the hilbertgen and hilbertbench entry points.

Loads YAML files into validated pydantic models.  The entry points read
the file with ``load_raw_config()``, apply command-line flags to the raw
mapping and only then call ``validate_config()``, so a config file only
needs the keys the flags do not supply.

Usage::

    from pseudo_hilbert.configs.loader import GenerateConfig, load_config
    cfg = load_config("configs/hilbertgen.yaml", GenerateConfig)
    cfg.scan.size          # (width, height)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from pseudo_hilbert.arb import ALGORITHMS
from pseudo_hilbert.render import RENDERERS
from pseudo_hilbert.utils.fs import load_yaml

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

OUTPUT_FORMATS = tuple(RENDERERS) + ("png",)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ScanConfig(BaseModel):
    """Grid size and scan algorithm."""

    width: int = Field(..., ge=0, description="Grid width in cells")
    height: int = Field(..., ge=0, description="Grid height in cells")
    algorithm: str = Field("zhang-arb", description="Scan algorithm name")
    coord_bits: int = Field(32, ge=8, le=64, description="Coordinate width in bits")

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in ALGORITHMS:
            raise ValueError(f"algorithm must be one of {sorted(ALGORITHMS)}, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_fits_coord_bits(self) -> "ScanConfig":
        limit = 1 << self.coord_bits
        for name, value in (("width", self.width), ("height", self.height)):
            if value >= limit:
                raise ValueError(f"{name}={value} does not fit in {self.coord_bits} bits")
        return self

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


class OutputConfig(BaseModel):
    """Rendering options."""

    format: str = Field("ascii", description="Output format")
    path: Optional[str] = Field(None, description="Output file; stdout when omitted")
    svg_scale: int = Field(10, ge=1, description="SVG pixels per cell")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"format must be one of {list(OUTPUT_FORMATS)}, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_png_has_path(self) -> "OutputConfig":
        if self.format == "png" and not self.path:
            raise ValueError("format 'png' requires an output path")
        return self


class RotateConfig(BaseModel):
    """Log file rotation, by size or by time."""

    mode: Literal["size", "time"] = "size"
    max_bytes: int = Field(10_000_000, ge=1, description="Size mode: bytes per file")
    when: str = Field("D", description="Time mode: TimedRotatingFileHandler unit")
    interval: int = Field(1, ge=1, description="Time mode: units per file")
    backup_count: int = Field(3, ge=0, description="Rotated files kept")


class LoggingConfig(BaseModel):
    """Arguments for ``setup_logging()``."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_file: Optional[str] = None
    json_format: bool = Field(False, alias="json")
    color: bool = True
    rotate: Optional[RotateConfig] = None

    model_config = {"populate_by_name": True}

    def setup_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``setup_logging()``."""
        return {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "json": self.json_format,
            "color": self.color,
            "rotate": self.rotate.model_dump() if self.rotate else None,
        }


class GenerateConfig(BaseModel):
    """Top-level hilbertgen config."""

    scan: ScanConfig
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class BenchCase(BaseModel):
    """One benchmark size."""

    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


def _default_bench_cases() -> List[BenchCase]:
    return [
        BenchCase(width=4, height=4),
        BenchCase(width=16, height=16),
        BenchCase(width=256, height=256),
        BenchCase(width=114, height=514),
    ]


class BenchConfig(BaseModel):
    """Top-level hilbertbench config."""

    cases: List[BenchCase] = Field(default_factory=_default_bench_cases, min_length=1)
    algorithms: List[str] = Field(default_factory=lambda: ["zhang", "zhang-arb"], min_length=1)
    repeats: int = Field(5, ge=1, le=1000)
    coord_bits: int = Field(32, ge=8, le=64, description="Coordinate width in bits")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("algorithms")
    @classmethod
    def validate_algorithms(cls, v: List[str]) -> List[str]:
        unknown = [a for a in v if a not in ALGORITHMS]
        if unknown:
            raise ValueError(f"unknown algorithms {unknown}, expected {sorted(ALGORITHMS)}")
        return v

    @model_validator(mode="after")
    def validate_cases_fit_coord_bits(self) -> "BenchConfig":
        limit = 1 << self.coord_bits
        for case in self.cases:
            if case.width >= limit or case.height >= limit:
                raise ValueError(
                    f"case {case.width}x{case.height} does not fit in {self.coord_bits} bits"
                )
        return self


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_raw_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML config as a plain mapping, without validating it.

    Used by the entry points to merge command-line overrides before
    validation, so a file may leave out keys the flags supply.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, or is not a mapping.
    """
    path = Path(path)
    try:
        raw = load_yaml(path)
    except (FileNotFoundError, yaml.YAMLError) as e:
        raise ConfigError(str(e)) from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(raw).__name__}")
    return raw


def validate_config(raw: Dict[str, Any], model: Type[ModelT], source: str = "<merged>") -> ModelT:
    """Validate a mapping against ``model``; ``source`` names it in errors."""
    try:
        cfg = model.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {source}:\n{e}") from e

    logger.debug("Loaded %s from %s", model.__name__, source)
    return cfg


def load_config(path: Union[str, Path], model: Type[ModelT]) -> ModelT:
    """Load and validate a YAML config.

    Parameters
    ----------
    path : str or Path
        YAML file path
    model : type
        ``GenerateConfig`` or ``BenchConfig``

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, or fails validation.
    """
    return validate_config(load_raw_config(path), model, str(path))
