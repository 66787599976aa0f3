# python/flipmetric/config.py
# Metric configuration parsing: perceptual constants, worker count and tiling.
# Exists so callers can tune execution without touching the metric code.
# RELEVANT FILES: python/flipmetric/metric.py, python/flipmetric/filters.py, tests/test_config.py
from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import InvalidParameter

ConfigSource = Union["MetricConfig", Mapping[str, Any], str, Path, None]

WORKERS_ENV = "FLIPMETRIC_WORKERS"

CsfParams = Tuple[float, float, float, float]

# (a1, b1, a2, b2) of the two-Gaussian contrast sensitivity model per YCxCz channel
_DEFAULT_CSF: Dict[str, CsfParams] = {
    "achromatic": (1.0, 0.0047, 0.0, 1e-5),
    "red_green": (1.0, 0.0053, 0.0, 1e-5),
    "blue_yellow": (34.1, 0.04, 13.5, 0.025),
}

_CSF_ALIASES: Dict[str, str] = {
    "a": "achromatic",
    "achromatic": "achromatic",
    "y": "achromatic",
    "rg": "red_green",
    "redgreen": "red_green",
    "cx": "red_green",
    "by": "blue_yellow",
    "blueyellow": "blue_yellow",
    "cz": "blue_yellow",
}


def _normalize_key(value: Any) -> str:
    return "".join(
        c
        for c in str(value).strip().lower()
        if c not in {"-", "_", " ", "."}
    )


def _normalize_choice(value: Any, mapping: Mapping[str, str], label: str) -> str:
    key = _normalize_key(value)
    if key not in mapping:
        raise InvalidParameter(f"Unknown {label}: {value!r}")
    return mapping[key]


def _to_float4(value: Any, label: str) -> CsfParams:
    if isinstance(value, (list, tuple)) and len(value) == 4:
        return (float(value[0]), float(value[1]), float(value[2]), float(value[3]))
    raise InvalidParameter(f"{label} must be a sequence of four numeric values")


@dataclass
class FlipParameters:
    qc: float = 0.7
    qf: float = 0.5
    pc: float = 0.4
    pt: float = 0.95
    feature_width: float = 0.082
    truncation: float = 3.0
    csf: Dict[str, CsfParams] = field(default_factory=lambda: dict(_DEFAULT_CSF))

    def to_dict(self) -> dict:
        return {
            "qc": self.qc,
            "qf": self.qf,
            "pc": self.pc,
            "pt": self.pt,
            "feature_width": self.feature_width,
            "truncation": self.truncation,
            "csf": {k: list(v) for k, v in self.csf.items()},
        }

    def validate(self) -> None:
        for name in ("qc", "qf", "feature_width", "truncation"):
            if getattr(self, name) <= 0.0:
                raise InvalidParameter(f"parameters.{name} must be > 0")
        if not (0.0 < self.pc < 1.0):
            raise InvalidParameter("parameters.pc must be within (0, 1)")
        if not (0.0 < self.pt < 1.0):
            raise InvalidParameter("parameters.pt must be within (0, 1)")
        for channel, (a1, b1, a2, b2) in self.csf.items():
            if b1 <= 0.0 or b2 <= 0.0:
                raise InvalidParameter(f"parameters.csf.{channel} widths must be > 0")
            if a1 < 0.0 or a2 < 0.0 or a1 + a2 == 0.0:
                raise InvalidParameter(f"parameters.csf.{channel} amplitudes must be >= 0 and not both zero")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["FlipParameters"] = None) -> "FlipParameters":
        base = copy.deepcopy(default) if default is not None else cls()
        for name in ("qc", "qf", "pc", "pt", "feature_width", "truncation"):
            if name in data:
                setattr(base, name, float(data[name]))
        if "csf" in data:
            csf = data["csf"]
            if not isinstance(csf, Mapping):
                raise InvalidParameter("parameters.csf must be a mapping of channel -> (a1, b1, a2, b2)")
            for key, value in csf.items():
                channel = _normalize_choice(key, _CSF_ALIASES, "CSF channel")
                base.csf[channel] = _to_float4(value, f"csf.{channel}")
        return base


@dataclass
class MetricConfig:
    parameters: FlipParameters = field(default_factory=FlipParameters)
    workers: int = 1
    tile_rows: int = 256

    def to_dict(self) -> dict:
        return {
            "parameters": self.parameters.to_dict(),
            "workers": self.workers,
            "tile_rows": self.tile_rows,
        }

    def validate(self) -> None:
        if self.workers < 1:
            raise InvalidParameter(f"workers must be >= 1, got {self.workers}")
        if self.tile_rows < 1:
            raise InvalidParameter(f"tile_rows must be >= 1, got {self.tile_rows}")
        self.parameters.validate()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["MetricConfig"] = None) -> "MetricConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "parameters" in data:
            params = data["parameters"]
            if not isinstance(params, Mapping):
                raise InvalidParameter("parameters must be a mapping")
            base.parameters = FlipParameters.from_mapping(params, base.parameters)
        if "workers" in data:
            base.workers = int(data["workers"])
        if "tile_rows" in data:
            base.tile_rows = int(data["tile_rows"])
        return base


def _load_from_path(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, Mapping):
        raise InvalidParameter(f"config file {path} must contain a JSON object")
    return data


def _env_defaults() -> MetricConfig:
    base = MetricConfig()
    raw = os.environ.get(WORKERS_ENV, "").strip()
    if raw:
        try:
            base.workers = int(raw)
        except ValueError as e:
            raise InvalidParameter(f"{WORKERS_ENV} must be an integer, got {raw!r}") from e
    return base


def load_metric_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> MetricConfig:
    """Resolve a MetricConfig from an object, mapping, JSON path or environment defaults."""
    if isinstance(config, MetricConfig):
        base = copy.deepcopy(config)
    elif config is None:
        base = _env_defaults()
    elif isinstance(config, (str, Path)):
        base = MetricConfig.from_mapping(_load_from_path(Path(config)), _env_defaults())
    elif isinstance(config, Mapping):
        base = MetricConfig.from_mapping(config, _env_defaults())
    else:
        raise TypeError(f"Unsupported config source: {type(config).__name__}")
    if overrides:
        base = MetricConfig.from_mapping(overrides, base)
    base.validate()
    return base


__all__ = [
    "WORKERS_ENV",
    "FlipParameters",
    "MetricConfig",
    "load_metric_config",
]
