"""Pipeline configuration.

Every stage has its own dataclass with the defaults used across the package.
`TrajectoryConfig.from_env` reads `TRAJCLEAN_<SECTION>_<FIELD>` variables
(optionally from a local `.env`), and `validate` rejects bad values before any
processing starts.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from dotenv import load_dotenv

from trajclean.errors import ConfigurationError
from trajclean.modules.datum.transform import Datum
from trajclean.modules.simplification.engine import Algorithm


_BOOL_WORDS = {
    "1": True, "true": True, "yes": True, "on": True,
    "0": False, "false": False, "no": False, "off": False,
}


def _parse_bool(raw: str) -> bool:
    try:
        return _BOOL_WORDS[raw.strip().lower()]
    except KeyError:
        raise ValueError(f"not a boolean: {raw!r}") from None


# Keyed by the type of the field default.
_ENV_PARSERS = {
    bool: _parse_bool,
    int: int,
    float: float,
    str: str.strip,
}


def _env_value(key: str, default):
    """
    Reads one setting, parsed to the type of `default`. Unset, blank or
    unparsable values keep the default.
    """
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return _ENV_PARSERS[type(default)](raw)
    except ValueError:
        return default


@dataclass
class DatumConfig:
    enabled: bool = False
    # One of WGS84, GCJ02, BD09.
    source: str = "WGS84"
    target: str = "GCJ02"


@dataclass
class FilterConfig:
    enabled: bool = False
    max_speed: float = 180.0  # km/h
    min_speed: float = 0.5  # km/h
    max_accuracy: float = 100.0  # m
    max_time_interval: int = 300000  # ms, 5 minutes
    max_distance: float = 10000.0  # m


@dataclass
class SimplifyConfig:
    enabled: bool = True
    tolerance: float = 5.0  # m
    # DOUGLAS_PEUCKER, VISVALINGAM, REUMANN_WITKAM or PERPENDICULAR_DISTANCE
    algorithm: str = "DOUGLAS_PEUCKER"
    keep_endpoints: bool = True
    min_point_count: int = 3


@dataclass
class StatisticsConfig:
    enabled: bool = True
    formatted_output: bool = True


_SECTIONS = {
    "datum": DatumConfig,
    "filter": FilterConfig,
    "simplify": SimplifyConfig,
    "statistics": StatisticsConfig,
}


def _section_from_env(cls, prefix: str):
    values = {f.name: _env_value(f"{prefix}{f.name.upper()}", f.default) for f in dataclasses.fields(cls)}
    return cls(**values)


def _section_from_mapping(cls, name: str, values: Mapping[str, Any]):
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown {name} option(s): {', '.join(sorted(unknown))}")
    return cls(**values)


@dataclass
class TrajectoryConfig:
    enabled: bool = True
    datum: DatumConfig = field(default_factory=DatumConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    simplify: SimplifyConfig = field(default_factory=SimplifyConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrajectoryConfig":
        """Builds a config from a nested mapping such as a parsed YAML/JSON document."""
        data = dict(data or {})
        kwargs: dict[str, Any] = {}
        if "enabled" in data:
            kwargs["enabled"] = bool(data.pop("enabled"))
        for name, section_cls in _SECTIONS.items():
            if name in data:
                kwargs[name] = _section_from_mapping(section_cls, name, data.pop(name) or {})
        if data:
            raise ConfigurationError(f"Unknown configuration section(s): {', '.join(sorted(data))}")
        return cls(**kwargs)

    @classmethod
    def from_env(cls, prefix: str = "TRAJCLEAN_") -> "TrajectoryConfig":
        """Reads the config from environment variables, loading `.env` first."""
        load_dotenv()
        return cls(
            enabled=_env_value(f"{prefix}ENABLED", True),
            **{
                name: _section_from_env(section_cls, f"{prefix}{name.upper()}_")
                for name, section_cls in _SECTIONS.items()
            },
        )

    def validate(self) -> None:
        """Raises ConfigurationError describing the first invalid value."""
        if self.datum.enabled:
            for label, value in (("source", self.datum.source), ("target", self.datum.target)):
                if Datum.parse(value) is None:
                    raise ConfigurationError(
                        f"Unsupported datum {label} {value!r}; supported: "
                        f"{', '.join(d.value for d in Datum)}"
                    )

        if self.filter.enabled:
            for name in ("max_speed", "max_accuracy", "max_time_interval", "max_distance"):
                if getattr(self.filter, name) <= 0:
                    raise ConfigurationError(f"filter.{name} must be greater than 0")
            if self.filter.min_speed < 0:
                raise ConfigurationError("filter.min_speed must not be negative")

        if self.simplify.enabled:
            if self.simplify.tolerance <= 0:
                raise ConfigurationError("simplify.tolerance must be greater than 0")
            if self.simplify.min_point_count < 2:
                raise ConfigurationError("simplify.min_point_count must be at least 2")
            if Algorithm.parse(self.simplify.algorithm) is None:
                raise ConfigurationError(
                    f"Unsupported simplification algorithm {self.simplify.algorithm!r}; supported: "
                    f"{', '.join(a.value for a in Algorithm)}"
                )

    def describe(self) -> str:
        return "\n".join([
            "Trajectory processing configuration:",
            f"Enabled: {self.enabled}",
            f"Datum transform: {self.datum.enabled} ({self.datum.source} -> {self.datum.target})",
            f"Noise filter: {self.filter.enabled} (max speed {self.filter.max_speed:.1f} km/h)",
            f"Simplification: {self.simplify.enabled} "
            f"(tolerance {self.simplify.tolerance:.1f} m, algorithm {self.simplify.algorithm})",
            f"Statistics: {self.statistics.enabled}",
        ])
