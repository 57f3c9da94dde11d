from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from hillroute.exceptions import ConfigError

from .scenarios import list_scenarios


def format_validation_error(err: ValidationError, source: str) -> str:
    parts: List[str] = []
    for issue in err.errors():
        location = ".".join(str(item) for item in issue.get("loc", ()))
        message = issue.get("msg", "")
        parts.append(f"- field `{location}`: {message}")
    details = "\n".join(parts) if parts else str(err)
    return f"[SCHEMA] validation failed for {source}\n{details}"


class GridSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: Optional[str] = Field(None, description="Heightmap text file")
    scenario: Optional[str] = Field(None, description="Built-in scenario name")

    @field_validator("scenario")
    @classmethod
    def _known_scenario(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in list_scenarios():
            raise ValueError(f"unknown scenario {value!r}, expected one of {list_scenarios()}")
        return value

    @model_validator(mode="after")
    def _one_source(self) -> "GridSection":
        if (self.input is None) == (self.scenario is None):
            raise ValueError("exactly one of grid.input or grid.scenario is required")
        return self


class SearchSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Literal["single", "multi"] = Field("single", description="Single start or all lowest cells")
    strategy: Literal["independent", "reverse"] = Field("independent", description="Multi-source strategy")
    workers: int = Field(1, ge=1, description="Thread pool size for independent multi-source runs")
    max_expansions: Optional[int] = Field(None, ge=1, description="Per-search expansion budget")
    max_climb: int = Field(1, ge=0, le=25, description="Maximum elevation gain per step")

    @field_validator("strategy", "mode", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class RunConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    grid: GridSection
    search: SearchSection = Field(default_factory=SearchSection)


def validate_run_config(data: Dict[str, Any], source: str = "<dict>") -> RunConfig:
    try:
        return RunConfig.model_validate(data)
    except ValidationError as err:
        raise ConfigError("invalid run config", detail=format_validation_error(err, source)) from err


def validate_search_options(data: Dict[str, Any], source: str = "<dict>") -> SearchSection:
    """Apply the ``search`` section limits to values gathered outside a run file."""
    try:
        return SearchSection.model_validate(data)
    except ValidationError as err:
        raise ConfigError("invalid search options", detail=format_validation_error(err, source)) from err


def load_run_config(path: Union[str, Path]) -> RunConfig:
    """Read a YAML run file and validate it against ``RunConfig``."""
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigError("cannot read run config", detail=f"{p}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError("run config is not valid YAML", detail=f"{p}: {err}") from err

    if not isinstance(data, dict):
        raise ConfigError("run config must be a mapping", detail=str(p))

    cfg = validate_run_config(data, source=str(p))
    # 相对路径相对于配置文件所在目录
    if cfg.grid.input is not None and not Path(cfg.grid.input).is_absolute():
        cfg.grid.input = str((p.parent / cfg.grid.input).resolve())
    return cfg


__all__ = [
    "GridSection",
    "SearchSection",
    "RunConfig",
    "ValidationError",
    "format_validation_error",
    "validate_run_config",
    "validate_search_options",
    "load_run_config",
]
