"""Suite configuration (targets, pipeline budgets, repetition policy)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tb_common.config.env import env_path
from tb_common.errors import ConfigurationError
from tb_runner.surface.interface import CreationTrigger, Selectors


class TargetDescriptor(BaseModel):
    """Immutable description of one target under test."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique display name of the target")
    entry_point: str = Field(description="URL or path the surface loads")
    attributes: Tuple[Tuple[str, str], ...] = Field(
        default=(),
        description="Ordered key-value pairs such as language and version",
    )
    enabled: bool = Field(default=True, description="Include this target in suite runs")
    creation_trigger: CreationTrigger = Field(
        default=CreationTrigger.CHANGE,
        description="Signal sequence that submits a new todo",
    )
    wait_for_focus: bool = Field(
        default=False, description="Wait for the input's focus event before typing"
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_attribute_mapping(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("attributes"), dict):
            data = dict(data)
            data["attributes"] = tuple(
                (str(key), str(value)) for key, value in data["attributes"].items()
            )
        return data

    @model_validator(mode="after")
    def _validate_name_not_empty(self) -> "TargetDescriptor":
        if not self.name or not self.name.strip():
            raise ValueError("TargetDescriptor: 'name' must be non-empty")
        return self

    def attribute(self, key: str) -> Optional[str]:
        """Return the first attribute value stored under ``key``."""
        for attr, value in self.attributes:
            if attr == key:
                return value
        return None

    @property
    def language(self) -> Optional[str]:
        return self.attribute("language")

    @property
    def version(self) -> Optional[str]:
        return self.attribute("version")


class PipelineSettings(BaseModel):
    """Item count and per-operation time budgets, in seconds."""

    model_config = ConfigDict(frozen=True)

    todo_count: int = Field(default=100, gt=0, description="Items to create, complete and delete")
    load_timeout: float = Field(default=10.0, ge=0)
    input_timeout: float = Field(default=5.0, ge=0)
    focus_timeout: float = Field(default=1.0, ge=0)
    create_item_timeout: float = Field(default=1.0, ge=0, description="Budget to confirm one created item")
    complete_timeout: float = Field(default=5.0, ge=0)
    await_clear_completed: bool = Field(
        default=True, description="Treat the clear-completed button as the completion signal"
    )
    clear_completed_timeout: float = Field(default=1.0, ge=0)
    delete_confirm_timeout: float = Field(
        default=1.0, ge=0, description="Budget to see every destroy control before deleting"
    )
    delete_item_timeout: float = Field(default=1.0, ge=0, description="Budget to confirm one deletion")
    delete_timeout: float = Field(default=5.0, ge=0, description="Budget for the whole deletion loop")
    tick_interval: float = Field(
        default=0.001, ge=0, description="Delay between polls of the default clock"
    )
    selectors: Selectors = Field(default_factory=Selectors)


class SuiteConfig(BaseModel):
    """Main configuration for a suite of target runs."""

    targets: List[TargetDescriptor] = Field(default_factory=list, description="Ordered target list")
    avg_times: int = Field(default=1, ge=1, description="Repetitions of the whole target list")
    shuffle: bool = Field(default=True, description="Shuffle each repetition batch independently")
    seed: Optional[int] = Field(default=None, description="Seed for the shuffling RNG")
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    results_path: Optional[Path] = Field(
        default=None, description="JSON store for results (TB_RESULTS_PATH when unset)"
    )

    @model_validator(mode="after")
    def _validate_target_names_unique(self) -> "SuiteConfig":
        names = [target.name.strip() for target in self.targets]
        if len(names) != len(set(names)):
            raise ValueError("SuiteConfig: target names must be unique")
        return self

    def resolved_results_path(self) -> Optional[Path]:
        return self.results_path or env_path("TB_RESULTS_PATH")

    def target(self, name: str) -> TargetDescriptor:
        for target in self.targets:
            if target.name == name:
                return target
        raise ConfigurationError(f"Unknown target: {name}", context={"target": name})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuiteConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError("Invalid suite configuration", cause=exc) from exc

    @classmethod
    def from_json(cls, json_str: str) -> "SuiteConfig":
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, filepath: Path) -> "SuiteConfig":
        """Load a JSON or YAML file, chosen by suffix."""
        text = Path(filepath).read_text(encoding="utf-8")
        if Path(filepath).suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Suite configuration must be a mapping", context={"path": filepath}
            )
        return cls.from_dict(data)

    def save(self, filepath: Path) -> None:
        filepath.write_text(self.model_dump_json(indent=2), encoding="utf-8")
