"""YAML configuration loader for the impact agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from node_impact.classes import DEFAULT_INGRESS_CLASS
from node_impact.exceptions import InvalidAnnotation
from node_impact.models import TargetMode

SOURCE_TYPES = ("file", "kubernetes")


@dataclass
class ControllerConfig:
    ingress_class: str = DEFAULT_INGRESS_CLASS
    workers: int = 1
    default_target_type: TargetMode = TargetMode.INSTANCE


@dataclass
class SourceConfig:
    type: str
    path: Optional[Path] = None
    interval: float = 5.0
    options: dict = field(default_factory=dict)


@dataclass
class AgentConfig:
    controller: ControllerConfig
    source: SourceConfig


def _parse_target_type(value: str) -> TargetMode:
    try:
        return TargetMode.parse(value)
    except InvalidAnnotation as exc:
        raise ValueError(str(exc)) from None


def _parse_controller(section: dict) -> ControllerConfig:
    workers = int(section.get("workers", 1))
    if workers < 1:
        raise ValueError("controller 'workers' must be at least 1")
    ingress_class = section.get("ingress_class", DEFAULT_INGRESS_CLASS)
    return ControllerConfig(
        ingress_class="" if ingress_class is None else str(ingress_class),
        workers=workers,
        default_target_type=_parse_target_type(
            section.get("default_target_type", TargetMode.INSTANCE.value)
        ),
    )


def _parse_source(section: dict) -> SourceConfig:
    source_type = str(section.get("type", ""))
    if source_type not in SOURCE_TYPES:
        raise ValueError(f"unsupported source type '{source_type}'")
    options = section.get("options", {})
    if not isinstance(options, dict):
        raise ValueError("source 'options' must be a mapping if provided")

    path = section.get("path")
    if source_type == "file" and not path:
        raise ValueError("file source requires a 'path'")

    return SourceConfig(
        type=source_type,
        path=Path(path) if path else None,
        interval=float(section.get("interval", section.get("poll_interval", 5.0))),
        options=options,
    )


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    controller_section = data.get("controller")
    if controller_section is None:
        raise ValueError("Configuration missing 'controller' section")
    if not isinstance(controller_section, dict):
        raise ValueError("'controller' section must be a mapping")

    source_section = data.get("source")
    if source_section is None:
        raise ValueError("Configuration missing 'source' section")
    if not isinstance(source_section, dict):
        raise ValueError("'source' section must be a mapping")

    return AgentConfig(
        controller=_parse_controller(controller_section),
        source=_parse_source(source_section),
    )
