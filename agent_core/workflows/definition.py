"""
Workflow Definition

Parse, validate, and represent workflow definitions from JSON or YAML files.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from agent_core.exceptions import WorkflowDefinitionError

STEP_TYPES = ("ai_agent", "tool")


@dataclass(frozen=True)
class StepDefinition:
    """Workflow step definition."""

    id: str
    type: str
    tool: Optional[str] = None
    args: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    condition: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepDefinition":
        """
        Create from dictionary.

        Args:
            data: Step definition dictionary; the condition is read from ``if``

        Returns:
            StepDefinition instance
        """
        args = data.get("args")
        if args is None:
            args = {}
        if isinstance(args, Mapping):
            args = MappingProxyType(dict(args))

        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            tool=data.get("tool"),
            args=args,
            condition=data.get("if"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "type": self.type}
        if self.tool is not None:
            data["tool"] = self.tool
        if isinstance(self.args, Mapping) and self.args:
            data["args"] = dict(self.args)
        if self.condition is not None:
            data["if"] = self.condition
        return data


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Workflow definition.

    An ordered, immutable sequence of steps with an optional name.
    """

    name: Optional[str] = None
    steps: Tuple[StepDefinition, ...] = ()
    description: str = ""

    @property
    def display_name(self) -> str:
        return self.name or "unnamed"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowDefinition":
        """
        Create from dictionary.

        A top-level ``workflow`` wrapper is accepted and unwrapped.

        Raises:
            WorkflowDefinitionError: If the document is not a mapping with a step list
        """
        if not isinstance(data, dict):
            raise WorkflowDefinitionError(["Workflow document must be a mapping"])
        if "workflow" in data and "steps" not in data:
            data = data["workflow"]
            if not isinstance(data, dict):
                raise WorkflowDefinitionError(["'workflow' must be a mapping"])

        raw_steps = data.get("steps", [])
        if not isinstance(raw_steps, list):
            raise WorkflowDefinitionError(["'steps' must be a list"])

        steps = []
        for index, step_data in enumerate(raw_steps):
            if not isinstance(step_data, dict):
                raise WorkflowDefinitionError([f"Step #{index + 1} must be a mapping"])
            steps.append(StepDefinition.from_dict(step_data))

        return cls(
            name=data.get("name"),
            steps=tuple(steps),
            description=data.get("description", ""),
        )

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "WorkflowDefinition":
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise WorkflowDefinitionError([f"Invalid YAML: {e}"])
        return cls.from_dict(data)

    @classmethod
    def from_json(cls, json_str: str) -> "WorkflowDefinition":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise WorkflowDefinitionError([f"Invalid JSON: {e}"])
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "WorkflowDefinition":
        """
        Load workflow from a ``.json`` file, or a YAML file for any other suffix.

        Raises:
            FileNotFoundError: If file doesn't exist
            WorkflowDefinitionError: If the content cannot be parsed
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Workflow file not found: {file_path}")

        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        if path.suffix.lower() == ".json":
            return cls.from_json(content)
        return cls.from_yaml(content)

    def validate(self) -> List[str]:
        """
        Validate workflow definition.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.steps:
            errors.append("Workflow must have at least one step")

        seen_ids = set()
        for index, step in enumerate(self.steps):
            label = f"'{step.id}'" if step.id else f"#{index + 1}"

            if not step.id or not isinstance(step.id, str):
                errors.append(f"Step #{index + 1} must have a non-empty 'id'")
            elif step.id in seen_ids:
                errors.append(f"Duplicate step id '{step.id}'")
            else:
                seen_ids.add(step.id)

            if step.type not in STEP_TYPES:
                errors.append(
                    f"Step {label} has invalid type '{step.type}'. "
                    f"Must be one of: {', '.join(STEP_TYPES)}"
                )

            if step.type == "tool" and not step.tool:
                errors.append(f"Tool step {label} must specify 'tool'")
            elif step.type == "ai_agent" and step.tool:
                errors.append(f"AI agent step {label} must not specify 'tool'")

            if not isinstance(step.args, Mapping):
                errors.append(f"Step {label} 'args' must be a mapping")
            elif step.type == "ai_agent" and "prompt" not in step.args:
                errors.append(f"AI agent step {label} must have a 'prompt' argument")

            if step.condition is not None and not isinstance(step.condition, str):
                errors.append(f"Step {label} 'if' must be a string")

        return errors

    def tool_names(self) -> List[str]:
        """Distinct tool names referenced by tool steps, in step order."""
        names: List[str] = []
        for step in self.steps:
            if step.type == "tool" and step.tool and step.tool not in names:
                names.append(step.tool)
        return names

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"steps": [step.to_dict() for step in self.steps]}
        if self.name is not None:
            data["name"] = self.name
        if self.description:
            data["description"] = self.description
        return data
