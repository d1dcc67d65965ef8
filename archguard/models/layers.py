"""Architectural layer models.

A layer groups symbols (by explicit membership or file glob) and declares
which lower levels it may depend on. Dependencies inside a layer are
always allowed.
"""

from enum import Enum
from fnmatch import fnmatchcase
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .symbols import Symbol


class ViolationKind(str, Enum):
    """Why an edge breaks the layering."""

    UPSTREAM_DEPENDENCY = "upstream_dependency"
    CYCLE = "cycle"


class Layer(BaseModel):
    """A single architectural layer."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    level: int
    allowed_deps: frozenset[int] = Field(
        default_factory=frozenset, description="Levels this layer may depend on"
    )
    patterns: tuple[str, ...] = Field(
        default=(), description="Glob patterns matched against file paths"
    )
    members: tuple[str, ...] = Field(
        default=(), description="Symbol ids assigned to this layer explicitly"
    )

    def matches(self, symbol: Symbol) -> bool:
        """Check whether a symbol falls under one of this layer's patterns."""
        return any(
            fnmatchcase(symbol.file_path, pattern) or fnmatchcase(symbol.id, pattern)
            for pattern in self.patterns
        )

    def may_depend_on(self, other: "Layer") -> bool:
        return (
            other.name == self.name
            or other.level == self.level
            or other.level in self.allowed_deps
        )

    def describe_rule(self, level_names: dict[int, str]) -> str:
        """Render the layer's rule as a sentence for agent prompts."""
        if not self.allowed_deps:
            return f"Layer '{self.name}' has no external dependencies (base layer)"
        allowed = ", ".join(
            level_names.get(level, str(level)) for level in sorted(self.allowed_deps)
        )
        return f"Layer '{self.name}' may only depend on: [{allowed}]"


class LayerConfig(BaseModel):
    """Ordered set of layers, immutable once built.

    ``allowed_deps`` may be given as level numbers or layer names when the
    config is built from plain data (e.g. a ``layers.yaml`` file); names are
    resolved to levels here.
    """

    model_config = ConfigDict(frozen=True)

    layers: tuple[Layer, ...] = ()

    _members: dict[str, Layer] = PrivateAttr(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _resolve_layer_names(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "layers" not in data:
            return data

        raw_layers = list(data["layers"] or [])
        levels: dict[str, int] = {}
        for index, raw in enumerate(raw_layers):
            if isinstance(raw, Layer):
                levels[raw.name] = raw.level
            elif isinstance(raw, dict) and "name" in raw:
                levels[raw["name"]] = raw.get("level", index)

        resolved = []
        for index, raw in enumerate(raw_layers):
            if isinstance(raw, dict):
                raw = dict(raw)
                raw.setdefault("level", index)
                deps = []
                for dep in raw.get("allowed_deps") or []:
                    if isinstance(dep, str) and not dep.lstrip("-").isdigit():
                        if dep not in levels:
                            raise ValueError(
                                f"Layer '{raw.get('name')}' references unknown layer '{dep}'"
                            )
                        deps.append(levels[dep])
                    else:
                        deps.append(int(dep))
                raw["allowed_deps"] = frozenset(deps)
                raw["patterns"] = tuple(raw.get("patterns") or ())
                raw["members"] = tuple(raw.get("members") or ())
            resolved.append(raw)

        return {**data, "layers": tuple(resolved)}

    def model_post_init(self, __context: Any) -> None:
        for layer in self.layers:
            for member in layer.members:
                self._members.setdefault(member, layer)

    def layer_for(self, symbol: Symbol) -> Layer | None:
        """Resolve the layer of a symbol; ``None`` if it is unlayered."""
        explicit = self._members.get(symbol.id)
        if explicit is not None:
            return explicit
        for layer in self.layers:
            if layer.matches(symbol):
                return layer
        return None

    def get_layer(self, name: str) -> Layer | None:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def level_names(self) -> dict[int, str]:
        names: dict[int, str] = {}
        for layer in self.layers:
            names.setdefault(layer.level, layer.name)
        return names

    def describe_rules(self) -> list[str]:
        """Human-readable rule per layer, in level order."""
        names = self.level_names()
        return [
            layer.describe_rule(names)
            for layer in sorted(self.layers, key=lambda l: (l.level, l.name))
        ]


class LayerViolation(BaseModel):
    """A dependency that crosses a layer boundary in a disallowed direction."""

    model_config = ConfigDict(frozen=True)

    from_id: str
    from_layer: str
    to_id: str
    to_layer: str
    violation_kind: ViolationKind = ViolationKind.UPSTREAM_DEPENDENCY

    def describe(self) -> str:
        return f"{self.from_id} -> {self.to_id} ({self.violation_kind.value})"

    @property
    def message(self) -> str:
        if self.violation_kind == ViolationKind.CYCLE:
            return (
                f"Cycle crosses layers: {self.from_layer} -> {self.to_layer} "
                f"({self.from_id} -> {self.to_id})"
            )
        return (
            f"Disallowed dependency: {self.from_layer} -> {self.to_layer} "
            f"({self.from_id} -> {self.to_id})"
        )
