"""Layer configuration loading and validation.

Projects describe their architectural boundaries in a ``layers.yaml``
file at the workspace root (or under ``.archguard/``)::

    layers:
      - name: domain
        level: 0
        patterns: ["*/domain/*"]
        allowed_deps: []
      - name: application
        level: 1
        patterns: ["*/services/*"]
        allowed_deps: [domain]
"""

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from archguard.exceptions import LayerConfigError
from archguard.models import Layer, LayerConfig

logger = structlog.get_logger()

CONFIG_FILENAMES = (
    "layers.yaml",
    "layers.yml",
    ".archguard/layers.yaml",
    ".archguard/layers.yml",
)


def default_layer_config() -> LayerConfig:
    """Clean-architecture defaults used when a workspace has no config."""
    return LayerConfig(
        layers=(
            Layer(
                name="domain",
                level=0,
                patterns=("*/domain/*", "*/models/*", "*/entities/*"),
            ),
            Layer(
                name="application",
                level=1,
                allowed_deps=frozenset({0}),
                patterns=("*/services/*", "*/handlers/*", "*/use_cases/*"),
            ),
            Layer(
                name="infrastructure",
                level=2,
                allowed_deps=frozenset({0, 1}),
                patterns=("*/db/*", "*/api/*", "*/adapters/*"),
            ),
            Layer(
                name="presentation",
                level=3,
                allowed_deps=frozenset({0, 1}),
                patterns=("*/ui/*", "*/views/*", "*/components/*"),
            ),
        )
    )


def parse_layer_config(content: str, source: str = "<string>") -> LayerConfig:
    """Parse YAML text into a ``LayerConfig``.

    Raises:
        LayerConfigError: if the YAML is malformed or fails validation.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise LayerConfigError(f"Failed to parse {source}: {e}") from e

    if data is None:
        data = {"layers": []}
    if not isinstance(data, dict):
        raise LayerConfigError(f"Failed to parse {source}: expected a mapping at top level")

    try:
        return LayerConfig.model_validate(data)
    except (ValidationError, ValueError) as e:
        raise LayerConfigError(f"Invalid layer config in {source}: {e}") from e


def load_layer_config(workspace_path: str | Path) -> LayerConfig:
    """Load the workspace's layer config, or the defaults if none exists.

    Raises:
        LayerConfigError: if a config file exists but cannot be read or parsed.
    """
    root = Path(workspace_path)

    for name in CONFIG_FILENAMES:
        config_path = root / name
        if not config_path.is_file():
            continue
        try:
            content = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise LayerConfigError(f"Failed to read {config_path}: {e}") from e

        config = parse_layer_config(content, str(config_path))
        logger.info("Loaded layer config", path=str(config_path), layers=len(config.layers))
        return config

    logger.debug("No layer config found, using defaults", workspace=str(root))
    return default_layer_config()


def validate_layer_config(config: LayerConfig) -> list[str]:
    """Check a config for internal consistency. Returns a list of problems."""
    errors = []
    levels = {layer.level for layer in config.layers}

    for layer in config.layers:
        for dep in sorted(layer.allowed_deps):
            if dep not in levels:
                errors.append(
                    f"Layer '{layer.name}' references unknown dependency level {dep}"
                )

        if layer.level in layer.allowed_deps:
            errors.append(
                f"Layer '{layer.name}' explicitly allows self-dependency (this is implicit)"
            )

        if not layer.patterns and not layer.members:
            errors.append(f"Layer '{layer.name}' has no patterns or members defined")

    seen: set[str] = set()
    for layer in config.layers:
        if layer.name in seen:
            errors.append(f"Duplicate layer name: '{layer.name}'")
        seen.add(layer.name)

    return errors
