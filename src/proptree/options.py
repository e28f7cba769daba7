"""Options controlling how a Tree is built from flat records.

Options can be given directly, loaded from a dictionary, or loaded from a
YAML or JSON file. Environment variables with the ``PROPTREE_`` prefix can
override any option:

    ```yaml
    # tree.yaml
    root_id: 0
    id_key: category_id
    parent_key: parent_category
    ```

    ```python
    from proptree import TreeOptions

    options = TreeOptions.from_file("tree.yaml").with_env_overrides()
    ```
"""

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from proptree.exceptions import ConfigurationError


@dataclass(frozen=True)
class TreeOptions:
    """Settings for building a tree from records.

    Attributes:
        root_id: Parent value marking top-level records. The builder's root
            node gets this value as its ID.
        id_key: Record field holding a node's identity (case-insensitive).
        parent_key: Record field holding the parent's identity
            (case-insensitive).
    """

    root_id: Any = 0
    id_key: str = "id"
    parent_key: str = "parent"

    ENV_PREFIX = "PROPTREE_"

    def __post_init__(self) -> None:
        for name in ("id_key", "parent_key"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"Option '{name}' must be a non-empty string",
                    context={"option": name, "value": value},
                )
        # Keys are matched against lower-cased record fields
        object.__setattr__(self, "id_key", self.id_key.lower())
        object.__setattr__(self, "parent_key", self.parent_key.lower())

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "TreeOptions":
        """Create options from a dictionary.

        Args:
            data: Option names to values. Missing options keep their defaults.

        Returns:
            TreeOptions instance

        Raises:
            ConfigurationError: If the dictionary contains unknown options.
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown tree options: {', '.join(unknown)}",
                context={"unknown": unknown, "known": sorted(known)},
            )
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TreeOptions":
        """Load options from a YAML or JSON file.

        Args:
            path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

        Returns:
            TreeOptions instance

        Raises:
            ConfigurationError: If the file is missing, has an unsupported
                format, or does not contain a mapping.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigurationError(
                f"Options file not found: {path}", context={"path": str(path)}
            )

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported file format: {suffix}", context={"path": str(path)}
                )

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                f"Options file must contain a mapping: {path}", context={"path": str(path)}
            )
        return cls.from_dict(data)

    def with_env_overrides(self, prefix: str | None = None) -> "TreeOptions":
        """Get a copy with values overridden from environment variables.

        ``PROPTREE_ROOT_ID``, ``PROPTREE_ID_KEY`` and ``PROPTREE_PARENT_KEY``
        are recognized. The root ID is parsed as a YAML scalar, so ``0``
        becomes an int and ``null`` becomes None; the key names stay strings.

        Args:
            prefix: Environment variable prefix (default: ``PROPTREE_``)

        Returns:
            New TreeOptions instance
        """
        prefix = prefix or self.ENV_PREFIX
        overrides = {}
        for f in fields(self):
            env_var = f"{prefix}{f.name.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                overrides[f.name] = _parse_value(value) if f.name == "root_id" else value
        return replace(self, **overrides) if overrides else self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_value(value: str) -> Any:
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value
