"""
Configuration file support for permutation tests.

Supports YAML and JSON config files describing a run_permutation_test call:

    method: intra_group_alleles
    n_permutations: 9999
    group_ids: [1, 2]
    alternative: two-sided
    seed: 42
    n_jobs: 4
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from popgenperm.stats.permutation_test import ALTERNATIVES, PERMUTATION_METHODS


@dataclass
class PermutationConfig:
    """Permutation test configuration.

    Mirrors the keyword arguments of run_permutation_test.
    """
    method: str = "multi_g"
    n_permutations: int = 999
    group_ids: Optional[List[int]] = None
    alternative: str = "greater"
    seed: Optional[int] = None
    n_jobs: int = 1

    def __post_init__(self):
        if self.method not in PERMUTATION_METHODS:
            raise ValueError(
                f"Unknown permutation method: {self.method}. "
                f"Use one of {sorted(PERMUTATION_METHODS)}"
            )
        if self.alternative not in ALTERNATIVES:
            raise ValueError(f"Unknown alternative: {self.alternative}. Use one of {list(ALTERNATIVES)}")
        if self.n_permutations < 1:
            raise ValueError(f"n_permutations must be >= 1, got {self.n_permutations}")
        if self.n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {self.n_jobs}")
        if self.group_ids is not None:
            self.group_ids = [int(gid) for gid in self.group_ids]

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "PermutationConfig":
        """
        Build from a mapping, accepting either a flat mapping or one nested
        under a "permutation" key.

        Raises:
            ValueError: If the mapping has unknown keys or invalid values
        """
        section = config.get("permutation", config)
        if not isinstance(section, dict):
            raise ValueError("'permutation' section must be a dictionary/mapping")
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(section) - known)
        if unknown:
            raise ValueError(f"Unknown permutation config keys: {unknown}")
        return cls(**section)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "PermutationConfig":
        return cls.from_dict(load_config(Path(config_path)))

    def to_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for run_permutation_test."""
        return asdict(self)


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Read a permutation settings file into a plain mapping.

    The file holds either the settings themselves or a ``permutation:``
    section wrapping them; PermutationConfig.from_dict accepts both.

    Parameters:
        config_path: Settings file ending in .yaml, .yml or .json

    Returns:
        Parsed mapping ({} for an empty file)

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If the suffix is not recognised, the file does not
            parse, or its top level is not a mapping

    Examples:
        >>> settings = load_config(Path("fst_test.yaml"))
        >>> settings["permutation"]["method"]
        'intra_group_alleles'
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Permutation settings file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Cannot read permutation settings from {config_path.name}: "
            f"expected a .yaml, .yml or .json file, got {suffix or 'no suffix'}"
        )

    try:
        with open(config_path, 'r') as f:
            if suffix == '.json':
                config = json.load(f)
            else:
                config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Permutation settings in {config_path.name} are not valid YAML: {e}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Permutation settings in {config_path.name} are not valid JSON: {e}")

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError(
            f"Permutation settings in {config_path.name} must be a mapping of option names, "
            f"got {type(config).__name__}"
        )

    return config
