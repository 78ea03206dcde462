"""
YAML configuration for the CL layer.

Resolution order for the configuration file:
1. an explicit path passed to a loader
2. the ``ZKCRED_CONFIG`` environment variable
3. ``zkcred/data/defaults.yml`` shipped with the package

A file may contain any of the sections ``params``, ``credential_structure``
and ``acceptable_credentials``; missing sections fall back to the defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .cl.attributes import RawCredential
from .cl.params import Params
from .crypto.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_VAR_NAME = "ZKCRED_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "data" / "defaults.yml"

# YAML key -> Params field
PARAM_KEYS = {
    "RhoBitLen": "rho_bit_len",
    "PedersenModulusBitLen": "pedersen_modulus_bit_len",
    "NLength": "n_length",
    "AttrBitLen": "attr_bit_len",
    "HashBitLen": "hash_bit_len",
    "SecParam": "sec_param",
    "EBitLen": "e_bit_len",
    "E1BitLen": "e1_bit_len",
    "VBitLen": "v_bit_len",
    "ChallengeSpace": "challenge_space",
}

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ToolkitConfig:
    """
    Loaded configuration.

    ``params`` already carries the attribute counts of ``structure``.
    """

    params: Params
    structure: List[Dict[str, Any]]
    acceptable_credentials: Dict[str, List[int]]

    def raw_credential(self) -> RawCredential:
        """Empty credential with the configured structure."""
        return RawCredential.from_structure(self.structure)


def resolve_config_path(path: Optional[PathLike] = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(ENV_VAR_NAME)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration {path} must be a mapping")
    return data


def _section(path: Optional[PathLike], name: str) -> Any:
    resolved = resolve_config_path(path)
    data = _read_yaml(resolved)
    if name in data:
        return data[name]
    if resolved != DEFAULT_CONFIG_PATH:
        logger.debug("%s not in %s, using packaged default", name, resolved)
    return _read_yaml(DEFAULT_CONFIG_PATH)[name]


def params_from_yaml(section: Dict[str, Any], structure: List[Dict[str, Any]]) -> Params:
    if not isinstance(section, dict):
        raise ConfigurationError("params section must be a mapping")
    unknown = set(section) - set(PARAM_KEYS)
    if unknown:
        raise ConfigurationError(f"unknown parameters: {sorted(unknown)}")
    counts = RawCredential.from_structure(structure).counts()
    values: Dict[str, Any] = {PARAM_KEYS[k]: v for k, v in section.items()}
    values.update(
        known_attrs_num=counts["known"],
        committed_attrs_num=counts["committed"],
        hidden_attrs_num=counts["hidden"],
    )
    return Params.from_dict(values)


def load_credential_structure(path: Optional[PathLike] = None) -> List[Dict[str, Any]]:
    """
    Raises:
        ConfigurationError: If the structure is missing or malformed
    """
    structure = _section(path, "credential_structure")
    if not isinstance(structure, list):
        raise ConfigurationError("credential_structure must be a list")
    RawCredential.from_structure(structure)
    return structure


def load_acceptable_credentials(path: Optional[PathLike] = None) -> Dict[str, List[int]]:
    creds = _section(path, "acceptable_credentials")
    if not isinstance(creds, dict):
        raise ConfigurationError("acceptable_credentials must be a mapping")
    result = {}
    for org, indices in creds.items():
        if not isinstance(indices, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in indices
        ):
            raise ConfigurationError(f"acceptable credentials of {org} must be a list of indices")
        result[str(org)] = list(indices)
    return result


def load_params(path: Optional[PathLike] = None) -> Params:
    return params_from_yaml(_section(path, "params"), load_credential_structure(path))


def load_config(path: Optional[PathLike] = None) -> ToolkitConfig:
    """
    Load parameters, credential structure and acceptable credentials.

    Raises:
        ConfigurationError: On unreadable or inconsistent configuration
    """
    structure = load_credential_structure(path)
    config = ToolkitConfig(
        params=params_from_yaml(_section(path, "params"), structure),
        structure=structure,
        acceptable_credentials=load_acceptable_credentials(path),
    )
    logger.debug("loaded configuration from %s", resolve_config_path(path))
    return config
