"""
Configuration files for lineshapedb.

A configuration is a YAML (or JSON) mapping with a ``database`` section
naming the line-shape database and an optional ``interpolation`` section
holding request defaults::

    database:
      path: lines.db
      units: cm-1
    interpolation:
      npoints: 501
      sigma: 0.1
      gamma: 0.0
      doppler: true
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from lineshapedb.core.constants import DEFAULT_NPOINTS
from lineshapedb.core.logging_config import get_logger
from lineshapedb.core.units import parse_units

logger = get_logger("core.config")

_YAML_SUFFIXES = (".yaml", ".yml")


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a configuration mapping.

    Parameters
    ----------
    config_path : str or Path
        A .yaml, .yml or .json file

    Returns
    -------
    dict
        Parsed mapping; an empty file gives an empty dict

    Raises
    ------
    FileNotFoundError
        If the file is missing
    ValueError
        If the suffix is unknown or the top level is not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in _YAML_SUFFIXES and suffix != ".json":
        raise ValueError(f"Unsupported config file format: {suffix}. Use .yaml, .yml, or .json")

    with open(config_path, "r") as f:
        config = json.load(f) if suffix == ".json" else yaml.safe_load(f)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    logger.info(f"Loaded configuration from {config_path}")
    return config


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> Path:
    """
    Write a configuration mapping and return the path written.

    JSON is used for a .json suffix. Anything else is written as YAML, and
    a ``.yaml`` suffix is added when the path has no YAML suffix.
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()
    if suffix != ".json" and suffix not in _YAML_SUFFIXES:
        config_path = config_path.with_suffix(".yaml")
        suffix = ".yaml"

    with open(config_path, "w") as f:
        if suffix == ".json":
            json.dump(config, f, indent=2)
        else:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")
    return config_path


def validate_database_config(config: Dict[str, Any]) -> bool:
    """
    Check the ``database`` section: it needs a ``path``, and ``units``,
    when given, must name known energy units.

    Raises
    ------
    ValueError
        On a missing section, a missing path or unknown units
    """
    if "database" not in config:
        raise ValueError("Configuration must contain 'database' section")

    database = config["database"]
    if not isinstance(database, dict) or "path" not in database:
        raise ValueError("Database config missing required field: path")

    if "units" in database:
        parse_units(database["units"])

    return True


def validate_interpolation_config(config: Dict[str, Any]) -> bool:
    """Check the optional ``interpolation`` section; raise ValueError if bad."""
    interp = config.get("interpolation", {})
    if not isinstance(interp, dict):
        raise ValueError("'interpolation' must be a mapping")

    npoints = interp.get("npoints", DEFAULT_NPOINTS)
    if not isinstance(npoints, int) or isinstance(npoints, bool) or npoints < 2:
        raise ValueError("Interpolation npoints must be an integer >= 2")

    for width in ["sigma", "gamma"]:
        if interp.get(width, 0.0) < 0:
            raise ValueError(f"Interpolation {width} must be non-negative")

    if not isinstance(interp.get("doppler", False), bool):
        raise ValueError("Interpolation doppler must be true or false")

    return True


@dataclass
class InterpolationSettings:
    """
    Defaults for line-shape interpolation requests.

    Attributes
    ----------
    db_path : str, optional
        Path to the line-shape database
    npoints : int
        Number of points in the output grid
    sigma : float
        Gaussian (instrumental) broadening sigma, in database energy units
    gamma : float
        Lorentzian broadening HWHM, in database energy units
    doppler : bool
        Add Doppler broadening of the line's radiator
    """

    db_path: Optional[str] = None
    npoints: int = DEFAULT_NPOINTS
    sigma: float = 0.0
    gamma: float = 0.0
    doppler: bool = False

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "InterpolationSettings":
        """
        Load interpolation settings from a YAML or JSON file.

        Parameters
        ----------
        config_path : str or Path
            Path to configuration file

        Returns
        -------
        InterpolationSettings
            Settings instance
        """
        config = load_config(config_path)
        validate_interpolation_config(config)

        db_path = None
        if "database" in config:
            validate_database_config(config)
            db_path = str(config["database"]["path"])

        interp = config.get("interpolation", {})
        return cls(
            db_path=db_path,
            npoints=interp.get("npoints", DEFAULT_NPOINTS),
            sigma=float(interp.get("sigma", 0.0)),
            gamma=float(interp.get("gamma", 0.0)),
            doppler=interp.get("doppler", False),
        )

    def validate(self) -> bool:
        """
        Validate settings.

        Raises
        ------
        ValueError
            If any setting is out of range
        """
        if self.npoints < 2:
            raise ValueError("npoints must be >= 2")
        if self.sigma < 0 or self.gamma < 0:
            raise ValueError("Broadening widths must be non-negative")
        return True
