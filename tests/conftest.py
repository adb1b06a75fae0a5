"""
Pytest configuration and shared fixtures for lineshapedb tests.

This module provides:
- Sample line shapes (Gaussian, triangles) as Curve objects
- A temporary line-shape database holding a 2x2 (n, T) grid of datasets
- Temporary configuration files
"""

import os
import tempfile
from pathlib import Path

import numpy as np
import pytest

from lineshapedb.core.pool import close_all_pools
from lineshapedb.database.database import LineShapeDatabase
from lineshapedb.morph.curve import Curve


# Densities and temperatures of the stored grid
GRID_N = (1.0e17, 1.0e18)
GRID_T = (1.0, 4.0)


def grid_width(n: float, T: float) -> float:
    """Gaussian sigma of the synthetic dataset stored at (n, T)."""
    return 0.5 * (n / 1.0e17) ** 0.5 * (1.0 + 0.1 * T)


def gaussian_curve(
    sigma: float,
    center: float = 0.0,
    area: float = 1.0,
    half_width: float = 20.0,
    npoints: int = 401,
) -> Curve:
    x = np.linspace(center - half_width, center + half_width, npoints)
    y = area * np.exp(-0.5 * ((x - center) / sigma) ** 2) / (sigma * np.sqrt(2 * np.pi))
    return Curve(x, y)


@pytest.fixture(autouse=True)
def _close_pools():
    """Release pooled SQLite connections after every test."""
    yield
    close_all_pools()


@pytest.fixture
def gaussian():
    """Factory for Gaussian curves."""
    return gaussian_curve


@pytest.fixture
def triangles():
    """Two overlapping triangles: peaks at x=1 and x=2."""
    f = Curve([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
    g = Curve([1.0, 2.0, 3.0], [0.0, 1.0, 0.0])
    return f, g


@pytest.fixture
def temp_db_path():
    """Path for a database file that does not exist yet."""
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)  # Close file descriptor to prevent leaks
    Path(db_path).unlink()

    yield db_path

    close_all_pools()
    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
def populated_db(temp_db_path):
    """
    Database with one model, environment, radiator and line, and four
    Gaussian datasets on the grid GRID_N x GRID_T.

    Yields the database path and a dict of ids.
    """
    ids = {"datasets": {}}
    with LineShapeDatabase(temp_db_path, access="init") as db:
        db.set_units("cm-1")
        ids["mid"] = db.add_model("gauss", "synthetic Gaussians")
        ids["eid"] = db.add_environment("plasma")
        ids["rid"] = db.add_radiator("H", 1, 1.008, 1)
        ids["lid"] = db.add_line(ids["rid"], "Ly-alpha", 82259.0)
        for n in GRID_N:
            for T in GRID_T:
                curve = gaussian_curve(grid_width(n, T))
                did = db.add_dataset(ids["mid"], ids["eid"], ids["lid"], n, T, curve.x, curve.y)
                ids["datasets"][(n, T)] = did

    yield temp_db_path, ids


@pytest.fixture
def sample_config_dict():
    """Create a sample configuration dictionary."""
    return {
        "database": {"path": "lines.db", "units": "cm-1"},
        "interpolation": {
            "npoints": 501,
            "sigma": 0.1,
            "gamma": 0.05,
            "doppler": False,
        },
    }


@pytest.fixture
def temp_config_file(sample_config_dict):
    """Create a temporary YAML config file."""
    import yaml

    config_fd, config_path = tempfile.mkstemp(suffix=".yaml")
    os.close(config_fd)  # Close file descriptor to prevent leaks

    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)

    yield config_path

    Path(config_path).unlink()
