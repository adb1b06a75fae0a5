"""
Tests for CLI module.
"""

import os
import tempfile
from pathlib import Path

import numpy as np
import pytest

from lineshapedb.cli.main import build_parser, main
from lineshapedb.database.database import LineShapeDatabase
from lineshapedb.io.spectrum import read_xy


def write_gaussian(path, sigma, center=0.0):
    x = np.linspace(-10.0, 10.0, 201)
    y = np.exp(-0.5 * ((x - center) / sigma) ** 2)
    np.savetxt(path, np.column_stack([x, y]), header="x y")


def interpolate_args(db_path, ids, n, *extra):
    """Command line for interpolating the populated_db line at (n, T=2)."""
    ids_args = ["-m", str(ids["mid"]), "-e", str(ids["eid"]), "-l", str(ids["lid"])]
    return ["interpolate", db_path, *ids_args, "-n", n, "-T", "2", *extra]


@pytest.fixture
def temp_file():
    """Factory for temporary file paths."""
    paths = []

    def _create(suffix=".dat"):
        fd, path = tempfile.mkstemp(suffix=suffix)
        os.close(fd)  # Close file descriptor to prevent leaks
        paths.append(path)
        return path

    yield _create

    for path in paths:
        Path(path).unlink(missing_ok=True)


def test_no_command(capsys):
    """Test running without a command prints help and fails."""
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_version(capsys):
    """Test --version."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "0.1.0" in capsys.readouterr().out


def test_ids_must_be_positive():
    """Test argument validation of ids and plasma conditions."""
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["delete", "x.db", "-d", "0"])
    with pytest.raises(SystemExit):
        parser.parse_args(
            ["add-data", "x.db", "f.dat", "-m", "1", "-e", "1", "-l", "1", "-n", "-1e17", "-T", "1"]
        )


def test_build_database(temp_db_path, temp_file, capsys):
    """Test creating and populating a database from the command line."""
    data_file = temp_file()
    write_gaussian(data_file, 1.0)

    main(["init", temp_db_path, "--units", "cm-1"])
    main(["add-model", temp_db_path, "model-a", "--descr", "test model"])
    main(["add-env", temp_db_path, "plasma"])
    main(["add-radiator", temp_db_path, "H", "1", "1", "1.008"])
    main(["add-line", temp_db_path, "-r", "1", "Ly-alpha", "82259"])
    main(["add-property", temp_db_path, "-l", "1", "upper", "2p"])
    ids_args = ["-m", "1", "-e", "1", "-l", "1"]
    main(["add-data", temp_db_path, data_file, *ids_args, "-n", "1e17", "-T", "2"])

    out = capsys.readouterr().out
    assert "Added dataset 1 (201 points)" in out

    with LineShapeDatabase(temp_db_path) as db:
        assert db.get_radiators()[0].zsp == 1
        assert db.get_radiators()[0].mass == 1.008
        assert db.get_datasets(1)[0].T == 2.0

    main(["info", temp_db_path])
    out = capsys.readouterr().out
    assert '"model-a" (test model)' in out
    assert '"H" (A = 1, Zsp = 1, mass = 1.008)' in out
    assert "82259 cm^-1 => 10.1988 eV" in out
    assert "n_e = 1e+17 cm^-3, T = 2 eV" in out


def test_info_filters(populated_db, capsys):
    """Test info listing restricted to one line."""
    db_path, ids = populated_db
    main(["info", db_path, "-l", str(ids["lid"])])
    out = capsys.readouterr().out
    assert "Ly-alpha" in out
    assert out.count("n_e =") == 4

    main(["info", db_path, "-l", str(ids["lid"] + 1)])
    out = capsys.readouterr().out
    assert "Ly-alpha" not in out


def test_get_data(populated_db, temp_file):
    """Test exporting a dataset."""
    db_path, ids = populated_db
    out_file = temp_file()
    did = next(iter(ids["datasets"].values()))

    main(["get-data", db_path, str(did), "-o", out_file])
    x, y = read_xy(out_file)
    assert len(x) == 401
    assert np.isclose(np.trapezoid(y, x), 1.0, rtol=1e-4)


def test_interpolate(populated_db, temp_file):
    """Test interpolation from the command line."""
    db_path, ids = populated_db
    out_file = temp_file()

    args = interpolate_args(db_path, ids, "3e17", "--npoints", "501", "--sigma", "0.2")
    main([*args, "-o", out_file])

    x, y = read_xy(out_file)
    assert len(x) == 501
    assert np.isclose(np.trapezoid(y, x), 1.0, rtol=1e-2)


def test_interpolate_with_config(populated_db, temp_file):
    """Test settings from a configuration file."""
    import yaml

    db_path, ids = populated_db
    config_file = temp_file(".yaml")
    with open(config_file, "w") as f:
        yaml.dump({"interpolation": {"npoints": 301, "doppler": True}}, f)
    out_file = temp_file()

    main(interpolate_args(db_path, ids, "3e17", "--config", config_file, "-o", out_file))

    x, _ = read_xy(out_file)
    assert len(x) == 301


def test_interpolate_out_of_range(populated_db):
    """Test failures exit with status 1."""
    db_path, ids = populated_db
    with pytest.raises(SystemExit) as exc_info:
        main(interpolate_args(db_path, ids, "1e19"))
    assert exc_info.value.code == 1


def test_delete(populated_db, capsys):
    """Test deletion picks the most specific id."""
    db_path, ids = populated_db
    did = next(iter(ids["datasets"].values()))

    main(["delete", db_path, "-d", str(did), "-m", str(ids["mid"])])
    assert f"Deleted dataset {did}" in capsys.readouterr().out

    with LineShapeDatabase(db_path) as db:
        assert len(db.get_models()) == 1
        assert len(db.get_datasets(ids["lid"])) == 3

    with pytest.raises(SystemExit):
        main(["delete", db_path])
    with pytest.raises(SystemExit):
        main(["delete", db_path, "-d", str(did)])


def test_morph(temp_file):
    """Test morphing two files at a single fraction."""
    f_file, g_file, out_file = temp_file(), temp_file(), temp_file()
    write_gaussian(f_file, 1.0, center=-1.0)
    write_gaussian(g_file, 1.0, center=1.0)

    main(["morph", "-i", f_file, "-f", g_file, "-t", "0.5", "--npoints", "401", "-o", out_file])

    x, y = read_xy(out_file)
    assert len(x) == 401
    centroid = np.trapezoid(x * y, x) / np.trapezoid(y, x)
    assert abs(centroid) < 0.05


def test_morph_default_fraction(temp_file):
    """Test morph without -t reproduces the initial shape."""
    f_file, g_file, out_file = temp_file(), temp_file(), temp_file()
    write_gaussian(f_file, 1.0, center=-1.0)
    write_gaussian(g_file, 1.0, center=1.0)

    main(["morph", "-i", f_file, "-f", g_file, "--npoints", "401", "-o", out_file])

    x, y = read_xy(out_file)
    centroid = np.trapezoid(x * y, x) / np.trapezoid(y, x)
    assert np.isclose(centroid, -1.0, atol=1e-2)


def test_morph_series_output(temp_file):
    """Test a number of steps writes blank-line separated blocks."""
    f_file, g_file, out_file = temp_file(), temp_file(), temp_file()
    write_gaussian(f_file, 1.0)
    write_gaussian(g_file, 2.0)

    args = ["-i", f_file, "-f", g_file, "-t", "3", "--npoints", "101", "-n", "-r"]
    main(["morph", *args, "-o", out_file])

    with open(out_file) as f:
        blocks = f.read().strip().split("\n\n")
    assert len(blocks) == 3
    assert all(len(block.splitlines()) == 101 for block in blocks)


def test_morph_invalid_fraction(temp_file):
    """Test an invalid morph value exits with status 1."""
    f_file = temp_file()
    write_gaussian(f_file, 1.0)
    with pytest.raises(SystemExit) as exc_info:
        main(["morph", "-i", f_file, "-f", f_file, "-t", "1.5"])
    assert exc_info.value.code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
