"""
Tests for line-shape text I/O.
"""

import os
import re
import tempfile
from io import StringIO
from pathlib import Path

import numpy as np
import pytest

from lineshapedb.core.exceptions import DegenerateInputError
from lineshapedb.io.spectrum import read_xy, write_xy, write_xy_blocks


@pytest.fixture
def temp_path():
    """Factory for temporary file paths with a given suffix."""
    paths = []

    def _create(suffix=".dat"):
        fd, path = tempfile.mkstemp(suffix=suffix)
        os.close(fd)  # Close file descriptor to prevent leaks
        paths.append(path)
        return path

    yield _create

    for path in paths:
        Path(path).unlink(missing_ok=True)


def test_read_xy_skips_comments(temp_path):
    """Test comments and blank lines are ignored."""
    path = temp_path()
    with open(path, "w") as f:
        f.write("# line shape\n\n0.0 0.5\n  1.0   1.5  extra\n# mid comment\n2.0 0.25\n")

    x, y = read_xy(path)
    assert np.array_equal(x, [0.0, 1.0, 2.0])
    assert np.array_equal(y, [0.5, 1.5, 0.25])


def test_read_xy_unparseable(temp_path):
    """Test an unparseable line is reported with the file name."""
    path = temp_path()
    with open(path, "w") as f:
        f.write("0.0 1.0\n1.0 abc\n")

    with pytest.raises(ValueError, match=re.escape(Path(path).name)) as excinfo:
        read_xy(path)
    assert isinstance(excinfo.value.__cause__, ValueError)

    with open(path, "w") as f:
        f.write("0.0\n")
    with pytest.raises(ValueError):
        read_xy(path)


def test_read_xy_negative(temp_path):
    """Test negative intensities are rejected."""
    path = temp_path()
    with open(path, "w") as f:
        f.write("0.0 1.0\n1.0 -0.1\n")

    with pytest.raises(DegenerateInputError):
        read_xy(path)


def test_read_csv(temp_path):
    """Test CSV files with named or positional columns."""
    path = temp_path(".csv")
    with open(path, "w") as f:
        f.write("energy,y,x\n5.0,1.0,0.0\n6.0,2.0,1.0\n")

    x, y = read_xy(path)
    assert np.array_equal(x, [0.0, 1.0])
    assert np.array_equal(y, [1.0, 2.0])

    with open(path, "w") as f:
        f.write("# comment\nenergy,intensity\n0.0,3.0\n1.0,4.0\n")
    x, y = read_xy(path)
    assert np.array_equal(x, [0.0, 1.0])
    assert np.array_equal(y, [3.0, 4.0])


def test_write_xy_stream():
    """Test the "%g %g" output format."""
    out = StringIO()
    write_xy(out, [0.0, 0.5, 1e-7], [1.0, 2.5, 1234567.0])
    assert out.getvalue() == "0 1\n0.5 2.5\n1e-07 1.23457e+06\n"


def test_write_xy_blocks(temp_path):
    """Test several curves are separated by blank lines."""
    path = temp_path()
    write_xy_blocks(path, [([0.0, 1.0], [1.0, 2.0]), ([2.0], [3.0])])

    with open(path) as f:
        assert f.read() == "0 1\n1 2\n\n2 3\n"


def test_write_then_read(temp_path):
    """Test a written file can be read back."""
    path = temp_path()
    x = np.linspace(-1.0, 1.0, 5)
    y = 1.0 - x**2
    write_xy(path, x, y)

    x2, y2 = read_xy(path)
    assert np.allclose(x2, x)
    assert np.allclose(y2, y)


def test_write_stdout(capsys):
    """Test '-' writes to standard output."""
    write_xy("-", [1.0], [2.0])
    assert capsys.readouterr().out == "1 2\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
