"""
I/O utilities for line shapes stored as two-column text.
"""

import sys
from pathlib import Path
from typing import IO, Iterable, Tuple, Union

import numpy as np
import pandas as pd

from lineshapedb.core.exceptions import DegenerateInputError
from lineshapedb.core.logging_config import get_logger

logger = get_logger("io.spectrum")

PathOrStream = Union[str, Path, IO[str]]


def _read_csv(file_path: Path) -> Tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(file_path, comment="#")
    if "x" in df.columns and "y" in df.columns:
        x, y = df["x"], df["y"]
    elif len(df.columns) >= 2:
        x, y = df.iloc[:, 0], df.iloc[:, 1]
    else:
        raise ValueError(f"{file_path}: CSV line shape needs two columns")
    return x.to_numpy(dtype=float), y.to_numpy(dtype=float)


def _read_columns(file_path: Path) -> Tuple[np.ndarray, np.ndarray]:
    try:
        data = np.loadtxt(file_path, comments="#", usecols=(0, 1), ndmin=2)
    except ValueError as e:
        raise ValueError(f"{file_path}: cannot parse line shape: {e}") from e
    return data[:, 0], data[:, 1]


def read_xy(file_path: Union[str, Path]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load a line shape from file.

    Plain text files hold whitespace-separated x and y columns; blank
    lines and lines starting with '#' are skipped. CSV files are read with
    columns named x and y, or else the first two columns.

    Parameters
    ----------
    file_path : str or Path
        Path to the file

    Returns
    -------
    x : array
        Abscissae
    y : array
        Intensities

    Raises
    ------
    ValueError
        If a line cannot be parsed
    DegenerateInputError
        If any intensity is negative
    """
    file_path = Path(file_path)

    if file_path.suffix.lower() == ".csv":
        x, y = _read_csv(file_path)
    else:
        x, y = _read_columns(file_path)

    if np.any(y < 0):
        raise DegenerateInputError(f"{file_path}: negative intensities are not allowed")

    logger.info(f"Loaded {len(x)} points from {file_path}")
    return x, y


def _write_rows(fh: IO[str], x: np.ndarray, y: np.ndarray) -> None:
    np.savetxt(fh, np.column_stack([x, y]), fmt="%g %g")


def write_xy(target: PathOrStream, x, y) -> None:
    """
    Write x and y as "%g %g" lines.

    Parameters
    ----------
    target : str, Path or stream
        Output file path, '-' for stdout, or an open text stream
    x, y : array
        Data columns
    """
    write_xy_blocks(target, [(x, y)])


def write_xy_blocks(target: PathOrStream, blocks: Iterable[Tuple[np.ndarray, np.ndarray]]) -> None:
    """Write several line shapes separated by blank lines."""
    if isinstance(target, (str, Path)) and str(target) != "-":
        with open(target, "w") as fh:
            write_xy_blocks(fh, blocks)
        logger.info(f"Saved line shape to {target}")
        return

    fh = sys.stdout if isinstance(target, (str, Path)) else target
    for i, (x, y) in enumerate(blocks):
        if i:
            fh.write("\n")
        _write_rows(fh, np.asarray(x), np.asarray(y))
