"""
Line-shape database interface for storing and querying line shapes.
"""

import sqlite3
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from lineshapedb.core.abc import LineShapeDataSource
from lineshapedb.core.constants import DB_FORMAT
from lineshapedb.core.exceptions import DatabaseError, NotFoundError
from lineshapedb.core.logging_config import get_logger
from lineshapedb.core.pool import get_pool, release_pool
from lineshapedb.core.units import EnergyUnits, convert_units, parse_units
from lineshapedb.database.structures import (
    Dataset,
    DatasetData,
    Environment,
    Line,
    LineProperty,
    Model,
    Radiator,
)
from lineshapedb.morph.curve import Curve
from lineshapedb.morph.grid import BracketCandidate, CornerSet, select_corners

logger = get_logger("database.database")


class AccessMode(Enum):
    """How a database file is opened."""

    READ_ONLY = "ro"
    READ_WRITE = "rw"
    INIT = "init"


SCHEMA = [
    """
    CREATE TABLE lsdb (
        property TEXT PRIMARY KEY,
        value TEXT
    )
    """,
    """
    CREATE TABLE models (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        descr TEXT
    )
    """,
    """
    CREATE TABLE environments (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        descr TEXT
    )
    """,
    """
    CREATE TABLE radiators (
        id INTEGER PRIMARY KEY,
        symbol TEXT NOT NULL,
        anum INTEGER NOT NULL CHECK (anum > 0),
        mass REAL NOT NULL CHECK (mass > 0),
        zsp INTEGER NOT NULL CHECK (zsp > 0),
        UNIQUE (symbol, anum, zsp)
    )
    """,
    """
    CREATE TABLE lines (
        id INTEGER PRIMARY KEY,
        rid INTEGER NOT NULL REFERENCES radiators (id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        energy REAL NOT NULL,
        UNIQUE (rid, name)
    )
    """,
    """
    CREATE TABLE line_properties (
        id INTEGER PRIMARY KEY,
        lid INTEGER NOT NULL REFERENCES lines (id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        value TEXT,
        UNIQUE (lid, name)
    )
    """,
    """
    CREATE TABLE datasets (
        id INTEGER PRIMARY KEY,
        mid INTEGER NOT NULL REFERENCES models (id) ON DELETE CASCADE,
        eid INTEGER NOT NULL REFERENCES environments (id) ON DELETE CASCADE,
        lid INTEGER NOT NULL REFERENCES lines (id) ON DELETE CASCADE,
        n REAL NOT NULL CHECK (n > 0),
        T REAL NOT NULL CHECK (T > 0),
        UNIQUE (mid, eid, lid, n, T)
    )
    """,
    """
    CREATE TABLE data (
        id INTEGER PRIMARY KEY,
        did INTEGER NOT NULL REFERENCES datasets (id) ON DELETE CASCADE,
        x REAL NOT NULL,
        y REAL NOT NULL CHECK (y >= 0),
        UNIQUE (did, x)
    )
    """,
    "CREATE INDEX lines_rid ON lines (rid)",
    "CREATE INDEX datasets_lid ON datasets (lid)",
    "CREATE INDEX data_did ON data (did)",
]


class LineShapeDatabase(LineShapeDataSource):
    """
    Interface to line shapes stored in an SQLite database.

    The database has the following tables:
    - `lsdb`: Format version and unit preference
    - `models`, `environments`: Provenance of the line shapes
    - `radiators`, `lines`, `line_properties`: Emitters and their lines
    - `datasets`, `data`: Line shapes tagged with (n, T) and their samples
    """

    def __init__(self, db_path: Union[str, Path], access: Union[str, AccessMode] = "ro"):
        """
        Open a database, creating it in INIT mode.

        Parameters
        ----------
        db_path : str or Path
            Path to SQLite database file
        access : str or AccessMode
            'ro' (default), 'rw' or 'init'

        Raises
        ------
        FileNotFoundError
            If the file is missing and access is not 'init'
        DatabaseError
            If the schema cannot be created or the format is not recognized
        """
        access = AccessMode(access)
        db_path = Path(db_path)

        if access is not AccessMode.INIT and not db_path.exists():
            raise FileNotFoundError(f"Line-shape database not found: {db_path}")

        self.db_path = db_path
        self.access = access
        self._pool = get_pool(str(db_path), access=access.value)

        if access is AccessMode.INIT:
            self._create_schema()
            logger.info(f"Initialized line-shape database: {db_path}")
        else:
            self.db_format = self._check_format()
            logger.info(f"Connected to line-shape database: {db_path}")

    def _create_schema(self) -> None:
        try:
            with self._pool.get_connection() as conn:
                with conn:
                    for sql in SCHEMA:
                        conn.execute(sql)
                    conn.executemany(
                        "INSERT INTO lsdb (property, value) VALUES (?, ?)",
                        [("format", str(DB_FORMAT)), ("units", str(int(EnergyUnits.NONE)))],
                    )
        except sqlite3.Error as e:
            logger.error(f"Schema creation failed: {e}")
            raise DatabaseError(f"Cannot initialize {self.db_path}: {e}") from e
        self.db_format = DB_FORMAT

    def _check_format(self) -> int:
        """Verify that the file is a line-shape database we understand."""
        try:
            value = self._fetch_one("SELECT value FROM lsdb WHERE property = 'format'")
        except sqlite3.Error as e:
            raise DatabaseError(f"Wrong DB format: {self.db_path} ({e})") from e

        if value is None:
            raise DatabaseError(f"Wrong DB format: {self.db_path} has no format record")

        db_format = int(value[0])
        if db_format > DB_FORMAT:
            raise DatabaseError(
                f"Unsupported DB format {db_format} (this version reads up to {DB_FORMAT})"
            )
        return db_format

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _fetch_one(self, query: str, params: Sequence = ()) -> Optional[tuple]:
        with self._pool.get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def _fetch_all(self, query: str, params: Sequence = ()) -> List[tuple]:
        with self._pool.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def _insert(self, table: str, query: str, params: Sequence) -> int:
        try:
            with self._pool.get_connection() as conn:
                with conn:
                    cursor = conn.execute(query, params)
        except sqlite3.Error as e:
            logger.error(f"Adding to {table} failed: {e}")
            raise DatabaseError(f"Adding to {table} failed: {e}") from e

        logger.debug(f"Added {table} record {cursor.lastrowid}")
        return cursor.lastrowid

    def _delete(self, table: str, id: int) -> None:
        try:
            with self._pool.get_connection() as conn:
                with conn:
                    cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (id,))
        except sqlite3.Error as e:
            logger.error(f"Deleting from {table} failed: {e}")
            raise DatabaseError(f"Deleting from {table} failed: {e}") from e

        if cursor.rowcount == 0:
            raise NotFoundError(f"No record {id} in {table}")
        logger.debug(f"Deleted {table} record {id}")

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def set_units(self, units: Union[str, int, EnergyUnits]) -> None:
        """Record the energy units of line energies and dataset abscissae."""
        units = parse_units(units)
        try:
            with self._pool.get_connection() as conn:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO lsdb (property, value) VALUES ('units', ?)",
                        (str(int(units)),),
                    )
        except sqlite3.Error as e:
            raise DatabaseError(f"Setting units failed: {e}") from e

    def get_units(self) -> EnergyUnits:
        """Energy units of the database (NONE if never set)."""
        row = self._fetch_one("SELECT value FROM lsdb WHERE property = 'units'")
        if row is None or row[0] is None:
            return EnergyUnits.NONE
        return parse_units(int(row[0]))

    def convert_to_units(self, to_units: Union[str, int, EnergyUnits]) -> float:
        """Factor converting database energies to `to_units`."""
        return convert_units(self.get_units(), parse_units(to_units))

    # ------------------------------------------------------------------
    # Models and environments
    # ------------------------------------------------------------------

    def add_model(self, name: str, descr: str = "") -> int:
        """Add a model, returning its id."""
        return self._insert(
            "models", "INSERT INTO models (name, descr) VALUES (?, ?)", (name, descr)
        )

    def get_models(self) -> List[Model]:
        rows = self._fetch_all("SELECT id, name, descr FROM models ORDER BY id")
        return [Model(id=r[0], name=r[1], descr=r[2] or "") for r in rows]

    def del_model(self, id: int) -> None:
        """Delete a model and all its datasets."""
        self._delete("models", id)

    def add_environment(self, name: str, descr: str = "") -> int:
        """Add an environment, returning its id."""
        return self._insert(
            "environments", "INSERT INTO environments (name, descr) VALUES (?, ?)", (name, descr)
        )

    def get_environments(self) -> List[Environment]:
        rows = self._fetch_all("SELECT id, name, descr FROM environments ORDER BY id")
        return [Environment(id=r[0], name=r[1], descr=r[2] or "") for r in rows]

    def del_environment(self, id: int) -> None:
        """Delete an environment and all its datasets."""
        self._delete("environments", id)

    # ------------------------------------------------------------------
    # Radiators, lines and line properties
    # ------------------------------------------------------------------

    def add_radiator(self, symbol: str, anum: int, mass: float, zsp: int) -> int:
        """
        Add a radiator.

        Parameters
        ----------
        symbol : str
            Element symbol
        anum : int
            Atomic number
        mass : float
            Mass in amu
        zsp : int
            Spectroscopic charge

        Returns
        -------
        int
            Radiator id
        """
        return self._insert(
            "radiators",
            "INSERT INTO radiators (symbol, anum, mass, zsp) VALUES (?, ?, ?, ?)",
            (symbol, int(anum), float(mass), int(zsp)),
        )

    def get_radiators(self) -> List[Radiator]:
        rows = self._fetch_all("SELECT id, symbol, anum, mass, zsp FROM radiators ORDER BY id")
        return [
            Radiator(id=r[0], symbol=r[1], anum=int(r[2]), mass=float(r[3]), zsp=int(r[4]))
            for r in rows
        ]

    def del_radiator(self, id: int) -> None:
        """Delete a radiator with its lines and their datasets."""
        self._delete("radiators", id)

    def add_line(self, rid: int, name: str, energy: float) -> int:
        """Add a line of radiator `rid` with rest energy in database units."""
        return self._insert(
            "lines",
            "INSERT INTO lines (rid, name, energy) VALUES (?, ?, ?)",
            (rid, name, float(energy)),
        )

    def get_lines(self, rid: int) -> List[Line]:
        rows = self._fetch_all(
            "SELECT id, rid, name, energy FROM lines WHERE rid = ? ORDER BY id", (rid,)
        )
        return [Line(id=r[0], rid=r[1], name=r[2], energy=float(r[3])) for r in rows]

    def del_line(self, id: int) -> None:
        """Delete a line with its properties and datasets."""
        self._delete("lines", id)

    def add_line_property(self, lid: int, name: str, value: str) -> int:
        return self._insert(
            "line_properties",
            "INSERT INTO line_properties (lid, name, value) VALUES (?, ?, ?)",
            (lid, name, value),
        )

    def get_line_properties(self, lid: int) -> List[LineProperty]:
        rows = self._fetch_all(
            "SELECT id, lid, name, value FROM line_properties WHERE lid = ? ORDER BY id", (lid,)
        )
        return [LineProperty(id=r[0], lid=r[1], name=r[2], value=r[3]) for r in rows]

    def del_line_property(self, id: int) -> None:
        self._delete("line_properties", id)

    def get_line_props(self, lid: int) -> Tuple[float, float]:
        """
        Rest energy of a line and the mass of its radiator.

        Raises
        ------
        NotFoundError
            If the line does not exist
        """
        row = self._fetch_one(
            "SELECT l.energy, r.mass"
            " FROM lines AS l INNER JOIN radiators AS r ON (r.id = l.rid)"
            " WHERE l.id = ?",
            (lid,),
        )
        if row is None:
            raise NotFoundError(f"Line {lid} not found")
        return float(row[0]), float(row[1])

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def add_dataset(
        self,
        mid: int,
        eid: int,
        lid: int,
        n: float,
        T: float,
        x: Sequence[float],
        y: Sequence[float],
    ) -> int:
        """
        Store a line shape measured at (n, T).

        The header and all samples are written in one transaction.

        Parameters
        ----------
        mid, eid, lid : int
            Model, environment and line ids
        n : float
            Electron density in cm^-3
        T : float
            Temperature in eV
        x, y : array
            Samples; x strictly increasing, y non-negative

        Returns
        -------
        int
            Dataset id

        Raises
        ------
        DegenerateInputError
            If the samples are not a valid curve
        DatabaseError
            If a referenced entity does not exist or the insert fails
        """
        curve = Curve(x, y)

        try:
            with self._pool.get_connection() as conn:
                with conn:
                    cursor = conn.execute(
                        "INSERT INTO datasets (mid, eid, lid, n, T) VALUES (?, ?, ?, ?, ?)",
                        (mid, eid, lid, float(n), float(T)),
                    )
                    did = cursor.lastrowid
                    conn.executemany(
                        "INSERT INTO data (did, x, y) VALUES (?, ?, ?)",
                        [(did, xi, yi) for xi, yi in curve],
                    )
        except sqlite3.Error as e:
            logger.error(f"Adding dataset failed: {e}")
            raise DatabaseError(f"Adding dataset failed: {e}") from e

        logger.debug(f"Added dataset {did} (n={n:g}, T={T:g}, {len(curve)} points)")
        return did

    def get_datasets(self, lid: int) -> List[Dataset]:
        """Dataset headers of a line ordered by model, environment, n and T."""
        rows = self._fetch_all(
            "SELECT id, mid, eid, lid, n, T FROM datasets WHERE lid = ? ORDER BY mid, eid, n, T",
            (lid,),
        )
        return [
            Dataset(id=r[0], mid=r[1], eid=r[2], lid=r[3], n=float(r[4]), T=float(r[5]))
            for r in rows
        ]

    def del_dataset(self, id: int) -> None:
        """Delete a dataset and its samples."""
        self._delete("datasets", id)

    def get_dataset_data(self, did: int) -> DatasetData:
        """
        Fetch the samples of a dataset, ordered by x.

        Raises
        ------
        NotFoundError
            If the dataset does not exist or holds no samples
        """
        header = self._fetch_one("SELECT n, T FROM datasets WHERE id = ?", (did,))
        if header is None:
            raise NotFoundError(f"Dataset {did} not found")

        with self._pool.get_connection() as conn:
            df = pd.read_sql_query(
                "SELECT x, y FROM data WHERE did = ? ORDER BY x", conn, params=(did,)
            )

        if df.empty:
            raise NotFoundError(f"Dataset {did} has no data")

        return DatasetData(
            n=float(header[0]),
            T=float(header[1]),
            x=df["x"].to_numpy(dtype=float),
            y=df["y"].to_numpy(dtype=float),
        )

    def find_bracket_candidates(self, mid: int, eid: int, lid: int) -> List[BracketCandidate]:
        rows = self._fetch_all(
            "SELECT id, n, T FROM datasets WHERE mid = ? AND eid = ? AND lid = ? ORDER BY id",
            (mid, eid, lid),
        )
        logger.debug(f"{len(rows)} candidate datasets for mid={mid}, eid={eid}, lid={lid}")
        return [BracketCandidate(int(r[0]), float(r[1]), float(r[2])) for r in rows]

    def get_closest_dids(self, mid: int, eid: int, lid: int, n: float, T: float) -> CornerSet:
        """Datasets bracketing (n, T); raises NoBracketError if there are none."""
        return select_corners(self.find_bracket_candidates(mid, eid, lid), n, T)

    def get_limits(self, mid: int, eid: int, lid: int) -> Tuple[float, float, float, float]:
        """
        Density and temperature ranges covered by datasets.

        Returns
        -------
        tuple
            (nmin, nmax, Tmin, Tmax)

        Raises
        ------
        NotFoundError
            If there are no datasets for the combination
        """
        row = self._fetch_one(
            "SELECT MIN(n), MAX(n), MIN(T), MAX(T)"
            " FROM datasets WHERE mid = ? AND eid = ? AND lid = ?",
            (mid, eid, lid),
        )
        if row is None or row[0] is None:
            raise NotFoundError(f"No datasets for mid={mid}, eid={eid}, lid={lid}")
        return tuple(float(v) for v in row)

    def close(self):
        """Close the database connections."""
        release_pool(str(self.db_path), self.access.value)
        logger.debug(f"Closed line-shape database: {self.db_path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
