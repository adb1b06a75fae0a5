"""
Main CLI entry point for lineshapedb.
"""

import argparse
import sys

from lineshapedb import __version__
from lineshapedb.core.logging_config import setup_logging, get_logger

logger = get_logger("cli.main")


def positive_int(value: str) -> int:
    """argparse type for database ids."""
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"id must be positive, got {value}")
    return ivalue


def positive_float(value: str) -> float:
    """argparse type for plasma conditions."""
    fvalue = float(value)
    if not fvalue > 0:
        raise argparse.ArgumentTypeError(f"value must be positive, got {value}")
    return fvalue


def open_db(path: str, access: str = "ro"):
    from lineshapedb.database.database import LineShapeDatabase

    return LineShapeDatabase(path, access=access)


def init_cmd(args):
    """Create an empty database."""
    with open_db(args.db, "init") as db:
        if args.units:
            db.set_units(args.units)
    print(f"Initialized {args.db}")


def info_cmd(args):
    """Print the contents of a database."""
    from lineshapedb.core.units import EnergyUnits, units_label

    with open_db(args.db) as db:
        units = db.get_units()
        label = units_label(units)
        to_ev = db.convert_to_units(EnergyUnits.EV)

        print(f"Database: {args.db} (format {db.db_format}, units: {label or 'unspecified'})")

        print("Models:")
        for m in db.get_models():
            if args.mid and m.id != args.mid:
                continue
            print(f'  id = {m.id}: "{m.name}"' + (f" ({m.descr})" if m.descr else ""))

        print("Environments:")
        for e in db.get_environments():
            if args.eid and e.id != args.eid:
                continue
            print(f'  id = {e.id}: "{e.name}"' + (f" ({e.descr})" if e.descr else ""))

        print("Radiators:")
        for r in db.get_radiators():
            if args.rid and r.id != args.rid:
                continue
            print(f'  id = {r.id}: "{r.symbol}" (A = {r.anum}, Zsp = {r.zsp}, mass = {r.mass:g})')
            print("  Lines:")
            for line in db.get_lines(r.id):
                if args.lid and line.id != args.lid:
                    continue
                if units in (EnergyUnits.NONE, EnergyUnits.CUSTOM):
                    energy = f"{line.energy:g}"
                else:
                    energy = f"{line.energy:g} {label} => {line.energy * to_ev:g} eV"
                print(f'    id = {line.id}: "{line.name}" ({energy})')
                print("    Datasets:")
                for ds in db.get_datasets(line.id):
                    if (args.mid and ds.mid != args.mid) or (args.eid and ds.eid != args.eid):
                        continue
                    print(
                        f"      id = {ds.id}: (mid = {ds.mid}, eid = {ds.eid}, "
                        f"n_e = {ds.n:g} cm^-3, T = {ds.T:g} eV)"
                    )


def add_model_cmd(args):
    with open_db(args.db, "rw") as db:
        mid = db.add_model(args.name, args.descr)
    print(f"Added model {mid}")


def add_env_cmd(args):
    with open_db(args.db, "rw") as db:
        eid = db.add_environment(args.name, args.descr)
    print(f"Added environment {eid}")


def add_radiator_cmd(args):
    with open_db(args.db, "rw") as db:
        rid = db.add_radiator(args.symbol, args.anum, args.mass, args.zsp)
    print(f"Added radiator {rid}")


def add_line_cmd(args):
    with open_db(args.db, "rw") as db:
        lid = db.add_line(args.rid, args.name, args.energy)
    print(f"Added line {lid}")


def add_property_cmd(args):
    with open_db(args.db, "rw") as db:
        pid = db.add_line_property(args.lid, args.name, args.value)
    print(f"Added line property {pid}")


def add_data_cmd(args):
    """Store a line shape read from a two-column file."""
    from lineshapedb.io.spectrum import read_xy

    x, y = read_xy(args.file)
    with open_db(args.db, "rw") as db:
        did = db.add_dataset(args.mid, args.eid, args.lid, args.n, args.T, x, y)
    print(f"Added dataset {did} ({len(x)} points)")


def delete_cmd(args):
    """Delete one entity; the most specific id given wins."""
    targets = [
        ("dataset", args.did),
        ("line", args.lid),
        ("radiator", args.rid),
        ("environment", args.eid),
        ("model", args.mid),
    ]
    kind, id = next(((k, i) for k, i in targets if i), (None, None))
    if kind is None:
        raise ValueError("Nothing to delete: give one of -d, -l, -r, -e, -m")

    with open_db(args.db, "rw") as db:
        getattr(db, f"del_{kind}")(id)
    logger.info(f"Deleted {kind} {id}")
    print(f"Deleted {kind} {id}")


def get_data_cmd(args):
    from lineshapedb.io.spectrum import write_xy

    with open_db(args.db) as db:
        data = db.get_dataset_data(args.did)
    write_xy(args.output, data.x, data.y)


def interpolate_cmd(args):
    """Interpolate (and optionally broaden) a line shape at (n, T)."""
    from lineshapedb.core.config import InterpolationSettings
    from lineshapedb.io.spectrum import write_xy

    settings = InterpolationSettings()
    if args.config:
        logger.info(f"Loading configuration from {args.config}")
        settings = InterpolationSettings.from_file(args.config)

    # Command-line values override the configuration file
    for name in ["npoints", "sigma", "gamma"]:
        value = getattr(args, name)
        if value is not None:
            setattr(settings, name, value)
    if args.doppler:
        settings.doppler = True
    settings.validate()

    with open_db(args.db) as db:
        data = db.get_interpolation(
            args.mid,
            args.eid,
            args.lid,
            args.n,
            args.T,
            settings.npoints,
            sigma=settings.sigma,
            gamma=settings.gamma,
            doppler=settings.doppler,
        )
    write_xy(args.output, data.x, data.y)


def morph_cmd(args):
    """Morph between two line shapes read from files."""
    from lineshapedb.io.spectrum import read_xy, write_xy_blocks
    from lineshapedb.morph.engine import morph_series, morph_steps

    t_values = morph_steps(args.t)

    f = read_xy(args.initial)
    g = read_xy(args.final)

    curves = morph_series(
        f,
        g,
        t_values,
        args.npoints,
        normalize=args.normalize,
        regularize_input=args.regularize,
    )
    write_xy_blocks(args.output, [(c.x, c.y) for c in curves])


def build_parser() -> argparse.ArgumentParser:
    from lineshapedb.core.constants import DEFAULT_NPOINTS

    parser = argparse.ArgumentParser(
        description="lineshapedb: store and interpolate spectral line shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Create an empty database")
    init_parser.add_argument("db", type=str, help="Path to database file")
    init_parser.add_argument(
        "--units", type=str, default=None, help="Energy units of the data (cm-1, eV, au)"
    )
    init_parser.set_defaults(func=init_cmd)

    info_parser = subparsers.add_parser("info", help="List database contents")
    info_parser.add_argument("db", type=str, help="Path to database file")
    info_parser.add_argument("-m", dest="mid", type=positive_int, help="Only this model")
    info_parser.add_argument("-e", dest="eid", type=positive_int, help="Only this environment")
    info_parser.add_argument("-r", dest="rid", type=positive_int, help="Only this radiator")
    info_parser.add_argument("-l", dest="lid", type=positive_int, help="Only this line")
    info_parser.set_defaults(func=info_cmd)

    model_parser = subparsers.add_parser("add-model", help="Add a model")
    model_parser.add_argument("db", type=str, help="Path to database file")
    model_parser.add_argument("name", type=str, help="Model name")
    model_parser.add_argument("--descr", type=str, default="", help="Description")
    model_parser.set_defaults(func=add_model_cmd)

    env_parser = subparsers.add_parser("add-env", help="Add an environment")
    env_parser.add_argument("db", type=str, help="Path to database file")
    env_parser.add_argument("name", type=str, help="Environment name")
    env_parser.add_argument("--descr", type=str, default="", help="Description")
    env_parser.set_defaults(func=add_env_cmd)

    rad_parser = subparsers.add_parser("add-radiator", help="Add a radiator")
    rad_parser.add_argument("db", type=str, help="Path to database file")
    rad_parser.add_argument("symbol", type=str, help="Element symbol")
    rad_parser.add_argument("anum", type=positive_int, help="Atomic number")
    rad_parser.add_argument("zsp", type=positive_int, help="Spectroscopic charge")
    rad_parser.add_argument("mass", type=positive_float, help="Mass in amu")
    rad_parser.set_defaults(func=add_radiator_cmd)

    line_parser = subparsers.add_parser("add-line", help="Add a line to a radiator")
    line_parser.add_argument("db", type=str, help="Path to database file")
    line_parser.add_argument("-r", dest="rid", type=positive_int, required=True, help="Radiator id")
    line_parser.add_argument("name", type=str, help="Line name")
    line_parser.add_argument("energy", type=float, help="Rest energy in database units")
    line_parser.set_defaults(func=add_line_cmd)

    prop_parser = subparsers.add_parser("add-property", help="Attach a property to a line")
    prop_parser.add_argument("db", type=str, help="Path to database file")
    prop_parser.add_argument("-l", dest="lid", type=positive_int, required=True, help="Line id")
    prop_parser.add_argument("name", type=str, help="Property name")
    prop_parser.add_argument("value", type=str, help="Property value")
    prop_parser.set_defaults(func=add_property_cmd)

    data_parser = subparsers.add_parser("add-data", help="Add a dataset from a two-column file")
    data_parser.add_argument("db", type=str, help="Path to database file")
    data_parser.add_argument("file", type=str, help="Line shape file (x y per line, or CSV)")
    data_parser.add_argument("-m", dest="mid", type=positive_int, required=True, help="Model id")
    data_parser.add_argument(
        "-e", dest="eid", type=positive_int, required=True, help="Environment id"
    )
    data_parser.add_argument("-l", dest="lid", type=positive_int, required=True, help="Line id")
    data_parser.add_argument(
        "-n", dest="n", type=positive_float, required=True, help="Electron density (cm^-3)"
    )
    data_parser.add_argument(
        "-T", dest="T", type=positive_float, required=True, help="Temperature (eV)"
    )
    data_parser.set_defaults(func=add_data_cmd)

    del_parser = subparsers.add_parser("delete", help="Delete an entity and its dependents")
    del_parser.add_argument("db", type=str, help="Path to database file")
    del_parser.add_argument("-d", dest="did", type=positive_int, help="Dataset id")
    del_parser.add_argument("-l", dest="lid", type=positive_int, help="Line id")
    del_parser.add_argument("-r", dest="rid", type=positive_int, help="Radiator id")
    del_parser.add_argument("-e", dest="eid", type=positive_int, help="Environment id")
    del_parser.add_argument("-m", dest="mid", type=positive_int, help="Model id")
    del_parser.set_defaults(func=delete_cmd)

    get_parser = subparsers.add_parser("get-data", help="Print a stored dataset")
    get_parser.add_argument("db", type=str, help="Path to database file")
    get_parser.add_argument("did", type=positive_int, help="Dataset id")
    get_parser.add_argument(
        "-o", "--output", type=str, default="-", help="Output file (default: stdout)"
    )
    get_parser.set_defaults(func=get_data_cmd)

    interp_parser = subparsers.add_parser(
        "interpolate", help="Interpolate a line shape to given plasma conditions"
    )
    interp_parser.add_argument("db", type=str, help="Path to database file")
    interp_parser.add_argument("-m", dest="mid", type=positive_int, required=True, help="Model id")
    interp_parser.add_argument(
        "-e", dest="eid", type=positive_int, required=True, help="Environment id"
    )
    interp_parser.add_argument("-l", dest="lid", type=positive_int, required=True, help="Line id")
    interp_parser.add_argument(
        "-n", dest="n", type=positive_float, required=True, help="Electron density (cm^-3)"
    )
    interp_parser.add_argument(
        "-T", dest="T", type=positive_float, required=True, help="Temperature (eV)"
    )
    interp_parser.add_argument(
        "--npoints", type=int, default=None, help=f"Output points (default: {DEFAULT_NPOINTS})"
    )
    interp_parser.add_argument("--sigma", type=float, default=None, help="Gaussian sigma")
    interp_parser.add_argument("--gamma", type=float, default=None, help="Lorentzian HWHM")
    interp_parser.add_argument(
        "--doppler", action="store_true", help="Convolve with the Doppler broadening"
    )
    interp_parser.add_argument(
        "--config", type=str, default=None, help="Interpolation settings file (YAML or JSON)"
    )
    interp_parser.add_argument(
        "-o", "--output", type=str, default="-", help="Output file (default: stdout)"
    )
    interp_parser.set_defaults(func=interpolate_cmd)

    morph_parser = subparsers.add_parser("morph", help="Morph between two line shapes")
    morph_parser.add_argument(
        "-i", dest="initial", type=str, required=True, help="Initial line shape file"
    )
    morph_parser.add_argument(
        "-f", dest="final", type=str, required=True, help="Final line shape file"
    )
    morph_parser.add_argument(
        "-t",
        dest="t",
        type=float,
        default=0.0,
        help=(
            "Morphing value (0 - 1) or number of steps (integer > 2); "
            "the default 0 gives the initial shape"
        ),
    )
    morph_parser.add_argument(
        "-n", dest="normalize", action="store_true", help="Area-normalize output to unity"
    )
    morph_parser.add_argument(
        "-r", dest="regularize", action="store_true", help="Regularize the input line shapes"
    )
    morph_parser.add_argument(
        "--npoints", type=int, default=DEFAULT_NPOINTS, help="Points per output curve"
    )
    morph_parser.add_argument(
        "-o", "--output", type=str, default="-", help="Output file (default: stdout)"
    )
    morph_parser.set_defaults(func=morph_cmd)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(level=args.log_level, stream=sys.stderr)

    # Execute command
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Error executing command: {e}", exc_info=args.log_level == "DEBUG")
        sys.exit(1)


if __name__ == "__main__":
    main()
