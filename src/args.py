"""Argument parsing functionality for nvs."""

import argparse
from constants import Constants


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def build_parser():
    """Build the top-level parser with one subparser per action."""
    parser = argparse.ArgumentParser(
        prog="nvs",
        description="nvs - Node.js version switcher",
        add_help=True,
    )

    parser.add_argument("--home",
                        dest="HOME",
                        help="nvs home directory (default: ~/.nvs, env NVS_HOME)",
                        action="store", type=str)
    parser.add_argument("--mirror",
                        dest="MIRROR",
                        help="Distribution index URL (default: %s)" % Constants.MIRROR_URL,
                        action="store", type=str)
    parser.add_argument("--workers",
                        dest="WORKERS",
                        help="Concurrent range requests per download (default: 4x CPU count)",
                        action="store", type=_positive_int)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: env NVS_LOG_LEVEL, else INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--debug",
                        dest="DEBUG",
                        help="Output debug log (same as --loglevel DEBUG)",
                        action="store_true")
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="action", metavar="ACTION")
    sub.required = True

    sub.add_parser("init", help="Initialize nvs home directory and wrapper scripts")

    download = sub.add_parser("download", help="Download and install versions, replacing existing installs")
    download.add_argument("SPECS", metavar="VERSION", nargs="+",
                          help="Version specifier, e.g. 20, ^18.2, ~16.14.0, >=20.1")

    install = sub.add_parser("install", help="Install versions that are not installed yet")
    install.add_argument("SPECS", metavar="VERSION", nargs="+",
                         help="Version specifier, e.g. 20, ^18.2, ~16.14.0, >=20.1")

    use = sub.add_parser("use", help="Select the global version")
    use.add_argument("SPEC", metavar="VERSION", help="Version specifier written to the global version file")

    versions = sub.add_parser("versions", help="List versions")
    versions.add_argument("--remote",
                          dest="REMOTE",
                          help="List remote versions",
                          action="store_true")

    run = sub.add_parser("run", help="Run node, npm, npx or corepack")
    run.add_argument("--version",
                     dest="RUN_VERSION",
                     help="Version specifier to run (default: auto from project files)",
                     action="store", type=str,
                     default=Constants.AUTO_VERSION)
    run.add_argument("-v", "--verbose",
                     dest="VERBOSE",
                     help="Output verbose log",
                     action="store_true")
    run.add_argument("RUN_COMMAND", metavar="COMMAND",
                     choices=Constants.SUPPORTED_COMMANDS,
                     help="One of: " + ", ".join(Constants.SUPPORTED_COMMANDS))
    run.add_argument("RUN_ARGS", metavar="ARGS", nargs=argparse.REMAINDER,
                     help="Arguments passed to the command (after --)")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
