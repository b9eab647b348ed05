"""nvs - Node.js version switcher

Resolves version specifiers to installed Node.js runtimes, downloads and
installs missing versions from the distribution index, and runs node, npm,
npx and corepack from the selected version.

    Returns:
        int: Exit code
"""
import logging
import sys
import threading

from args import parse_args
from cli_config import apply_overrides
from cli_run import run_command
from cli_versions import list_versions
from common.logging_utils import configure_logging
from constants import ExitCodes, Constants
from errors import LocalVersionNotFoundError, NetworkError, NvsError, PartialDownloadError
from runtime.home import initialize
from runtime.local import find_local_version
from runtime.project import write_global_version
from runtime.service import VersionManager

logger = logging.getLogger(__name__)

INIT_MESSAGE = """Initialize Success.
Add nvs to PATH

export PATH="{bin}:$PATH"

And, select global Node.js version

nvs use 20
"""


def exit_code_for(exc: BaseException) -> int:
    """Map an error to the process exit code."""
    if isinstance(exc, (NetworkError, PartialDownloadError)):
        return ExitCodes.CONNECTION_ERROR.value
    return ExitCodes.FAILURE.value


def cmd_init(_args) -> int:
    home = initialize()
    sys.stdout.write(INIT_MESSAGE.format(bin=home / Constants.BIN_DIR))
    return ExitCodes.SUCCESS.value


def install_specs(specs, manager, force=True) -> int:
    """Download (force) or install each spec independently.

    A failure on one spec is logged and does not stop the others; the
    returned code is non-zero if any spec failed.
    """
    exit_code = ExitCodes.SUCCESS.value
    for spec in specs:
        try:
            constraint = manager.constraint_for(spec)
            if not force:
                try:
                    name = find_local_version(constraint, manager.versions_dir)
                    logger.info("%s is already installed as %s", spec, name)
                    continue
                except LocalVersionNotFoundError:
                    pass
            manager.download(constraint)
        except (NvsError, OSError) as exc:
            logger.error("%s: %s", spec, exc)
            exit_code = max(exit_code, exit_code_for(exc))
    return exit_code


def cmd_use(args, manager) -> int:
    spec = manager.spec_for(args.SPEC)
    name = manager.resolve(spec)
    write_global_version(spec, manager.global_file)
    logger.info("global version is %s (%s)", spec, name)
    return ExitCodes.SUCCESS.value


def dispatch(args, cancel_event) -> int:
    """Run the selected action and return its exit code."""
    if args.action == "init":
        return cmd_init(args)

    manager = VersionManager(cancel_event=cancel_event)
    if args.action == "download":
        return install_specs(args.SPECS, manager, force=True)
    if args.action == "install":
        return install_specs(args.SPECS, manager, force=False)
    if args.action == "use":
        return cmd_use(args, manager)
    if args.action == "versions":
        sys.stdout.write(list_versions(args, manager))
        return ExitCodes.SUCCESS.value
    if args.action == "run":
        return run_command(args, manager)
    logger.error("Unknown action: %s", args.action)
    return ExitCodes.USAGE.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging("DEBUG" if args.DEBUG else args.LOG_LEVEL, args.LOG_FILE)
    apply_overrides(args)

    cancel_event = threading.Event()
    try:
        exit_code = dispatch(args, cancel_event)
    except KeyboardInterrupt:
        cancel_event.set()
        logger.info("Interrupted by user")
        exit_code = ExitCodes.INTERRUPTED.value
    except NvsError as exc:
        logger.error("%s", exc)
        exit_code = exit_code_for(exc)
    except OSError as exc:
        logger.error("%s", exc)
        exit_code = ExitCodes.FAILURE.value
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
