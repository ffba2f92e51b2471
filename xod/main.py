"""Runs the xod interpreter on a script file or in command-line mode. Also uses error handling context manager. Called
from the xod executable script.
"""

import argparse
import logging
import os

from xod.lang.error import ErrorHandler
from xod.lang.numerical import WIDTH, WIDTHS
from xod.lang.session import Session
from xod.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="xod", description="A tiny REPL for bitwise arithmetic.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--width", type=int, choices=WIDTHS, default=WIDTH, help="integer width in bits")
    parser.add_argument("--debug", action="store_true", help="log tokens and statements of every turn")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    return parser.parse_args(argv)


def configure_logging(debug):
    """Sets the level of the xod loggers: DEBUG if debug or XOD_DEBUG is set, WARNING otherwise."""
    level = logging.DEBUG if debug or os.environ.get("XOD_DEBUG") else logging.WARNING
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("xod").setLevel(level)
    return level


def main(argv=None):
    """Runs xod interpreter. Called from xod executable script."""
    with ErrorHandler() as error_handler:
        args = parse_args(argv)

        if args.no_color:
            os.environ["NO_COLOR"] = "1"  # honored by termcolor
        configure_logging(args.debug)

        if args.file is not None:
            sess = Session(error_handler, args.file, args.width, cmd_line=False)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, args.width, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
