"""CLI interface for the lumiose_map project.

Headless operations on the saved map state: inspect it, export it, import
markers into it, reset it.
"""

import lumiose_map.utils.i18n  # F401

import logging
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

from lumiose_map.utils.misc import get_version, load_module

logger = logging.getLogger(__name__)


def add_subcommand(subparsers, name: str, submodule):
    subparser = subparsers.add_parser(name, help=submodule.COMMAND_DESCRIPTION)
    common_flags(subparser)
    handler = submodule.command(subparser)
    subparser.set_defaults(fn=handler)


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Give more details about what is happening"),
    )  # noqa: E501
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        help=_("Print version and exit"),
    )  # noqa: E501
    parser.add_argument(
        "--baseline",
        dest="baseline",
        default=None,
        help=_("Baseline markers JSON, file path or URL"),
    )
    parser.add_argument(
        "--stickers",
        dest="stickers",
        default=None,
        help=_("Sticker catalog JSON, file path or URL"),
    )
    parser.add_argument(
        "--storage-dir",
        dest="storage_dir",
        type=Path,
        default=None,
        help=_("Folder holding the saved map state"),
    )


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="lumiose_map", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for module in sorted(Path(__file__).parent.glob("*/__init__.py")):
        if str(module).find("pycache") > 0:
            continue
        module_name = module.parent.name
        subcommand_module = load_module(
            module, module_name=f"lumiose_map.cli.{module_name}"
        )
        add_subcommand(subparsers, module_name, subcommand_module)
    return parser


def main(argv=None):  # pragma: no cover
    """
    The main function executes on commands:
    `python -m lumiose_map` and `$ lumiose_map `.
    """
    logging.basicConfig()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = get_version()
    if args.is_show_version:
        print(version)
        exit(0)
    logger.debug(f"{_('Starting')} lumiose_map v{version}")

    fn = args.__dict__.get("fn")
    args.__dict__["fn"] = None
    if fn is not None:
        return fn(args)
    else:
        parser.parse_args([*(argv if argv is not None else sys.argv[1:]), "--help"])
