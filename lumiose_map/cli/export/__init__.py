import sys
from gettext import gettext as _
from pathlib import Path

from lumiose_map.core.annotation.store import ExportScope

COMMAND_DESCRIPTION = _("Export markers and zones as JSON")


def command(subparser):
    subparser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=None,
        help=_("File to write, stdout when omitted"),
    )
    subparser.add_argument(
        "-s",
        "--scope",
        dest="scope",
        choices=[s.value for s in ExportScope],
        default=ExportScope.ALL.value,
        help=_("Which markers to include"),
    )
    subparser.add_argument(
        "--custom",
        dest="custom",
        action="store_true",
        help=_("Export only the user's circle and sticker markers"),
    )

    def handle(args):
        from ..common import open_session

        session = open_session(args)
        if args.custom:
            text = session.user_export_json()
        else:
            text = session.export_json(ExportScope(args.scope))

        if args.output is None:
            sys.stdout.write(text + "\n")
        else:
            args.output.write_text(text + "\n", encoding="utf-8")
            print(_("Wrote {path}").format(path=args.output), file=sys.stderr)

    return handle
