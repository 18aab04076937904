import sys
from gettext import gettext as _

from lumiose_map.core.persistence import ResetScope

COMMAND_DESCRIPTION = _("Discard user markers, and with --all preset edits and zones")


def command(subparser):
    subparser.add_argument(
        "--all",
        dest="all",
        action="store_true",
        help=_("Also restore the baseline presets and zones"),
    )
    subparser.add_argument(
        "-y",
        "--yes",
        dest="yes",
        action="store_true",
        help=_("Confirm the reset"),
    )

    def handle(args):
        from ..common import open_session

        scope = ResetScope.ALL if args.all else ResetScope.USER
        if not args.yes:
            if scope == ResetScope.ALL:
                message = _(
                    "This will clear user markers, preset edits and zones. "
                    "Run again with --yes to confirm."
                )
            else:
                message = _("This will clear all user markers. Run again with --yes to confirm.")
            print(message, file=sys.stderr)
            exit(1)

        session = open_session(args)
        session.reset(scope)
        session.close()
        print(_("Reset done ({scope})").format(scope=scope.value))

    return handle
