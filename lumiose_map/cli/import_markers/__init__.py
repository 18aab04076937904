import sys
from gettext import gettext as _
from pathlib import Path

from lumiose_map.core.annotation.events import EventType

COMMAND_DESCRIPTION = _("Replace the user markers with a markers JSON export")


def command(subparser):
    subparser.add_argument("input", type=Path, help=_("Markers JSON file"))

    def handle(args):
        from ..common import open_session

        session = open_session(args)

        def on_import(event):
            num_zones = event.data["num_zones"]
            print(_("Imported {n} markers").format(n=event.data["num_markers"]))
            if num_zones is not None:
                print(_("Imported {n} zones").format(n=num_zones))

        def on_notice(event):
            print(event.data["message"], file=sys.stderr)

        session.events.on(EventType.IMPORT_COMPLETED, on_import)
        session.events.on(EventType.NOTICE, on_notice)
        try:
            ok = session.import_markers(args.input)
        finally:
            session.close()
        if not ok:
            exit(1)

    return handle
