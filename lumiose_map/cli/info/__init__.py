from collections import Counter
from gettext import gettext as _

COMMAND_DESCRIPTION = _("Summarize the saved map state")


def command(subparser):
    def handle(args):
        from ..common import open_session

        session = open_session(args)
        store = session.store

        counts = Counter((m.source.value, m.type.value) for m in store.markers)
        print(_("Markers: {total}").format(total=len(store)))
        for (source, marker_type), count in sorted(counts.items()):
            print(f"  {source:<7} {marker_type:<9} {count}")
        print(_("Custom markers: {n}").format(n=len(store.custom_markers)))
        print(_("Zones: {n}").format(n=len(store.zones)))
        for zone in sorted(store.zones, key=lambda z: z.number):
            print(f"  #{zone.number:<3} {zone.label} ({len(zone.points)} points)")
        print(
            _("Snap: {snap}, grid size: {grid}").format(
                snap=_("on") if session.snap_enabled else _("off"),
                grid=session.grid_size,
            )
        )
        center = session.overlay.center
        if center is None:
            print(_("Radius overlay: not placed yet"))
        else:
            print(_("Radius overlay center: {x}, {y}").format(x=center.x, y=center.y))
        print(_("Stickers available: {n}").format(n=len(session.stickers)))

    return handle
