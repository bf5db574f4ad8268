from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from nav_overlay.config import settings
from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.session import FixReport, InlineExecutor, NavigationSession, immediate_scheduler
from nav_overlay.providers.factory import build_provider
from nav_overlay.render.recording import RecordingRenderer
from nav_overlay.sources.replay import ReplayPositionSource

# Frames drawn between consecutive fixes when replaying (roughly 1 Hz GPS at 60 fps)
_FRAMES_PER_FIX = 60


def _read_trip(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _point(coord) -> Optional[GeoPoint]:
    if not coord:
        return None
    return GeoPoint.from_lnglat(coord)


def _save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay a recorded trip through a navigation session")
    ap.add_argument("--provider", default="mock", help="mock | mapbox")
    ap.add_argument("--trip", default="trips/sample_trip.json", help="Path to a trip JSON file")
    ap.add_argument("--out", default="trips/last_run.json", help="Where to save the replay result")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    trip = _read_trip(Path(args.trip))
    origin = _point(trip.get("origin"))
    destinations = [GeoPoint.from_lnglat(d) for d in trip.get("destinations", [])]
    source = ReplayPositionSource(trip.get("fixes", []))
    fixes = source.fixes()

    # Replay clock: throttles follow the recorded timestamps, not the wall
    now = {"ms": fixes[0].timestamp_ms if fixes else 0}

    renderer = RecordingRenderer()
    session = NavigationSession(
        provider=build_provider(args.provider),
        renderer=renderer,
        origin=origin,
        destinations=destinations,
        executor=InlineExecutor(),
        scheduler=immediate_scheduler,
        clock=lambda: now["ms"],
        animate=False,
    )
    session.start()

    reports: List[FixReport] = []
    for fix in fixes:
        now["ms"] = fix.timestamp_ms
        report = session.handle_fix(fix)
        if report is not None:
            reports.append(report)
        for _ in range(_FRAMES_PER_FIX):
            session.tick()
    session.stop()

    console = Console()
    table = Table(title=f"Navigation replay: {trip.get('trip_id', Path(args.trip).stem)}")
    table.add_column("t (s)")
    table.add_column("Lng")
    table.add_column("Lat")
    table.add_column("Target")
    table.add_column("Snap")
    table.add_column("Off m")
    table.add_column("Bearing")
    table.add_column("Camera")
    table.add_column("Recalc")

    t0 = reports[0].fix.timestamp_ms if reports else 0
    for r in reports:
        off = f"{r.match_distance_m:.1f}" if r.match_distance_m is not None else ""
        table.add_row(
            f"{(r.fix.timestamp_ms - t0) / 1000:.1f}",
            f"{r.fix.point.lng:.6f}",
            f"{r.fix.point.lat:.6f}",
            f"{r.target.lng:.6f},{r.target.lat:.6f}",
            "yes" if r.snapped else "",
            off,
            f"{r.camera_bearing_deg:.1f}",
            r.camera_mode.value,
            str(r.decision) if r.decision else "",
        )
    console.print(table)

    out_path = Path(args.out)
    _save_json(
        out_path,
        {
            "origin": origin.as_lnglat() if origin else None,
            "destinations": [d.as_lnglat() for d in destinations],
            "route_source": renderer.route_source,
            "marker_track": [p.as_lnglat() for p in renderer.marker_track[::_FRAMES_PER_FIX // 4]],
            "fixes": [r.fix.point.as_lnglat() for r in reports],
        },
    )
    console.print(f"Saved: {out_path.resolve()}")


if __name__ == "__main__":
    main()
