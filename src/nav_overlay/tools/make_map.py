from __future__ import annotations

import argparse
import json
from pathlib import Path

from nav_overlay.render.layers import ROUTE_LAYERS


def build_html(run: dict) -> str:
    layers = json.dumps(ROUTE_LAYERS)
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Navigation replay</title>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css" />
  <style>
    body {{ margin: 0; font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; }}
    #map {{ height: 100vh; width: 100vw; }}
  </style>
</head>
<body>
<div id="map"></div>
<script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
<script>
  const run = {json.dumps(run)};
  const layers = {layers};

  const map = L.map('map');

  L.tileLayer('https://{{s}}.tile.openstreetmap.org/{{z}}/{{x}}/{{y}}.png', {{
    maxZoom: 19,
    attribution: '&copy; OpenStreetMap contributors'
  }}).addTo(map);

  const ll = (c) => [c[1], c[0]];
  const bounds = [];

  // route source, one polyline per styled layer
  layers.forEach((layer) => {{
    run.route_source.features
      .filter((f) => f.properties.color === layer.color)
      .forEach((f) => {{
        const pts = f.geometry.coordinates.map(ll);
        pts.forEach((p) => bounds.push(p));
        L.polyline(pts, {{ color: layer.line_color, weight: layer.line_width, opacity: layer.line_opacity }}).addTo(map);
      }});
  }});

  // raw fixes vs smoothed marker
  run.fixes.forEach((c) => {{
    bounds.push(ll(c));
    L.circleMarker(ll(c), {{ radius: 3, color: '#e74c3c' }}).addTo(map);
  }});
  L.polyline(run.marker_track.map(ll), {{ color: '#2ecc71', weight: 3, dashArray: '4 4' }}).addTo(map);

  (run.destinations || []).forEach((c) => L.marker(ll(c)).addTo(map));

  if (bounds.length) {{
    map.fitBounds(L.latLngBounds(bounds).pad(0.2));
  }} else {{
    map.setView([0, 0], 10);
  }}
</script>
</body>
</html>
"""


def main() -> None:
    ap = argparse.ArgumentParser(description="Render the last replay as a Leaflet page")
    ap.add_argument("--run", default="trips/last_run.json")
    ap.add_argument("--out", default="trips/last_run_map.html")
    args = ap.parse_args()

    run_path = Path(args.run)
    if not run_path.exists():
        raise SystemExit(f"No replay found at {run_path}; run nav-overlay first")
    run = json.loads(run_path.read_text(encoding="utf-8"))

    out_path = Path(args.out)
    out_path.write_text(build_html(run), encoding="utf-8")
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
