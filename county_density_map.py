#!/usr/bin/env python3
"""
Generate an interactive county population-density choropleth for one US state based on:
- Topology: https://d3js.org/us-10m.v1.json (TopoJSON, counties object keyed by FIPS id)
- Census density table: "Population-Density By County.csv" (GCT-PH1 extract)
Outputs:
 - county_population_density.html (map, legend, tooltip, "Color" and "Toggle County Boundary" buttons)
 - county_population_density.svg (static snapshot of the initial view)
 - county_population_density.json
 - county_population_density.png (optional, needs cairosvg)
"""

import io
import json
import math
import sys
import bisect
import argparse
import statistics
from collections import deque, namedtuple
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from string import Template
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
import numpy as np
import pandas as pd
from matplotlib import colors, colormaps
from PIL import Image

try:
    import cairosvg
except (ImportError, OSError):  # missing libcairo raises OSError; handled later so PNG export can be optional
    cairosvg = None

# ---------- Config ----------
TOPOLOGY_SOURCE = "us-10m.v1.json"  # local file or http(s) URL
INPUT_CSV_FILE = "Population-Density By County.csv"
STATE_NAME = "Kentucky"
ENCODING = "utf-8-sig"
OUTPUT_HTML = "county_population_density.html"
OUTPUT_SVG = "county_population_density.svg"
OUTPUT_JSON = "county_population_density.json"
OUTPUT_PNG = "county_population_density.png"
PNG_TRIM_PADDING = 12

TOPOLOGY_OBJECT = "counties"

# Census column headers for the fields we join on.
COLUMNS = {
    "group": "GEO.display-label",
    "name": "GCT_STUB.display-label",
    "density": "Density per square mile of land area",
    "id": "GCT_STUB.target-geo-id2",
}

THRESHOLDS = [1, 10, 50, 200, 500, 1000, 2000, 4000]
COLOR_SCHEMES = ["YlGnBu", "OrRd"]

# Legend uses a square-root scale; open-ended bands are clamped to this domain.
LEGEND_DOMAIN = (0, 4500)
LEGEND_RANGE = (290, 800)
LEGEND_BAR_HEIGHT = 8
LEGEND_TICK_SIZE = 13
LEGEND_CAPTION = "Population per square mile"
LEGEND_CLEARANCE = 40  # map area starts this far below the legend

SVG_WIDTH = 900
SVG_HEIGHT = 600
MARGIN = {"left": 50, "right": 50, "top": 50, "bottom": 50}

BOUNDARY_COLOR = "black"
BOUNDARY_OPACITY = 0.3
BOUNDARY_WIDTH = 2
HOVER_COLOR = "white"
TOOLTIP_OFFSET = (5, -45)
DENSITY_LABEL = "Density:"
DENSITY_UNIT = " / sq mi"

BUTTON_LABELS = {
    "palette": "Color",
    "boundaries": "Toggle County Boundary",
}

REQUEST_HEADERS = {
    "User-Agent": "CountyDensityMap/1.0",
}
# ----------------------------


class LoadFailure(RuntimeError):
    """A static input could not be fetched, decoded or parsed."""


class DensityParseError(ValueError):
    """A selected row carries a density that is not a number."""


RegionRecord = namedtuple("RegionRecord", ["id", "name", "density"])

RenderState = namedtuple("RenderState", ["palette_index", "boundaries_visible"], defaults=(0, False))

INITIAL_STATE = RenderState()
TOGGLE_FIELDS = ("palette", "boundaries")


def fetch_text(source, encoding=ENCODING):
    # Allow passing a local path (default) or remote URL.
    path_candidate = Path(source)
    if path_candidate.exists():
        try:
            return path_candidate.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadFailure(f"Could not read '{source}': {exc}") from exc

    parsed = urlparse(str(source))
    if parsed.scheme in ("http", "https"):
        try:
            r = requests.get(source, timeout=30, headers=REQUEST_HEADERS)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise LoadFailure(f"Could not fetch '{source}': {exc}") from exc
        try:
            return r.content.decode(encoding)
        except UnicodeDecodeError as exc:
            raise LoadFailure(f"Could not decode '{source}' as {encoding}: {exc}") from exc

    raise LoadFailure(f"Source '{source}' not found locally and is not a valid URL")


def load_topology(source, object_name=TOPOLOGY_OBJECT):
    text = fetch_text(source, "utf-8")
    try:
        topology = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoadFailure(f"'{source}' is not valid JSON: {exc}") from exc
    if not isinstance(topology, dict) or topology.get("type") != "Topology":
        raise LoadFailure(f"'{source}' is not a TopoJSON topology")
    if object_name not in topology.get("objects", {}):
        raise LoadFailure(f"'{source}' has no '{object_name}' object")
    return topology


def read_density_rows(source, encoding=ENCODING, columns=COLUMNS):
    text = fetch_text(source, encoding)
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise LoadFailure(f"Could not parse '{source}' as CSV: {exc}") from exc
    df.columns = [c.strip() for c in df.columns]
    missing = [c for c in columns.values() if c not in df.columns]
    if missing:
        raise LoadFailure(f"'{source}' is missing columns: {', '.join(missing)}")
    return df.to_dict("records")


def load_sources(topology_source, csv_source, encoding=ENCODING):
    """Fetch both inputs concurrently; either failing aborts the load."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        topology_future = pool.submit(load_topology, topology_source)
        rows_future = pool.submit(read_density_rows, csv_source, encoding)
        return topology_future.result(), rows_future.result()


def parse_density(text, county_id=None):
    s = str(text).strip()
    try:
        value = float(s)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value):
        raise DensityParseError(f"Density '{text}' for county {county_id} is not a number")
    return value


def build_join_index(rows, target_group, columns=COLUMNS):
    """
    Map county id -> RegionRecord for the rows labelled ``target_group``.

    Rows for other groups are skipped. A later row with an id already seen
    replaces the earlier record.
    """
    index = {}
    for row in rows:
        if row[columns["group"]] != target_group:
            continue
        county_id = str(row[columns["id"]]).strip()
        density = parse_density(row[columns["density"]], county_id)
        index[county_id] = RegionRecord(county_id, row[columns["name"]], density)
    return index


def feature_id(feature):
    fid = feature.get("id")
    return None if fid is None else str(fid)


def filter_features(features, index):
    return [f for f in features if feature_id(f) in index]


def county_features(topology, object_name=TOPOLOGY_OBJECT):
    return topology["objects"][object_name].get("geometries", [])


# ---------- Geometry ----------

def decode_arcs(topology):
    # Quantized topologies store delta-encoded integer positions.
    transform = topology.get("transform")
    arcs = []
    for arc in topology.get("arcs", []):
        points = np.array([p[:2] for p in arc], dtype=float).reshape(-1, 2)
        if transform:
            points = np.cumsum(points, axis=0)
            points = points * np.asarray(transform["scale"], dtype=float) + np.asarray(transform["translate"], dtype=float)
        arcs.append(points)
    return arcs


def ring_points(arc_indexes, arcs):
    pieces = []
    for i, idx in enumerate(arc_indexes):
        # negative indexes refer to the one's complement arc, reversed
        points = arcs[~idx][::-1] if idx < 0 else arcs[idx]
        pieces.append(points if i == 0 else points[1:])
    if not pieces:
        return np.empty((0, 2))
    return np.vstack(pieces)


def geometry_rings(geometry, arcs):
    gtype = geometry.get("type")
    if gtype == "Polygon":
        return [ring_points(r, arcs) for r in geometry["arcs"]]
    if gtype == "MultiPolygon":
        return [ring_points(r, arcs) for polygon in geometry["arcs"] for r in polygon]
    if gtype == "GeometryCollection":
        return [ring for g in geometry.get("geometries", []) for ring in geometry_rings(g, arcs)]
    return []


def path_data(rings):
    parts = []
    for ring in rings:
        if len(ring) == 0:
            continue
        coords = "L".join(f"{x:g},{y:g}" for x, y in np.round(ring, 3))
        parts.append(f"M{coords}Z")
    return "".join(parts)


def rings_bounds(rings):
    rings = [r for r in rings if len(r)]
    if not rings:
        return None
    stacked = np.vstack(rings)
    x0, y0 = stacked.min(axis=0)
    x1, y1 = stacked.max(axis=0)
    return float(x0), float(y0), float(x1), float(y1)


def fit_transform(bounds, width, height, top=0):
    """Scale and translation that centre ``bounds`` in the box below ``top``."""
    if bounds is None:
        return 1.0, 0.0, float(top)
    x0, y0, x1, y1 = bounds
    available = height - top
    spans = []
    if x1 > x0:
        spans.append(width / (x1 - x0))
    if y1 > y0:
        spans.append(available / (y1 - y0))
    scale = min(spans) if spans else 1.0
    tx = (width - (x1 - x0) * scale) / 2 - x0 * scale
    ty = top + (available - (y1 - y0) * scale) / 2 - y0 * scale
    return scale, tx, ty


# ---------- Colour classification ----------

def get_scheme_colors(name, k):
    try:
        cmap = colormaps[name].resampled(k)
    except KeyError as exc:
        raise ValueError(f"Unknown colour scheme '{name}'") from exc
    if hasattr(cmap, 'colors'):
        samples = cmap.colors
    else:
        # integer lookups hit the resampled table entries exactly
        samples = cmap(np.arange(k))
    return [colors.to_hex(rgba) for rgba in samples]


class ColorClassifier:
    """Threshold scale from density to one of ``len(thresholds) + 1`` colours."""

    def __init__(self, thresholds, palettes, domain=LEGEND_DOMAIN):
        self.thresholds = tuple(thresholds)
        if list(self.thresholds) != sorted(self.thresholds):
            raise ValueError("Thresholds must be in ascending order")
        self.palettes = [tuple(p) for p in palettes]
        if not self.palettes:
            raise ValueError("At least one palette is required")
        for palette in self.palettes:
            if len(palette) != len(self.thresholds) + 1:
                raise ValueError(f"Palette needs {len(self.thresholds) + 1} colours, got {len(palette)}")
        self.domain = tuple(domain)

    @property
    def palette_count(self):
        return len(self.palettes)

    def band_index(self, density):
        return bisect.bisect_right(self.thresholds, density)

    def classify(self, density, palette_index=0):
        return self.palettes[palette_index][self.band_index(density)]

    def legend_bands(self, palette_index=0):
        edges = (self.domain[0],) + self.thresholds + (self.domain[1],)
        palette = self.palettes[palette_index]
        return [(edges[i], edges[i + 1], palette[i]) for i in range(len(palette))]


# ---------- Render state ----------

def toggle(state, field, palette_count):
    if field == "boundaries":
        return state._replace(boundaries_visible=not state.boundaries_visible)
    if field == "palette":
        return state._replace(palette_index=(state.palette_index + 1) % palette_count)
    raise ValueError(f"Unknown toggle '{field}'")


def stroke_spec(state):
    return BOUNDARY_COLOR if state.boundaries_visible else "none"


def recompute(state, index, classifier):
    stroke = stroke_spec(state)
    return {
        county_id: {"fill": classifier.classify(rec.density, state.palette_index), "stroke": stroke}
        for county_id, rec in index.items()
    }


def state_key(state):
    return f"{state.palette_index}:{int(state.boundaries_visible)}"


def build_state_table(index, classifier, initial=INITIAL_STATE):
    """Every state reachable from ``initial`` with its visuals and toggle edges."""
    states = {}
    queue = deque([initial])
    while queue:
        state = queue.popleft()
        key = state_key(state)
        if key in states:
            continue
        edges = {}
        for field in TOGGLE_FIELDS:
            following = toggle(state, field, classifier.palette_count)
            edges[field] = state_key(following)
            queue.append(following)
        states[key] = {
            "palette_index": state.palette_index,
            "boundaries_visible": state.boundaries_visible,
            "visuals": recompute(state, index, classifier),
            "legend": [color for _, _, color in classifier.legend_bands(state.palette_index)],
            "next": edges,
        }
    return {"initial": state_key(initial), "states": states}


# ---------- Rendering ----------

def format_density(density):
    if float(density).is_integer():
        return str(int(density))
    return repr(float(density))


def sqrt_scale(value, domain=LEGEND_DOMAIN, output=LEGEND_RANGE):
    d0, d1 = (math.sqrt(d) for d in domain)
    t = (math.sqrt(value) - d0) / (d1 - d0)
    return int(round(output[0] + (output[1] - output[0]) * t))


def build_legend(soup, classifier, palette_index=0):
    legend = soup.new_tag('g', attrs={'id': 'legend', 'class': 'key', 'font-family': 'sans-serif', 'font-size': '10'})
    for lower, upper, color in classifier.legend_bands(palette_index):
        x = sqrt_scale(lower, classifier.domain)
        rect = soup.new_tag('rect', attrs={
            'x': str(x), 'y': '0',
            'width': str(sqrt_scale(upper, classifier.domain) - x),
            'height': str(LEGEND_BAR_HEIGHT),
            'fill': color,
        })
        legend.append(rect)
    caption = soup.new_tag('text', attrs={
        'class': 'caption', 'x': str(LEGEND_RANGE[0]), 'y': '-6',
        'fill': 'black', 'text-anchor': 'start', 'font-weight': 'bold',
    })
    caption.string = LEGEND_CAPTION
    legend.append(caption)
    # axis ticks at the thresholds; the long domain line is omitted
    for value in classifier.thresholds:
        tick = soup.new_tag('g', attrs={'class': 'tick', 'transform': f"translate({sqrt_scale(value, classifier.domain)},0)"})
        tick.append(soup.new_tag('line', attrs={'y2': str(LEGEND_TICK_SIZE), 'stroke': 'black'}))
        label = soup.new_tag('text', attrs={'y': str(LEGEND_TICK_SIZE + 3), 'dy': '0.71em', 'fill': 'black', 'text-anchor': 'middle'})
        label.string = f"{value:,}"
        tick.append(label)
        legend.append(tick)
    return legend


def build_svg(features, arcs, index, classifier, state=INITIAL_STATE):
    soup = BeautifulSoup(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{SVG_WIDTH}" height="{SVG_HEIGHT}" '
        f'viewBox="0 0 {SVG_WIDTH} {SVG_HEIGHT}"></svg>',
        "xml",
    )
    svg_tag = soup.find('svg')
    svg_tag.append(soup.new_tag('rect', attrs={'id': 'background', 'x': '0', 'y': '0', 'width': '100%', 'height': '100%', 'fill': '#ffffff'}))
    frame = soup.new_tag('g', attrs={'transform': f"translate({MARGIN['left']},{MARGIN['top']})", 'style': 'user-select:none'})
    svg_tag.append(frame)
    frame.append(build_legend(soup, classifier, state.palette_index))

    width = SVG_WIDTH - MARGIN['left'] - MARGIN['right']
    height = SVG_HEIGHT - MARGIN['top'] - MARGIN['bottom']
    rings_by_id = {feature_id(f): geometry_rings(f, arcs) for f in features}
    all_rings = [ring for rings in rings_by_id.values() for ring in rings]
    scale, tx, ty = fit_transform(rings_bounds(all_rings), width, height, LEGEND_CLEARANCE)
    stroke_width = f"{BOUNDARY_WIDTH / scale:g}"

    map_group = soup.new_tag('g', attrs={'id': 'map', 'transform': f"translate({tx:g},{ty:g}) scale({scale:g})"})
    frame.append(map_group)
    counties = soup.new_tag('g', attrs={'class': 'counties'})
    map_group.append(counties)

    visuals = recompute(state, index, classifier)
    for county_id, rings in rings_by_id.items():
        rec = index[county_id]
        path = soup.new_tag('path', attrs={
            'id': f"county-{county_id}",
            'd': path_data(rings),
            'data-county-id': county_id,
            'data-name': rec.name,
            'data-density-label': format_density(rec.density) + DENSITY_UNIT,
            'fill': visuals[county_id]['fill'],
            'stroke': visuals[county_id]['stroke'],
            'stroke-width': stroke_width,
            'stroke-opacity': str(BOUNDARY_OPACITY),
        })
        counties.append(path)

    # the page script copies the hovered county's path data here; document order is left alone
    hover_layer = soup.new_tag('g', attrs={'id': 'hover-layer', 'pointer-events': 'none'})
    hover_layer.append(soup.new_tag('path', attrs={
        'id': 'hover-outline', 'd': '', 'fill': 'none', 'stroke': HOVER_COLOR,
        'stroke-width': stroke_width, 'stroke-opacity': '1', 'style': 'display:none',
    }))
    map_group.append(hover_layer)
    return soup


PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>$title</title>
<style>
body { font-family: sans-serif; margin: 0; }
#svg-container { position: relative; width: ${width}px; }
.options { position: absolute; right: 0; top: 80px; display: flex; flex-direction: column; gap: 6px; }
.options button { font: 12px sans-serif; padding: 4px 8px; cursor: pointer; }
#tooltip { position: fixed; display: none; pointer-events: none; background: rgba(255,255,255,0.95);
  border: 1px solid #333; border-radius: 3px; padding: 6px; font: 12px/1.3 sans-serif;
  box-shadow: 0 1px 4px rgba(0,0,0,0.2); }
#tooltip #name { font-weight: bold; }
</style>
</head>
<body>
<div id="svg-container">
$svg
<div class="options">
<button class="theme-button" id="theme-button">$palette_label</button>
<button id="boundary-button">$boundaries_label</button>
</div>
</div>
<div id="tooltip"><div id="name"></div><span id="label"></span> <span id="density"></span></div>
<script type="application/json" id="render-states">$states</script>
<script>
(function(){
  var table = JSON.parse(document.getElementById('render-states').textContent);
  var current = table.initial;
  var tooltip = document.getElementById('tooltip');
  var outline = document.getElementById('hover-outline');
  var shapes = document.querySelectorAll('path[data-county-id]');
  var swatches = document.querySelectorAll('#legend > rect');

  function apply(){
    var state = table.states[current];
    shapes.forEach(function(s){
      var v = state.visuals[s.getAttribute('data-county-id')];
      s.setAttribute('fill', v.fill);
      s.setAttribute('stroke', v.stroke);
    });
    swatches.forEach(function(r, i){ r.setAttribute('fill', state.legend[i]); });
  }
  function follow(action){
    current = table.states[current].next[action];
    apply();
  }

  shapes.forEach(function(s){
    s.addEventListener('mouseover', function(){
      outline.setAttribute('d', s.getAttribute('d'));
      outline.style.display = 'inline';
      tooltip.querySelector('#name').textContent = s.getAttribute('data-name');
      tooltip.querySelector('#label').textContent = '$density_label';
      tooltip.querySelector('#density').textContent = s.getAttribute('data-density-label');
      tooltip.style.display = 'block';
    });
    s.addEventListener('mousemove', function(ev){
      tooltip.style.left = (ev.clientX + $offset_x) + 'px';
      tooltip.style.top = (ev.clientY + $offset_y) + 'px';
    });
    s.addEventListener('mouseout', function(){
      outline.style.display = 'none';
      outline.setAttribute('d', '');
      tooltip.style.display = 'none';
    });
  });
  document.getElementById('theme-button').addEventListener('click', function(){ follow('palette'); });
  document.getElementById('boundary-button').addEventListener('click', function(){ follow('boundaries'); });
  apply();
})();
</script>
</body>
</html>
""")


def render_page(svg_soup, state_table, title):
    # keep "</script>" sequences inside the JSON from closing the data block
    states_json = json.dumps(state_table, separators=(",", ":")).replace("</", "<\\/")
    return PAGE_TEMPLATE.substitute(
        title=title,
        width=SVG_WIDTH,
        svg=str(svg_soup.find('svg')),
        palette_label=BUTTON_LABELS["palette"],
        boundaries_label=BUTTON_LABELS["boundaries"],
        states=states_json,
        density_label=DENSITY_LABEL,
        offset_x=TOOLTIP_OFFSET[0],
        offset_y=TOOLTIP_OFFSET[1],
    )


# ---------- Artifacts ----------

def build_artifact(index, classifier, dropped_features, sources, outputs):
    mapping = {}
    for county_id, rec in index.items():
        mapping[county_id] = {
            'name': rec.name,
            'density': rec.density,
            'band_index': classifier.band_index(rec.density),
            'fills': [classifier.classify(rec.density, p) for p in range(classifier.palette_count)],
        }

    densities = [rec.density for rec in index.values()]
    stats = {}
    if densities:
        stats['min'] = min(densities)
        stats['max'] = max(densities)
        stats['mean'] = round(statistics.mean(densities), 1)
        stats['median'] = round(statistics.median(densities), 1)
        stats['stddev'] = round(statistics.pstdev(densities), 1)
    else:
        stats['min'] = stats['max'] = stats['mean'] = stats['median'] = stats['stddev'] = None

    band_counts = [0] * len(classifier.palettes[0])
    for d in densities:
        band_counts[classifier.band_index(d)] += 1
    stats['bins'] = [
        {'min': lo, 'max': hi, 'count': band_counts[i], 'color': color, 'label': f"{lo:,} - {hi:,}"}
        for i, (lo, hi, color) in enumerate(classifier.legend_bands(0))
    ]
    stats['dropped_features'] = int(dropped_features)

    return {
        'mapping': mapping,
        'stats': stats,
        'sources': sources,
        'outputs': outputs,
    }


def trim_png_whitespace(image_path, padding=0):
    try:
        with Image.open(image_path) as img:
            rgb = img.convert("RGB")
            arr = np.array(rgb)
            mask = np.any(arr < 236, axis=2)
            if not np.any(mask):
                return
            ys, xs = np.where(mask)
            left = max(int(xs.min()) - padding, 0)
            right = min(int(xs.max()) + padding + 1, rgb.width)
            upper = max(int(ys.min()) - padding, 0)
            lower = min(int(ys.max()) + padding + 1, rgb.height)
            cropped = rgb.crop((left, upper, right, lower))
            cropped.save(image_path)
    except Exception as exc:
        print(f"Warning: failed to trim PNG whitespace ({exc}).")


def write_text(path, text):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def export_png(svg_content, output_png_path):
    if cairosvg is None:
        print("Warning: cairosvg not installed; skipping PNG export.")
        return False
    try:
        cairosvg.svg2png(bytestring=svg_content.encode('utf-8'), write_to=str(output_png_path))
        trim_png_whitespace(output_png_path, PNG_TRIM_PADDING)
    except Exception as exc:
        print(f"Warning: failed to export PNG ({exc}).")
        return False
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render a county population-density choropleth for one state.")
    parser.add_argument('--topology', default=TOPOLOGY_SOURCE, help="TopoJSON path or URL.")
    parser.add_argument('--input', default=INPUT_CSV_FILE, help="Census density CSV path or URL.")
    parser.add_argument('--state', default=STATE_NAME)
    parser.add_argument('--encoding', default=ENCODING)
    parser.add_argument('--scheme', action='append', help="Matplotlib colormap for the palette cycle (repeatable).")
    parser.add_argument('--out-html', default=OUTPUT_HTML)
    parser.add_argument('--out-svg', default=OUTPUT_SVG)
    parser.add_argument('--out-json', default=OUTPUT_JSON)
    parser.add_argument('--out-png', default=OUTPUT_PNG, help="Path for PNG export (leave blank to disable).")
    args = parser.parse_args(argv)

    schemes = args.scheme or list(COLOR_SCHEMES)
    try:
        palettes = [get_scheme_colors(name, len(THRESHOLDS) + 1) for name in schemes]
        classifier = ColorClassifier(THRESHOLDS, palettes, LEGEND_DOMAIN)
        topology, rows = load_sources(args.topology, args.input, args.encoding)
        print("Rows parsed:", len(rows))
        index = build_join_index(rows, args.state)
    except (LoadFailure, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Counties joined:", len(index))

    features = county_features(topology)
    kept = filter_features(features, index)
    dropped = len(features) - len(kept)
    if not kept:
        print(f"Warning: no county geometry matched state '{args.state}'.")

    arcs = decode_arcs(topology)
    soup = build_svg(kept, arcs, index, classifier, INITIAL_STATE)
    svg_content = str(soup)
    state_table = build_state_table(index, classifier, INITIAL_STATE)
    page = render_page(soup, state_table, f"{args.state} population density by county")

    print("Writing artifacts...")
    write_text(args.out_html, page)
    write_text(args.out_svg, svg_content)
    outputs = {'html': args.out_html, 'svg': args.out_svg, 'json': args.out_json}
    png_path = args.out_png or None
    if png_path and export_png(svg_content, png_path):
        outputs['png'] = png_path

    artifact = build_artifact(
        index, classifier, dropped,
        sources={'topology': args.topology, 'data': args.input},
        outputs=outputs,
    )
    write_text(args.out_json, json.dumps(artifact, indent=2))

    # print brief summary
    outputs_line = "".join(f"\n{kind.upper()}: {path}" for kind, path in outputs.items())
    print("Outputs ->", outputs_line)
    print(
        "Counts -> counties drawn:{drawn} | geometries dropped:{dropped} | render states:{states}".format(
            drawn=len(kept),
            dropped=dropped,
            states=len(state_table['states'])
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
