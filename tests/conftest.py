import json

import pytest

import county_density_map as cdm

PALETTE = [f"c{i}" for i in range(9)]
ALT_PALETTE = [f"d{i}" for i in range(9)]

CSV_TEXT = (
    "GEO.display-label,GCT_STUB.target-geo-id2,GCT_STUB.display-label,Density per square mile of land area\n"
    "Kentucky,21001,Adair County,35.2\n"
    "Kentucky,21003,Allen County,59.1\n"
    "Ohio,39001,Adams County,47.3\n"
)


def make_topology():
    # two Kentucky squares side by side and one Ohio square further right
    return {
        "type": "Topology",
        "transform": {"scale": [1, 1], "translate": [0, 0]},
        "objects": {
            "counties": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": "21001", "arcs": [[0]]},
                    {"type": "Polygon", "id": "39001", "arcs": [[2]]},
                    {"type": "MultiPolygon", "id": "21003", "arcs": [[[1]]]},
                ],
            }
        },
        "arcs": [
            [[0, 0], [10, 0], [0, 10], [-10, 0], [0, -10]],
            [[10, 0], [10, 0], [0, 10], [-10, 0], [0, -10]],
            [[30, 0], [5, 0], [0, 5], [-5, 0], [0, -5]],
        ],
    }


@pytest.fixture
def topology():
    return make_topology()


@pytest.fixture
def classifier():
    return cdm.ColorClassifier(cdm.THRESHOLDS, [PALETTE, ALT_PALETTE])


@pytest.fixture
def index():
    return {
        "21001": cdm.RegionRecord("21001", "Adair County", 35.2),
        "21003": cdm.RegionRecord("21003", "Allen County", 59.1),
    }


@pytest.fixture
def source_files(tmp_path):
    topo_path = tmp_path / "us-10m.v1.json"
    topo_path.write_text(json.dumps(make_topology()), encoding="utf-8")
    csv_path = tmp_path / "density.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")
    return topo_path, csv_path
