import importlib
import json
import sys

import numpy as np
import pytest

import county_density_map as cdm


def test_decode_arcs_applies_delta_and_transform():
    topology = {
        "type": "Topology",
        "transform": {"scale": [2, 0.5], "translate": [100, 10]},
        "arcs": [[[0, 0], [3, 4], [1, -2]]],
    }
    arcs = cdm.decode_arcs(topology)
    np.testing.assert_allclose(arcs[0], [[100, 10], [106, 12], [108, 11]])


def test_decode_arcs_without_transform_is_absolute():
    arcs = cdm.decode_arcs({"type": "Topology", "arcs": [[[1, 2, 99], [3, 4, 99]]]})
    np.testing.assert_allclose(arcs[0], [[1, 2], [3, 4]])


def test_ring_points_joins_and_reverses_arcs():
    arcs = [np.array([[0, 0], [1, 0], [1, 1]]), np.array([[1, 1], [0, 1], [0, 0]])]
    ring = cdm.ring_points([0, 1], arcs)
    assert ring.tolist() == [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]
    reversed_ring = cdm.ring_points([~0], arcs)
    assert reversed_ring.tolist() == [[1, 1], [1, 0], [0, 0]]


def test_geometry_rings_for_multipolygon(topology):
    arcs = cdm.decode_arcs(topology)
    feature = cdm.county_features(topology)[2]
    rings = cdm.geometry_rings(feature, arcs)
    assert len(rings) == 1
    assert rings[0][0].tolist() == [10, 0]
    assert cdm.geometry_rings({"type": None}, arcs) == []


def test_path_data():
    ring = np.array([[0, 0], [10, 0], [10, 10.12345]])
    assert cdm.path_data([ring]) == "M0,0L10,0L10,10.123Z"
    assert cdm.path_data([np.empty((0, 2))]) == ""


def test_fit_transform_centres_bounds():
    scale, tx, ty = cdm.fit_transform((0, 0, 20, 10), 800, 500, top=40)
    assert scale == 40
    assert tx == 0
    assert ty == 70


def test_fit_transform_without_bounds():
    assert cdm.fit_transform(None, 800, 500, top=40) == (1.0, 0.0, 40.0)


def test_format_density():
    assert cdm.format_density(35.2) == "35.2"
    assert cdm.format_density(10.0) == "10"


def test_sqrt_scale_endpoints():
    assert cdm.sqrt_scale(0) == cdm.LEGEND_RANGE[0]
    assert cdm.sqrt_scale(4500) == cdm.LEGEND_RANGE[1]
    assert cdm.sqrt_scale(1) < cdm.sqrt_scale(10) < cdm.sqrt_scale(4000)


def test_build_svg(topology, index, classifier):
    kept = cdm.filter_features(cdm.county_features(topology), index)
    soup = cdm.build_svg(kept, cdm.decode_arcs(topology), index, classifier)

    paths = soup.find_all("path", attrs={"data-county-id": True})
    assert [p["data-county-id"] for p in paths] == ["21001", "21003"]
    adair = soup.find("path", attrs={"id": "county-21001"})
    assert adair["fill"] == "c2"
    assert adair["stroke"] == "none"
    assert adair["data-name"] == "Adair County"
    assert adair["data-density-label"] == "35.2 / sq mi"

    legend = soup.find("g", attrs={"id": "legend"})
    swatches = legend.find_all("rect", recursive=False)
    assert [r["fill"] for r in swatches] == [f"c{i}" for i in range(9)]
    assert legend.find("text", attrs={"class": "caption"}).string == "Population per square mile"
    ticks = [t.find("text").string for t in legend.find_all("g", attrs={"class": "tick"})]
    assert ticks == ["1", "10", "50", "200", "500", "1,000", "2,000", "4,000"]

    svg = soup.find("svg")
    assert svg["width"] == "900"
    assert svg["height"] == "600"


def test_build_svg_with_boundaries(topology, index, classifier):
    kept = cdm.filter_features(cdm.county_features(topology), index)
    soup = cdm.build_svg(kept, cdm.decode_arcs(topology), index, classifier, cdm.RenderState(1, True))
    adair = soup.find("path", attrs={"id": "county-21001"})
    assert adair["fill"] == "d2"
    assert adair["stroke"] == cdm.BOUNDARY_COLOR


def test_hover_outline_draws_its_own_white_stroke(topology, index, classifier):
    kept = cdm.filter_features(cdm.county_features(topology), index)
    soup = cdm.build_svg(kept, cdm.decode_arcs(topology), index, classifier)

    # a <use> clone would keep the county's own fill and stroke attributes
    assert soup.find("use") is None
    outline = soup.find("path", attrs={"id": "hover-outline"})
    assert outline.parent["id"] == "hover-layer"
    assert outline["fill"] == "none"
    assert outline["stroke"] == cdm.HOVER_COLOR
    assert outline["stroke-opacity"] == "1"
    assert "data-county-id" not in outline.attrs

    # the hover layer follows the counties group so it paints above them
    map_group = soup.find("g", attrs={"id": "map"})
    layers = map_group.find_all("g", recursive=False)
    assert layers[0]["class"] == "counties"
    assert layers[-1]["id"] == "hover-layer"

    page = cdm.render_page(soup, cdm.build_state_table(index, classifier), "Kentucky")
    assert "outline.setAttribute('d', s.getAttribute('d'));" in page
    assert "outline.setAttribute('d', '');" in page


def test_render_page_embeds_state_table(topology, index, classifier):
    kept = cdm.filter_features(cdm.county_features(topology), index)
    soup = cdm.build_svg(kept, cdm.decode_arcs(topology), index, classifier)
    table = cdm.build_state_table(index, classifier)
    page = cdm.render_page(soup, table, "Kentucky population density by county")

    assert "<title>Kentucky population density by county</title>" in page
    assert ">Color</button>" in page
    assert ">Toggle County Boundary</button>" in page
    assert "'Density:'" in page
    assert "ev.clientX + 5" in page
    assert "ev.clientY + -45" in page
    start = page.index('id="render-states">') + len('id="render-states">')
    end = page.index("</script>", start)
    assert json.loads(page[start:end]) == table


def test_build_artifact(index, classifier):
    artifact = cdm.build_artifact(index, classifier, 1, sources={}, outputs={})
    assert artifact["mapping"]["21001"] == {
        "name": "Adair County",
        "density": 35.2,
        "band_index": 2,
        "fills": ["c2", "d2"],
    }
    stats = artifact["stats"]
    assert stats["min"] == 35.2
    assert stats["max"] == 59.1
    assert sum(b["count"] for b in stats["bins"]) == 2
    assert stats["bins"][-1]["label"] == "4,000 - 4,500"
    assert stats["dropped_features"] == 1


def test_export_png_without_cairosvg(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(cdm, "cairosvg", None)
    assert cdm.export_png("<svg/>", tmp_path / "out.png") is False
    assert "skipping PNG export" in capsys.readouterr().out


def test_module_imports_when_libcairo_is_missing(monkeypatch, tmp_path):
    # cairosvg is installed but its cairo bindings cannot load the shared library
    fake = tmp_path / "cairosvg"
    fake.mkdir()
    (fake / "__init__.py").write_text("raise OSError('no library called \"cairo-2\" was found')\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "cairosvg", raising=False)
    try:
        reloaded = importlib.reload(cdm)
        assert reloaded.cairosvg is None
    finally:
        monkeypatch.undo()
        importlib.reload(cdm)
