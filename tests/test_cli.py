import json
from pathlib import Path

from zipradius.cli import main

SAMPLE_DATASET = Path(__file__).resolve().parents[1] / "data" / "zipCodeDatabase.json"


def test_search_prints_summary_and_layout(capsys):
    code = main(["search", "10001, 90210", "--radius", "10", "--dataset", str(SAMPLE_DATASET), "--offline"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Found 10 zip codes within 10 miles" in out
    assert "Layout: split view [10001 | 90210]" in out
    assert "map 2:" in out


def test_search_labels_only(capsys):
    code = main(["search", "90210", "--radius", "5", "--dataset", str(SAMPLE_DATASET), "--offline", "--labels-only"])
    assert code == 0
    assert capsys.readouterr().out.strip() == "90024, 90046, 90210"


def test_search_geojson(capsys):
    code = main(["search", "60601", "--radius", "5", "--dataset", str(SAMPLE_DATASET), "--offline", "--geojson"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["circles"]["type"] == "FeatureCollection"
    assert len(payload["matches"]["features"]) == 3


def test_search_json(capsys):
    code = main(["search", "10001", "--dataset", str(SAMPLE_DATASET), "--offline", "--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["plan"]["kind"] == "single"


def test_search_errors_exit_2(capsys):
    code = main(["search", "10001", "--radius", "500", "--dataset", str(SAMPLE_DATASET), "--offline"])
    assert code == 2
    assert "radius_mi must be between" in capsys.readouterr().err


def test_layout_command(capsys):
    code = main(["layout", "--seed", "a=40.75,-73.99", "--seed", "b=34.09,-118.41", "--json"])
    assert code == 0
    assert json.loads(capsys.readouterr().out)["plan"]["kind"] == "split"


def test_layout_rejects_bad_seed(capsys):
    assert main(["layout", "--seed", "a=95,0"]) == 2
    assert main(["layout", "--seed", "nocoords"]) == 2


def test_dataset_stats(capsys):
    assert main(["dataset-stats", "--dataset", str(SAMPLE_DATASET)]) == 0
    assert json.loads(capsys.readouterr().out)["states"] == 6
