import importlib.util
import json
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "zipcodes_import.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("zipcodes_import", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_csv_export_becomes_loadable_dataset(tmp_path):
    csv_path = tmp_path / "uszips.csv"
    csv_path.write_text(
        "zip,lat,lng,city,state_id,state_name,population,density,county_name,imprecise,military,timezone\n"
        "501,40.8133,-73.0476,Holtsville,NY,New York,0,0,Suffolk,FALSE,FALSE,America/New_York\n"
        "10001,40.7505,-73.9934,New York,NY,New York,25026,33959.2,New York,FALSE,FALSE,America/New_York\n"
        "99999,,,Nowhere,ZZ,Nowhere,,,,,,\n",
        encoding="utf-8",
    )
    out = tmp_path / "zips.json"

    script = _load_script()
    assert script.main(["--in-csv", str(csv_path), "--out", str(out)]) == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert [row["zipCode"] for row in payload["zipCodes"]] == ["00501", "10001"]
    assert payload["stats"]["totalZipCodes"] == 2
    assert payload["stats"]["totalPopulation"] == 25026
    assert payload["stats"]["states"] == 1
    assert payload["stats"]["counties"] == 2

    from zipradius.catalog.loader import load_reference_dataset

    dataset = load_reference_dataset(out)
    assert dataset.get("00501").metadata["city"] == "Holtsville"
