from pathlib import Path

import pytest

from zipradius.catalog.loader import ReferenceDataset, load_reference_dataset

SAMPLE_DATASET = Path(__file__).resolve().parents[1] / "data" / "zipCodeDatabase.json"


@pytest.fixture
def sample_dataset() -> ReferenceDataset:
    # Small real-coordinate extract (NYC, Newark, Philadelphia, Chicago, LA, Miami).
    return load_reference_dataset(SAMPLE_DATASET)
