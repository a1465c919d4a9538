import json
from pathlib import Path

import pytest


@pytest.fixture()
def ndjson_records() -> list[dict]:
    """Records with nested objects, arrays of objects and blank values."""
    return [
        {"id": 1, "name": "alpha", "tags": ["a"], "owner": {"email": "a@x.io"}},
        {"id": 2, "name": "", "tags": [], "owner": {"email": None}},
        {"id": 3, "name": "gamma", "items": [{"sku": "s1"}, {"sku": ""}]},
    ]


@pytest.fixture()
def ndjson_file(tmp_path: Path, ndjson_records: list[dict]) -> Path:
    path = tmp_path / "dataset.ndjson"
    path.write_text("".join(json.dumps(record) + "\n" for record in ndjson_records), encoding="utf-8")
    return path
