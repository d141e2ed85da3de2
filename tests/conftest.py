import json

import pytest

from specledger.app import app as flask_app

PHONES = [
    {
        "id": "a",
        "brand": "Acme",
        "model": "X1",
        "release_date": "2024-03-01",
        "chipset": {"name": "Z1"},
        "display": {"size_in": 6.1, "type": "OLED"},
        "battery": {"mah": 4500},
        "source_url": "https://acme.example/x1",
    },
    {
        "id": "b",
        "brand": "Bolt",
        "model": "B2",
        "chipset": {"name": "Q9"},
        "memory": {"ram_gb": 8},
        "camera": {"main": "50 MP"},
        "os": {"name": "Android 15"},
    },
    {
        "id": "c",
        "brand": "Acme",
        "model": "X2 Pro",
        "chipset": {"name": "Z2"},
        "waterproof": {"rating": "IP68"},
        "colors": ["Black", "Blue"],
    },
]


@pytest.fixture
def phones():
    return [dict(phone) for phone in PHONES]


@pytest.fixture
def write_json(tmp_path):
    def _write(name, payload):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def app(tmp_path, write_json, phones):
    saved = dict(flask_app.config)
    flask_app.config.update(
        TESTING=True,
        SITE_NAME="SpecLedger",
        SITE_URL="https://specs.example",
        DATA_PATHS=[str(tmp_path / "missing.json"), write_json("phones.json", {"items": phones})],
        COMPARISONS_PATH=write_json("comparisons.json", {"pages": [{"slug": "a-vs-b", "ids": ["a", "b"]}]}),
        REPORT_MISSING_IDS=False,
        INCLUDE_UNLABELED_FIELDS=False,
    )
    yield flask_app
    flask_app.config.clear()
    flask_app.config.update(saved)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def site():
    return {"name": "SpecLedger", "url": "https://specs.example"}
