"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from krnetpay.backend.app import create_app  # noqa: E402
from krnetpay.backend.app.models import ReferenceSnapshot  # noqa: E402
from krnetpay.backend.app.services.reference_data import ReferenceDataStore  # noqa: E402
from krnetpay.backend.config.engine_config import resolve_data_path  # noqa: E402

SAMPLE_PERCENTILES = resolve_data_path("reference/percentiles.csv")
SAMPLE_AVERAGES = resolve_data_path("reference/averages.json")


@pytest.fixture()
def reference_store() -> ReferenceDataStore:
    """Return a store loaded synchronously from the bundled sample datasets."""

    store = ReferenceDataStore()
    store.load(SAMPLE_PERCENTILES, SAMPLE_AVERAGES)
    return store


@pytest.fixture()
def reference_snapshot(reference_store: ReferenceDataStore) -> ReferenceSnapshot:
    return reference_store.snapshot()


@pytest.fixture()
def app(reference_store: ReferenceDataStore) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(reference_store=reference_store)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
