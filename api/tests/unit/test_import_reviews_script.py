"""
Tests del script CLI scripts/import_reviews.py.
"""
from __future__ import annotations

import importlib.util
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import ArgumentError

from reviews.infrastructure.external.reviews_import.errors import ImportConfigError
from reviews.infrastructure.external.reviews_import.import_service import ImportResult, ImportStopReason

_SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "import_reviews.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("import_reviews_script", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_successful_run_returns_zero_and_releases_resources(script) -> None:
    engine = MagicMock()
    service = MagicMock()
    service.import_all.return_value = ImportResult(2, 1, 1, ImportStopReason.COMPLETED)

    with patch.object(script, "create_sync_engine", return_value=engine), \
            patch.object(script, "build_from_settings", return_value=service):
        assert script.main([]) == 0

    service.close.assert_called_once_with()
    engine.dispose.assert_called_once_with()


def test_bad_database_url_returns_non_zero(script) -> None:
    with patch.object(script, "create_sync_engine", side_effect=ArgumentError("URL invalida")):
        assert script.main([]) == 1


def test_unsupported_dialect_returns_non_zero(script) -> None:
    engine = MagicMock()

    with patch.object(script, "create_sync_engine", return_value=engine), \
            patch.object(script, "build_from_settings", side_effect=ImportConfigError("Dialecto sin soporte de upsert: oracle")):
        assert script.main([]) == 1

    engine.dispose.assert_called_once_with()
