"""
RoadRater Backend — Configuration and Error Taxonomy Tests
============================================================
"""

import pytest

from roadrater.config import Settings, load_settings
from roadrater.exceptions import (
    STATUS_BY_KIND,
    ConflictError,
    DatabaseError,
    ErrorKind,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


def _settings(**overrides):
    values = {"jwt_secret": "config-test-secret", "database_url": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_cors_origin_list(self):
        settings = _settings(cors_origin="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
        assert settings.allow_any_origin is False

    def test_cors_wildcard(self):
        assert _settings(cors_origin="*").allow_any_origin is True

    @pytest.mark.parametrize("scheme", ["postgres", "postgresql"])
    def test_database_url_upgraded_to_asyncpg(self, scheme):
        settings = _settings(database_url=f"{scheme}://u:p@db:5432/roads")
        assert settings.sqlalchemy_url == "postgresql+asyncpg://u:p@db:5432/roads"

    def test_database_url_assembled_from_parts(self):
        settings = _settings(db_host="db", postgres_password="secret")
        assert settings.sqlalchemy_url == "postgresql+asyncpg://postgres:secret@db:5432/roadrater"

    def test_log_level_normalized(self):
        assert _settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(Exception):
            _settings(log_level="chatty")

    def test_missing_secret_exits(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("JWT_SECRET", raising=False)

        with pytest.raises(SystemExit) as excinfo:
            load_settings()
        assert excinfo.value.code == 1

    def test_short_secret_exits(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("JWT_SECRET", "short")

        with pytest.raises(SystemExit):
            load_settings()


class TestErrorTaxonomy:

    def test_every_kind_has_a_status(self):
        assert set(STATUS_BY_KIND) == set(ErrorKind)

    @pytest.mark.parametrize(
        "error,status",
        [
            (ValidationError("bad"), 400),
            (UnauthorizedError(), 401),
            (NotFoundError(), 404),
            (ConflictError(), 409),
            (DatabaseError(), 500),
        ],
    )
    def test_status_codes(self, error, status):
        assert error.status_code == status

    def test_validation_field_details(self):
        assert ValidationError("bad", field="username").details == {"field": "username"}
