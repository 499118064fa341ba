"""Tests for storm.foundation.repository - services cache compile/load."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from _support import providers as fixtures
from storm.core.errors import ProviderCacheError, ProviderNotFoundError
from storm.core.filesystem import Filesystem
from storm.foundation.repository import ProviderManifest, ProviderRepository


@pytest.fixture(autouse=True)
def reset_registered():
    fixtures.REGISTERED.clear()
    yield
    fixtures.REGISTERED.clear()


@pytest.fixture
def manifest_path(tmp_path) -> str:
    return str(tmp_path / "framework" / "services.json")


@pytest.fixture
def repository(app, manifest_path) -> ProviderRepository:
    return ProviderRepository(app, Filesystem(), manifest_path)


class TestProviderManifest:
    def test_to_dict(self):
        manifest = ProviderManifest(
            providers=["a.A", "b.B"],
            eager=["a.A"],
            deferred={"svc": "b.B"},
            when={"b.B": ["evt"]},
        )
        assert manifest.to_dict() == {
            "providers": ["a.A", "b.B"],
            "eager": ["a.A"],
            "deferred": {"svc": "b.B"},
            "when": {"b.B": ["evt"]},
        }

    def test_from_dict(self):
        data = {"providers": ["a.A"], "eager": ["a.A"], "deferred": {}, "when": {}}
        manifest = ProviderManifest.from_dict(data, "services.json")
        assert manifest.providers == ["a.A"]
        assert manifest.eager == ["a.A"]

    def test_from_dict_when_optional(self):
        manifest = ProviderManifest.from_dict(
            {"providers": [], "eager": [], "deferred": {}}, "services.json"
        )
        assert manifest.when == {}

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "text",
            {"providers": [], "eager": []},
            {"providers": "a.A", "eager": [], "deferred": {}},
            {"providers": [], "eager": [1], "deferred": {}},
            {"providers": [], "eager": [], "deferred": ["svc"]},
            {"providers": [], "eager": [], "deferred": {}, "when": {"a.A": "evt"}},
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ProviderCacheError) as exc_info:
            ProviderManifest.from_dict(data, "services.json")
        assert exc_info.value.path == "services.json"


class TestProviderRepository:
    def test_load_without_cache_compiles(self, repository, manifest_path):
        manifest = repository.load([fixtures.APP, fixtures.DEFERRED])

        assert manifest.eager == [fixtures.APP]
        assert set(manifest.deferred) == {"deferred.service", "deferred.other"}
        assert Path(manifest_path).is_file()
        assert fixtures.REGISTERED == ["app"]

    def test_load_uses_existing_cache(self, repository, manifest_path):
        repository.load([fixtures.APP])
        fixtures.REGISTERED.clear()

        with patch.object(repository, "compile_manifest") as mock_compile:
            repository.load([fixtures.APP])
        mock_compile.assert_not_called()

    def test_recompiles_when_provider_list_changes(self, repository, manifest_path):
        repository.load([fixtures.APP])
        manifest = repository.load([fixtures.APP, fixtures.CORE])

        assert manifest.providers == [fixtures.APP, fixtures.CORE]
        data = json.loads(Path(manifest_path).read_text())
        assert data["eager"] == [fixtures.APP, fixtures.CORE]

    def test_should_recompile(self, repository):
        manifest = ProviderManifest(providers=["a.A"])
        assert repository.should_recompile(None, ["a.A"]) is True
        assert repository.should_recompile(manifest, ["a.A"]) is False
        assert repository.should_recompile(manifest, ["b.B"]) is True

    def test_load_manifest_missing(self, repository):
        assert repository.load_manifest() is None

    def test_load_manifest_malformed_json(self, repository, manifest_path):
        Path(manifest_path).parent.mkdir(parents=True)
        Path(manifest_path).write_text("{broken")
        with pytest.raises(ProviderCacheError):
            repository.load_manifest()

    def test_malformed_cache_propagates_from_load(self, repository, manifest_path):
        Path(manifest_path).parent.mkdir(parents=True)
        Path(manifest_path).write_text(json.dumps({"eager": []}))
        with pytest.raises(ProviderCacheError):
            repository.load([fixtures.APP])

    def test_compile_unknown_provider(self, repository, manifest_path):
        with pytest.raises(ProviderNotFoundError):
            repository.compile_manifest(["missing_module.Provider"])
        assert not Path(manifest_path).exists()

    def test_compile_does_not_register(self, repository):
        repository.compile_manifest([fixtures.APP, fixtures.DEFERRED])
        assert fixtures.REGISTERED == []

    def test_compile_records_when_events(self, repository):
        manifest = repository.compile_manifest([fixtures.EVENT_DEFERRED])
        assert manifest.when == {fixtures.EVENT_DEFERRED: ["locale.changed"]}
        assert manifest.deferred == {"lazy.service": fixtures.EVENT_DEFERRED}

    def test_register_load_events(self, app, repository):
        repository.register_load_events(fixtures.APP, ["custom.event"])
        assert fixtures.REGISTERED == []

        app.make("events").dispatch("custom.event")
        assert fixtures.REGISTERED == ["app"]

    def test_register_load_events_empty(self, app, repository):
        repository.register_load_events(fixtures.APP, [])
        assert not app.make("events").has_listeners("custom.event")

    def test_deferred_services_added_to_app(self, app, repository):
        repository.load([fixtures.DEFERRED])
        assert app.is_deferred_service("deferred.service")
        assert app.deferred_services["deferred.other"] == fixtures.DEFERRED

    def test_load_without_cache_skips_read(self, repository, manifest_path):
        Path(manifest_path).parent.mkdir(parents=True)
        Path(manifest_path).write_text("{broken")

        with patch.object(repository, "load_manifest") as mock_load_manifest:
            manifest = repository.load([fixtures.APP], use_cache=False)

        mock_load_manifest.assert_not_called()
        assert manifest.eager == [fixtures.APP]
        assert json.loads(Path(manifest_path).read_text())["eager"] == [fixtures.APP]

    def test_failed_eager_registration_adds_no_listeners(self, app, repository, manifest_path):
        providers = ["missing_module.Provider", fixtures.EVENT_DEFERRED]
        cached = ProviderManifest(
            providers=providers,
            eager=["missing_module.Provider"],
            deferred={"lazy.service": fixtures.EVENT_DEFERRED},
            when={fixtures.EVENT_DEFERRED: ["locale.changed"]},
        )
        repository.write_manifest(cached)

        with pytest.raises(ProviderNotFoundError):
            repository.load(providers)

        assert not app.make("events").has_listeners("locale.changed")
        assert not app.is_deferred_service("lazy.service")
