from __future__ import annotations

import json
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.release.state import (
    RELEASE_HASH,
    RELEASE_TAG,
    ReleaseState,
    Versions,
    clear_state,
    load_state,
    save_state,
    state_path,
)


class TestReleaseState:
    def test_defaults(self) -> None:
        state = ReleaseState()
        assert state.use_defaults is False
        assert state.skip_tests is False
        assert state.versions is None
        assert state.metadata == ()

    def test_updates_return_new_state(self) -> None:
        state = ReleaseState()
        updated = state.with_versions(Versions("1.2.0", "1.2.1-SNAPSHOT"))
        assert state.versions is None
        assert updated.versions == Versions("1.2.0", "1.2.1-SNAPSHOT")

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            ReleaseState().skip_tests = True  # type: ignore[misc]

    def test_metadata_replaces_key(self) -> None:
        state = ReleaseState().with_metadata(RELEASE_TAG, "v1").with_metadata(RELEASE_TAG, "v2")
        assert state.get_metadata(RELEASE_TAG) == "v2"
        assert state.get_metadata(RELEASE_HASH) is None
        assert len(state.metadata) == 1

    def test_require_versions_missing(self) -> None:
        result = ReleaseState().require_versions()
        assert isinstance(result, Err)
        assert result.error.kind == "sequence"

    def test_require_versions_present(self) -> None:
        state = ReleaseState(versions=Versions("1.0", "1.1-SNAPSHOT"))
        assert state.require_versions() == Ok(Versions("1.0", "1.1-SNAPSHOT"))


class TestPersistence:
    def test_roundtrip(self, tmp_path: Path) -> None:
        state = ReleaseState(
            use_defaults=True,
            skip_tests=True,
            versions=Versions("1.2.0", "1.2.1-SNAPSHOT"),
            current_version="1.2.0",
        ).with_metadata(RELEASE_HASH, "abc")

        assert save_state(tmp_path, state) == Ok(None)
        assert load_state(tmp_path) == Ok(state)

    def test_state_directory_ignores_itself(self, tmp_path: Path) -> None:
        save_state(tmp_path, ReleaseState())

        ignore = state_path(tmp_path).parent / ".gitignore"
        assert ignore.read_text(encoding="utf-8") == "*\n"

    def test_existing_ignore_file_is_kept(self, tmp_path: Path) -> None:
        ignore = state_path(tmp_path).parent / ".gitignore"
        ignore.parent.mkdir()
        ignore.write_text("*\n!keep\n", encoding="utf-8")

        save_state(tmp_path, ReleaseState())

        assert ignore.read_text(encoding="utf-8") == "*\n!keep\n"

    def test_missing_file_means_no_release(self, tmp_path: Path) -> None:
        assert load_state(tmp_path) == Ok(None)

    def test_clear(self, tmp_path: Path) -> None:
        save_state(tmp_path, ReleaseState())
        assert clear_state(tmp_path) == Ok(None)
        assert not state_path(tmp_path).exists()
        assert clear_state(tmp_path) == Ok(None)

    def test_corrupt_json(self, tmp_path: Path) -> None:
        path = state_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("{", encoding="utf-8")

        result = load_state(tmp_path)

        assert isinstance(result, Err)
        assert "failed to load" in result.error.message

    def test_unknown_schema(self, tmp_path: Path) -> None:
        path = state_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"schema": 99}), encoding="utf-8")

        result = load_state(tmp_path)

        assert isinstance(result, Err)
        assert "schema" in result.error.message

    def test_missing_fields(self, tmp_path: Path) -> None:
        path = state_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"schema": 1}), encoding="utf-8")

        assert isinstance(load_state(tmp_path), Err)

    def test_incomplete_versions(self, tmp_path: Path) -> None:
        path = state_path(tmp_path)
        path.parent.mkdir(parents=True)
        payload = {
            "schema": 1,
            "use_defaults": False,
            "skip_tests": False,
            "versions": {"release": "1.0"},
        }
        path.write_text(json.dumps(payload), encoding="utf-8")

        assert isinstance(load_state(tmp_path), Err)
