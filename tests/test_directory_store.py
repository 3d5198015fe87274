"""Tests for the frames_out directory preference."""

from smoothkit.services.directory_store import DirectoryPreferenceStore


def test_round_trip_across_instances(qapp, settings_path) -> None:
    """A saved directory is what a fresh store loads."""
    store = DirectoryPreferenceStore.from_path(settings_path)
    assert store.load().value == ""

    result = store.save("/v/frames_out")
    assert result.ok
    assert store.value == "/v/frames_out"

    fresh = DirectoryPreferenceStore.from_path(settings_path)
    loaded = fresh.load()
    assert loaded.ok
    assert loaded.value == "/v/frames_out"


def test_save_overwrites(qapp, settings_path) -> None:
    store = DirectoryPreferenceStore.from_path(settings_path)
    store.save("/a")
    store.save("/b")
    assert DirectoryPreferenceStore.from_path(settings_path).load().value == "/b"


def test_blank_save_is_refused(qapp, settings_path) -> None:
    store = DirectoryPreferenceStore.from_path(settings_path)
    store.save("/a")
    result = store.save("   ")
    assert not result.ok
    assert result.error
    assert DirectoryPreferenceStore.from_path(settings_path).load().value == "/a"


class _BrokenSettings:
    def value(self, key, default=None):
        raise OSError("registry unavailable")

    def setValue(self, key, value):
        raise OSError("read-only")

    def sync(self):
        pass

    def status(self):
        return 0


def test_failures_are_returned_not_raised() -> None:
    store = DirectoryPreferenceStore(_BrokenSettings())

    loaded = store.load()
    assert not loaded.ok
    assert loaded.value == ""
    assert "registry unavailable" in loaded.error

    saved = store.save("/v/frames_out")
    assert not saved.ok
    assert "read-only" in saved.error


class _NonStringSettings(_BrokenSettings):
    def value(self, key, default=None):
        return 42


def test_non_string_value_loads_empty() -> None:
    loaded = DirectoryPreferenceStore(_NonStringSettings()).load()
    assert not loaded.ok
    assert loaded.value == ""
