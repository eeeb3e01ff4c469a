import os

import pytest

from aletheia.config import Config
from aletheia.gamedb import GameDbEntry, GameFiles, GameInfo
from aletheia.hashing import hash_file
from aletheia.operations import (
    MANIFEST_NAME,
    GameNotFoundError,
    MalformedManifestError,
    MissingOrCorruptedFilesError,
    RestoreError,
    backup_game,
    restore_game,
)
from aletheia.scanners.game import Game


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg_config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg_data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    install = tmp_path / "install"
    install.mkdir()
    save_dir = tmp_path / "backups"
    save_dir.mkdir()
    return install, Config(save_dir=save_dir)


def _entry(*patterns):
    return GameDbEntry(GameFiles(windows=None, linux=list(patterns)))


def test_backup_copies_files_and_writes_manifest(env):
    install, config = env
    (install / "save.dat").write_bytes(b"progress")
    game = Game("Demo", install, None, "Steam")

    assert backup_game(game, config, _entry("{GameRoot}/save.dat")) is True

    folder = config.save_dir / "Demo"
    assert (folder / "save.dat").read_bytes() == b"progress"
    manifest = GameInfo.load(folder / MANIFEST_NAME)
    assert manifest.name == "Demo"
    assert [f.path for f in manifest.files] == ["{GameRoot}/save.dat"]
    assert manifest.files[0].hash == hash_file(install / "save.dat")
    assert manifest.files[0].size == len(b"progress")


def test_backup_unchanged_returns_false(env):
    install, config = env
    (install / "save.dat").write_bytes(b"progress")
    game = Game("Demo", install, None, "Steam")
    entry = _entry("{GameRoot}/save.dat")

    assert backup_game(game, config, entry) is True
    assert backup_game(game, config, entry) is False


def test_backup_detects_newer_changed_file(env):
    install, config = env
    save = install / "save.dat"
    save.write_bytes(b"first")
    game = Game("Demo", install, None, "Steam")
    entry = _entry("{GameRoot}/save.dat")
    backup_game(game, config, entry)

    save.write_bytes(b"second")
    stat = os.stat(save)
    os.utime(save, (stat.st_atime + 100, stat.st_mtime + 100))

    assert backup_game(game, config, entry) is True
    folder = config.save_dir / "Demo"
    assert (folder / "save.dat").read_bytes() == b"second"
    assert GameInfo.load(folder / MANIFEST_NAME).files[0].hash == hash_file(save)


def test_backup_without_matches_creates_nothing(env):
    install, config = env
    game = Game("Demo", install, None, "Steam")
    assert backup_game(game, config, _entry("{GameRoot}/missing.dat")) is False
    assert not (config.save_dir / "Demo").exists()


def test_backup_strips_colons_from_folder(env):
    install, config = env
    (install / "save.dat").write_bytes(b"x")
    game = Game("Demo: Part Two", install, None, "Steam")
    backup_game(game, config, _entry("{GameRoot}/save.dat"))
    assert (config.save_dir / "Demo Part Two" / "save.dat").exists()


def test_backup_skips_directories_and_autocloud(env):
    install, config = env
    (install / "save.dat").write_bytes(b"x")
    (install / "steam_autocloud.vdf").write_bytes(b"cloud")
    (install / "subdir").mkdir()
    game = Game("Demo", install, None, "Steam")

    assert backup_game(game, config, _entry("{GameRoot}/*")) is True
    manifest = GameInfo.load(config.save_dir / "Demo" / MANIFEST_NAME)
    assert [f.path for f in manifest.files] == ["{GameRoot}/save.dat"]


def test_backup_rejects_malformed_manifest(env):
    install, config = env
    (install / "save.dat").write_bytes(b"x")
    folder = config.save_dir / "Demo"
    folder.mkdir()
    (folder / MANIFEST_NAME).write_text("just some text\n")
    game = Game("Demo", install, None, "Steam")

    with pytest.raises(MalformedManifestError):
        backup_game(game, config, _entry("{GameRoot}/save.dat"))


def test_restore_round_trip(env):
    install, config = env
    save = install / "nested" / "save.dat"
    save.parent.mkdir()
    save.write_bytes(b"precious")
    game = Game("Demo", install, None, "Steam")
    backup_game(game, config, _entry("{GameRoot}/nested/save.dat"))

    save.unlink()
    save.parent.rmdir()
    folder = config.save_dir / "Demo"
    manifest = GameInfo.load(folder / MANIFEST_NAME)

    assert restore_game(folder, manifest, [game], config) is True
    assert save.read_bytes() == b"precious"


def test_restore_requires_installed_game(env):
    install, config = env
    (install / "save.dat").write_bytes(b"x")
    game = Game("Demo", install, None, "Steam")
    backup_game(game, config, _entry("{GameRoot}/save.dat"))
    folder = config.save_dir / "Demo"
    manifest = GameInfo.load(folder / MANIFEST_NAME)

    with pytest.raises(GameNotFoundError):
        restore_game(folder, manifest, [Game("Other", install, None, "Steam")], config)


def test_restore_detects_corrupted_backup(env):
    install, config = env
    (install / "save.dat").write_bytes(b"x")
    game = Game("Demo", install, None, "Steam")
    backup_game(game, config, _entry("{GameRoot}/save.dat"))
    folder = config.save_dir / "Demo"
    manifest = GameInfo.load(folder / MANIFEST_NAME)
    (folder / "save.dat").write_bytes(b"tampered")

    with pytest.raises(MissingOrCorruptedFilesError) as excinfo:
        restore_game(folder, manifest, [game], config)
    assert excinfo.value.file_name == "save.dat"
    assert isinstance(excinfo.value, RestoreError)


def test_restore_leaves_identical_files(env):
    install, config = env
    save = install / "save.dat"
    save.write_bytes(b"same")
    game = Game("Demo", install, None, "Steam")
    backup_game(game, config, _entry("{GameRoot}/save.dat"))
    folder = config.save_dir / "Demo"
    manifest = GameInfo.load(folder / MANIFEST_NAME)
    before = os.stat(save).st_mtime_ns

    assert restore_game(folder, manifest, [game], config) is True
    assert os.stat(save).st_mtime_ns == before