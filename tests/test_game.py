from pathlib import Path

from aletheia.scanners.game import Game


def test_paths_are_normalised():
    game = Game("Celeste", "/games/celeste", "/prefixes/celeste", "Lutris")
    assert game.installation_dir == Path("/games/celeste")
    assert game.prefix == Path("/prefixes/celeste")


def test_defaults_and_equality():
    game = Game("Celeste")
    assert game.installation_dir is None
    assert game.prefix is None
    assert game == Game("Celeste", None, None, "")