"""Back up and restore game save files found through Steam, Heroic, Lutris and GOG Galaxy."""

__version__ = "0.1.0"