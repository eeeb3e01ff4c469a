"""Finders for games installed through Steam, Heroic, Lutris and GOG Galaxy."""