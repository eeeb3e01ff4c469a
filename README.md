# aletheia

Aletheia backs up and restores game saves. It finds the games you have installed through Steam, Heroic (GOG games), Lutris (on Unix) and GOG Galaxy (on Windows). It looks up each game in a game database that lists where the game keeps its save files. It then copies those files into a backup directory, along with a manifest.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Usage

Back up every installed game that the database knows about:

```
aletheia backup
```

Back up only some games by naming them:

```
aletheia backup "Hollow Knight" "Celeste"
```

Restore every game in the backup directory, or only the ones you name:

```
aletheia restore
aletheia restore "Celeste"
```

A launcher can run Aletheia when it starts a game. In that case the `--infer` flag takes the game from the environment variables the launcher sets. With `heroic`, Aletheia reads `HEROIC_GAME_TITLE` and `HEROIC_GAME_RUNNER`, and only GOG games are supported. With `lutris`, which works on Unix only, it reads `GAME_NAME`.

```
aletheia backup --infer lutris
aletheia restore --infer heroic
```

Download the latest game database, or refresh the custom databases listed in your configuration:

```
aletheia update_gamedb
aletheia update_custom_gamedbs
```

Check whether a newer release than 0.1.0 is available:

```
aletheia update
```

If any installed game comes from Steam and no Steam account is set, Aletheia reads the accounts from Steam's `config/loginusers.vdf`. With a single account it picks that one. With several, it asks you to choose. The choice is saved to the configuration.

Set `ALETHEIA_LOG` to change the log level, for example `ALETHEIA_LOG=info`. The default is `WARNING`. You can change where the game database and the release list are downloaded from with `ALETHEIA_GAMEDB_URL` and `ALETHEIA_RELEASES_URL`.

## Configuration

Settings are kept in `config.json`:

- on Unix, in `$XDG_CONFIG_HOME/aletheia`, falling back to `~/.config/aletheia`;
- on Windows, in `%LOCALAPPDATA%\aletheia`.

The file is created with default values the first time Aletheia runs. It holds these settings:

- `save_dir`: where backups are written. The default is `$XDG_DATA_HOME/aletheia` on Unix and `%LOCALAPPDATA%\aletheia\saves` on Windows. If the configured directory no longer exists, it is reset to the default.
- `steam_account_id`: the Steam account whose user data is backed up.
- `custom_databases`: URLs of extra game databases in YAML. Their entries are added to the main database and take precedence over its entries.
- `check_for_updates`: stored in the configuration. The `update` command checks for releases regardless of this setting.

## Game database

The database is a YAML mapping from game name to a `files` entry. That entry holds `windows` and `linux` lists of path patterns. Patterns may use placeholders such as `{GameRoot}`, `{AppData}`, `{LocalAppData}`, `{LocalLow}`, `{Documents}`, `{Home}`, `{GOGAppData}`, `{SteamUserData}`, `{XDGConfig}` and `{XDGData}`. On Unix, the Windows placeholders point into the game's Wine or Proton prefix. The `linux` patterns are used on Unix only.

The database is read from these places:

- a `gamedb.yaml` cached under `aletheia/` in the cache directory (`$XDG_CACHE_HOME/aletheia` on Unix);
- otherwise, a `gamedb.yaml` shipped inside the `aletheia` package directory.

The package does not ship a database of its own. Without one, every game is unknown and nothing is backed up until a database file is provided.

The `™` and `®` signs are removed from a game's name before it is looked up.

## Backup layout

Each game gets its own folder in the save directory, with colons removed from the folder name. The folder holds the copied files and an `aletheia_manifest.yaml`. For each file, the manifest records:

- the original location, with placeholders;
- the SHA-512 hash;
- the size;
- the modification time.

Files named `steam_autocloud.vdf` are skipped. On a later backup, a file is copied again only if its contents have changed and it is newer than the recorded copy.

Before a restore writes anything, every backed-up file is checked against its hash. Files whose target already has the right contents are left alone.

## Using it from Python

- `aletheia.operations.backup_game(game, config, entry)` backs up one game.
- `aletheia.operations.restore_game(game_dir, manifest, installed_games, config)` restores one game.
- `aletheia.gamedb.parse()` loads the database.
- `aletheia.gamedb.get_installed_games()` lists the installed games that the database knows.
- `aletheia.config.Config.load()` reads the settings.

Failures raise:

- `BackupError` (and its subclass `MalformedManifestError`);
- `RestoreError` (and its subclasses `GameNotFoundError` and `MissingOrCorruptedFilesError`);
- `GameDbError`;
- `UpdateError`.

## What it does not do

Aletheia is a command-line tool only. It has no graphical interface. Run without a command, it prints a usage line and exits. Settings such as the save directory or custom databases are changed by editing `config.json`. The update check only reports a newer release and its download link; it does not download or install anything.