import itertools
import os
import pathlib
import sys
from typing import Iterator, Mapping, Optional

import vdf

from csgsi.config import ConfigInstallError
from csgsi.envconfig import CFG_DIR

if sys.platform == 'win32':
  import winreg

GAME_DIR_NAME = 'Counter-Strike Global Offensive'


def get_steam_root() -> pathlib.Path:
  if sys.platform == 'win32':
    try:
      with winreg.OpenKey(winreg.HKEY_CURRENT_USER,
                          r'Software\Valve\Steam') as key:
        steam_path, value_type = winreg.QueryValueEx(key, 'SteamPath')
    except OSError as e:
      raise ConfigInstallError(
        'could not find Steam install path in Windows registry', e) from e
    if value_type not in (winreg.REG_SZ, winreg.REG_EXPAND_SZ):
      raise ConfigInstallError(
        'could not find Steam install path in Windows registry, '
        'had a weird type')
    return pathlib.Path(steam_path)

  home = pathlib.Path.home()
  if sys.platform == 'darwin':
    return home / 'Library' / 'Application Support' / 'Steam'
  if sys.platform.startswith('linux'):
    return home / '.local' / 'share' / 'Steam'
  raise ConfigInstallError(f'unsupported platform {sys.platform}')


def get_library_folders_file() -> pathlib.Path:
  return get_steam_root() / 'steamapps' / 'libraryfolders.vdf'


def iter_library_folders(library_folders_file: pathlib.Path,
                         folders: Mapping) -> Iterator[pathlib.Path]:
  # The Steam root is always a library, even when not listed.
  yield library_folders_file.parent.parent
  for index in itertools.count(1):
    entry = folders.get(str(index))
    if entry is None:
      return
    # Newer Steam clients write a block per library instead of a bare path.
    if isinstance(entry, Mapping):
      entry = entry.get('path')
      if entry is None:
        continue
    yield pathlib.Path(entry)


def discover_cfg_folder(
    library_folders_file: Optional[pathlib.Path] = None) -> pathlib.Path:
  if library_folders_file is None:
    if CFG_DIR is not None:
      return CFG_DIR
    library_folders_file = get_library_folders_file()

  try:
    with open(library_folders_file, encoding='utf-8') as fp:
      library_folders_data = vdf.load(fp)
  except OSError as e:
    raise ConfigInstallError(
      'could not read libraryfolders.vdf file', e) from e
  except (SyntaxError, ValueError) as e:
    raise ConfigInstallError(
      'could not parse libraryfolders.vdf file', e) from e

  folders = next(iter(library_folders_data.values()), {})
  if not isinstance(folders, Mapping):
    raise ConfigInstallError('could not parse libraryfolders.vdf file')

  for library in iter_library_folders(library_folders_file, folders):
    game_dir = library / 'steamapps' / 'common' / GAME_DIR_NAME
    if os.path.isdir(game_dir):
      return game_dir / 'csgo' / 'cfg'
  raise ConfigInstallError('could not find CS:GO install directory')
