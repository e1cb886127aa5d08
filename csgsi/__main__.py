"""Command line listener that prints every game state update it receives.

Installs a config file for the game client (discovered, or given with
--cfg-dir), then serves until interrupted.
"""

import argparse
import logging
import pathlib
from typing import List, Optional

from csgsi.config import SPECTATOR_ONLY, UNRESTRICTED, GSIConfigBuilder
from csgsi.describe import describe, render_tree
from csgsi.envconfig import LOG_LEVEL, PORT
from csgsi.models import Update
from csgsi.server import GSIServer

logging.basicConfig(format='%(asctime)s.%(msecs).3dZ\t'
                           '%(name)s\t%(levelname)s\t%(message)s',
                    datefmt='%Y-%m-%dT%H:%M:%S',
                    level=LOG_LEVEL)
logger = logging.getLogger(__name__)

arg_parser = argparse.ArgumentParser(prog='csgsi')
arg_parser.add_argument('-p', '--port', metavar='PORT', type=int,
                        default=PORT, help='Listen on this TCP port.')
arg_parser.add_argument('-n', '--name', metavar='NAME', default='csgsi',
                        help='Service name used in the config file name.')
arg_parser.add_argument('-c', '--cfg-dir', metavar='DIR', type=pathlib.Path,
                        help='Install the config file into this directory '
                             'instead of the discovered game directory.')
arg_parser.add_argument('-a', '--auth', metavar='KEY=VALUE', action='append',
                        default=[], help='Auth token echoed by the client.')
arg_parser.add_argument('-s', '--spectator', action='store_true',
                        help='Also subscribe to spectator-only data.')
arg_parser.add_argument('-d', '--describe', action='store_true',
                        help='Print updates as a labelled tree.')


def print_update(update: Update) -> None:
  print(f'Got an update {update!r}')


def print_description(update: Update) -> None:
  for line in render_tree(describe(update)):
    print(line)


def main(args: Optional[List[str]] = None) -> None:
  args = arg_parser.parse_args(args)

  builder = GSIConfigBuilder(args.name).subscribe_multiple(UNRESTRICTED)
  if args.spectator:
    builder.subscribe_multiple(SPECTATOR_ONLY)
  for pair in args.auth:
    key, sep, value = pair.partition('=')
    if not sep:
      arg_parser.error(f'expected KEY=VALUE, got {pair!r}')
    builder.auth(key, value)

  server = GSIServer(builder.build(), args.port)
  if args.cfg_dir is not None:
    server.install_into(args.cfg_dir)
  server.add_listener(print_description if args.describe else print_update)

  try:
    server.run()
  except KeyboardInterrupt:
    logger.info('interrupted')


if __name__ == '__main__':
  main()
