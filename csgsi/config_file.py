import logging
import pathlib
from typing import Any, Dict, Mapping, Union

import vdf

from csgsi.config import ConfigInstallError, GSIConfig, Subscription

CONFIG_FILE_HEADER = 'Managed by the csgsi Python library'
LOOPBACK_HOST = '127.0.0.1'

logger = logging.getLogger(__name__)


def config_file_name(service_name: str) -> str:
  return f'gamestate_integration_{service_name}.cfg'


def render_config(config: GSIConfig, port: int) -> Dict[str, Any]:
  return {
    'uri': f'http://{LOOPBACK_HOST}:{port}',
    'timeout': config.timeout.total_seconds(),
    'buffer': config.buffer.total_seconds(),
    'throttle': config.throttle.total_seconds(),
    'heartbeat': config.heartbeat.total_seconds(),
    'auth': dict(config.auth),
    'output': {
      'precision_time': config.precision_time,
      'precision_position': config.precision_position,
      'precision_vector': config.precision_vector,
    },
    'data': {
      subscription.value: subscription in config.subscriptions
      for subscription in Subscription
    },
  }


def stringify(value: Any) -> Union[str, Dict[str, Any]]:
  if isinstance(value, Mapping):
    return {str(key): stringify(item) for key, item in value.items()}
  if isinstance(value, bool):
    return '1' if value else '0'
  if isinstance(value, (int, float, str)):
    return str(value)
  raise TypeError(f'cannot write {type(value).__name__} to a config file')


def to_vdf(document: Mapping[str, Any]) -> str:
  return vdf.dumps({CONFIG_FILE_HEADER: stringify(document)}, pretty=True)


def install_into(config: GSIConfig, cfg_folder: Union[str, pathlib.Path],
                 port: int) -> pathlib.Path:
  cfg_path = pathlib.Path(cfg_folder) / config_file_name(config.service_name)
  try:
    contents = to_vdf(render_config(config, port))
  except (TypeError, ValueError) as e:
    raise ConfigInstallError(
      'failed to serialize config for installation', e) from e
  try:
    cfg_path.write_text(contents, encoding='utf-8')
  except OSError as e:
    raise ConfigInstallError('failed to write config file', e) from e
  logger.info('installed config to %s', cfg_path)
  return cfg_path
