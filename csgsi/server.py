import abc
import concurrent.futures
import logging
import pathlib
import threading
from concurrent.futures import Future
from typing import Dict, List, Union

import flask
import waitress.server

from csgsi import config_file, install_dir
from csgsi.api import create_app
from csgsi.config import GSIConfig
from csgsi.dispatcher import Dispatcher, Listener
from csgsi.envconfig import QUEUE_SIZE

logger = logging.getLogger(__name__)


class Service(metaclass=abc.ABCMeta):
  @abc.abstractmethod
  def __call__(self):
    pass

  @abc.abstractmethod
  def stop(self):
    pass

  def __enter__(self):
    return self

  def __exit__(self, exc_type, exc_val, exc_tb):
    logger.info('stopping %s', self)
    return self.stop()

  def __str__(self):
    return type(self).__name__


class DispatcherService(Service):
  def __init__(self, dispatcher: Dispatcher):
    self.dispatcher = dispatcher

  def __call__(self):
    logger.info('running %s', self)
    self.dispatcher.run()

  def stop(self):
    self.dispatcher.stop()


class WaitressService(Service):
  def __init__(self, app: flask.Flask, host: str, port: int):
    self.server = waitress.server.create_server(
      app, host=host, port=port, _start=False)
    self._lock = threading.Lock()
    logger.info('listening on %s:%s', host, port)

  def __call__(self):
    logger.info('running %s', self)
    with self._lock:
      server = self.server
      if server is None:
        return
      server.accept_connections()
    server.run()

  def stop(self):
    with self._lock:
      server, self.server = self.server, None
    if server is not None:
      logger.debug('closing server')
      server.close()


def wait_on_futures(futures: Dict[Future, Service], timeout: float = 4.0):
  logger.debug('waiting on remaining futures')
  done, not_done = concurrent.futures.wait(futures, timeout=timeout)
  if len(not_done) > 0:
    logger.warning('some futures did not complete: %s',
                   [str(futures[future]) for future in not_done])
  return len(not_done) == 0


class GSIServer:
  """Receives game state pushes on the loopback interface and hands every
  decoded update to the registered listeners."""

  def __init__(self, config: GSIConfig, port: int, host: str = '127.0.0.1',
               queue_size: int = QUEUE_SIZE):
    self.config = config
    self.port = port
    self.host = host
    self.queue_size = queue_size
    self.installed = False
    self.listeners: List[Listener] = []
    self._services: List[Service] = []
    self._lock = threading.Lock()
    self._stop_requested = False

  def install_into(self, cfg_folder: Union[str, pathlib.Path]) -> pathlib.Path:
    cfg_path = config_file.install_into(self.config, cfg_folder, self.port)
    self.installed = True
    return cfg_path

  def install(self) -> pathlib.Path:
    return self.install_into(install_dir.discover_cfg_folder())

  def add_listener(self, listener: Listener):
    self.listeners.append(listener)

  def create_http_service(self, app: flask.Flask) -> Service:
    return WaitressService(app, host=self.host, port=self.port)

  def run(self):
    """Install the config if needed, then serve until stopped.

    Raises whatever ended the run early, such as a listener failure.
    """
    if not self.installed:
      self.install()

    dispatcher = Dispatcher(self.listeners, maxsize=self.queue_size)
    app = create_app(dispatcher)

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=2, thread_name_prefix='csgsi') as executor, \
        DispatcherService(dispatcher) as dispatcher_service, \
        self.create_http_service(app) as http_service:

      futures = {
        executor.submit(dispatcher_service): dispatcher_service,
        executor.submit(http_service): http_service,
      }
      with self._lock:
        # Stop the HTTP side first so the dispatcher drains a closed queue.
        self._services = [http_service, dispatcher_service]
        stop_requested = self._stop_requested
      if stop_requested:
        self.stop()

      try:
        for future in concurrent.futures.as_completed(futures):
          if future.exception() is not None:
            logger.fatal('future %s failed with "%s"', futures[future],
                         future.exception())
          else:
            logger.info('future %s has completed', futures[future])
          self.stop()
          future.result()
      finally:
        wait_on_futures(futures)
        with self._lock:
          self._services = []
          self._stop_requested = False
    logger.info('exiting')

  def stop(self):
    """Stop accepting pushes and let queued updates drain."""
    with self._lock:
      self._stop_requested = True
      services = list(self._services)
    for service in services:
      service.stop()
