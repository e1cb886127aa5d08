import os
import pathlib

LOG_LEVEL = os.environ.get('CSGSI_LOG_LEVEL', 'INFO')
PORT = int(os.environ.get('CSGSI_PORT', '31337'))
QUEUE_SIZE = int(os.environ.get('CSGSI_QUEUE_SIZE', '128'))
POLL_INTERVAL = float(os.environ.get('CSGSI_POLL_INTERVAL', '0.1'))
CFG_DIR = pathlib.Path(os.environ['CSGSI_CFG_DIR']) \
  if os.environ.get('CSGSI_CFG_DIR') else None
