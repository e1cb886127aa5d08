from csgsi.config import SPECTATOR_ONLY, UNRESTRICTED, ConfigInstallError, \
  GSIConfig, GSIConfigBuilder, Subscription
from csgsi.models import Update
from csgsi.server import GSIServer

__all__ = ['GSIConfig', 'GSIConfigBuilder', 'GSIServer', 'Subscription',
           'UNRESTRICTED', 'SPECTATOR_ONLY', 'ConfigInstallError', 'Update']
