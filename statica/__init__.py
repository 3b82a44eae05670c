from .options import StaticOptions
from .cache import CacheEntry, StaticServer, StaticFile
