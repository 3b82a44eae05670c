from .entry import CacheEntry
from .base import StaticHandler
from .pathcache import StaticServer
from .singlefile import StaticFile
