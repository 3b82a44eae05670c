import gzip

from ..typehints import Compressor


def gzip_compress(data: bytes, compresslevel: int = 9) -> bytes:
    # mtime is pinned, so the same input always gives the same output
    return gzip.compress(data, compresslevel=compresslevel, mtime=0)


def make_gzip_compressor(compresslevel: int = 9) -> Compressor:
    def compressor(data: bytes) -> bytes:
        return gzip_compress(data, compresslevel)

    return compressor
