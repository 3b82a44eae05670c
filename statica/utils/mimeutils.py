import mimetypes
from os.path import basename
from typing import Mapping, Optional

from ..typehints import Path

# files served from a directory and a single served file fall back
# to different types when their extension is unknown
DIRECTORY_DEFAULT_MIME = 'text/plain'
SINGLE_FILE_DEFAULT_MIME = 'application/octet-stream'

if not mimetypes.inited:
    mimetypes.init()


def get_extension(path: Path) -> str:
    """
    Returns extension without leading dot. Dots in directory names
    are not taken into account, and dotfiles like `.bashrc` have
    no extension
    """

    filename = basename(path)
    dot = filename.rfind('.')

    if dot <= 0:
        return ''

    return filename[dot + 1:]


def mime_type_for(path: Path,
                  default: str,
                  types_map: Optional[Mapping[str, str]] = None) -> str:
    extension = get_extension(path)

    if not extension:
        return default

    if types_map is None:
        types_map = mimetypes.types_map

    return types_map.get('.' + extension.lower()) or default
