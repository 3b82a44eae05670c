from typing import Union, Optional


def make_sure_bytes_or_none(obj: Optional[Union[str, bytes]]) -> Optional[bytes]:
    if obj is None:
        return None

    return obj if isinstance(obj, bytes) else obj.encode()
