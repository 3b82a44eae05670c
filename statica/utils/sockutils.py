import socket
import logging
from time import sleep
from typing import Tuple, Union, Optional

logger = logging.getLogger(__name__)


def bind_sock(
        sock: socket.socket,
        addr: Tuple[str, Union[int, str]],
        max_retries: Optional[int] = None,
        retries_timeout: Union[int, float] = 3
) -> Tuple[bool, int]:
    """
    Tries to bind the socket until it succeeds or retries are exhausted.
    Returns whether it succeeded, and how many attempts were made
    """

    max_retries = max_retries or 99999

    for retry_num in range(1, max_retries + 1):
        try:
            sock.bind(addr)

            return True, retry_num
        except OSError as exc:
            logger.debug(f'bind attempt {retry_num}/{max_retries} on {addr} failed: {exc}')

            if retry_num != max_retries:
                sleep(retries_timeout)

    return False, max_retries
