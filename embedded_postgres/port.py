from __future__ import annotations

import logging
import socket

from .errors import PortUnavailableError

logger = logging.getLogger(__name__)


def ensure_port_available(port: int, host: str = "localhost") -> None:
    """
    Check nothing listens on the port by binding it ourselves.
    This is best effort, the port can still be taken before postgres binds it.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(1)
    except OSError as e:
        logger.error(f"Port {port} is not available: {e}")
        raise PortUnavailableError(port) from e
