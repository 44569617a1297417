"""
Port utilities for SSH Manager
Provides port information and availability checking functionality
"""

import socket
import logging
from typing import List, Optional

import psutil

logger = logging.getLogger(__name__)


class PortInfo:
    """Information about a port and its usage"""

    def __init__(self, port: int, pid: Optional[int] = None,
                 process_name: Optional[str] = None, address: str = '0.0.0.0'):
        self.port = port
        self.pid = pid
        self.process_name = process_name
        self.address = address

    def __str__(self) -> str:
        if self.process_name and self.pid:
            return f"{self.address}:{self.port} - {self.process_name} (PID: {self.pid})"
        return f"{self.address}:{self.port}"


def is_port_available(port: int, address: str = '127.0.0.1') -> bool:
    """
    Check if a TCP port is free on *address*

    Returns:
        True if nothing accepts connections on the port, False otherwise
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            result = sock.connect_ex((address, port))
            return result != 0  # 0 means connection successful (port in use)
    except OSError as e:
        logger.debug(f"Error checking port {port}: {e}")
        return False


def get_listening_ports() -> List[PortInfo]:
    """Return all listening TCP ports visible to the current user."""
    ports: List[PortInfo] = []
    try:
        connections = psutil.net_connections(kind='tcp')
    except (psutil.AccessDenied, OSError) as e:
        logger.warning(f"Failed to get port information: {e}")
        return ports

    for conn in connections:
        if conn.status != psutil.CONN_LISTEN or not conn.laddr:
            continue
        port_info = PortInfo(port=conn.laddr.port, pid=conn.pid, address=conn.laddr.ip)
        if conn.pid:
            try:
                port_info.process_name = psutil.Process(conn.pid).name()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                pass
        ports.append(port_info)
    return ports


def find_port_owner(port: int) -> Optional[PortInfo]:
    """Return the listener bound to *port*, if it can be determined."""
    for info in get_listening_ports():
        if info.port == port:
            return info
    return None
