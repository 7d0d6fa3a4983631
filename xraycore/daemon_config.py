"""Resolution of the UDP and TCP endpoints of the tracing daemon.

An address is either ``host:port`` (both protocols on one address) or
``tcp:host:port udp:host:port`` in either order. The environment variable
``AWS_XRAY_DAEMON_ADDRESS`` takes precedence over an address given in code.
"""

from __future__ import annotations

import ipaddress
import os
import re
import socket
from dataclasses import dataclass

from . import logger

__all__ = [
    "ENV_VAR",
    "Address",
    "DaemonAddressError",
    "DaemonEndpoints",
    "get_daemon_endpoints",
    "get_daemon_endpoints_from_env",
    "get_default_daemon_endpoints",
    "get_daemon_endpoints_from_string",
]

ENV_VAR = "AWS_XRAY_DAEMON_ADDRESS"

_ADDRESS_DELIMITER = " "
_UDP = "udp"
_TCP = "tcp"
_PORT_RE = re.compile(r"[+-]?[0-9]+")


class DaemonAddressError(ValueError):
    """Raised when a daemon address cannot be parsed or resolved."""


@dataclass(frozen=True)
class Address:
    """A resolved network address."""

    ip: str
    port: int

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class DaemonEndpoints:
    """UDP endpoint for emitting segments and TCP endpoint for sampling calls."""

    udp_addr: Address
    tcp_addr: Address


def get_daemon_endpoints() -> DaemonEndpoints:
    """Return endpoints from the environment, or the defaults when it is unset."""
    endpoints = get_daemon_endpoints_from_string("")
    if endpoints is None:
        return get_default_daemon_endpoints()
    return endpoints


def get_daemon_endpoints_from_env() -> DaemonEndpoints | None:
    """Return endpoints from the environment variable, or None if it is unset."""
    env_addr = os.environ.get(ENV_VAR, "")
    if env_addr:
        return _resolve_address(env_addr)
    return None


def get_default_daemon_endpoints() -> DaemonEndpoints:
    """Return the default endpoints, 127.0.0.1:2000 for both protocols."""
    return DaemonEndpoints(
        udp_addr=Address("127.0.0.1", 2000),
        tcp_addr=Address("127.0.0.1", 2000),
    )


def get_daemon_endpoints_from_string(address: str) -> DaemonEndpoints | None:
    """Resolve the environment variable if set, else ``address``; None if neither is given."""
    env_addr = os.environ.get(ENV_VAR, "")
    if env_addr:
        logger.info(
            "using daemon endpoints from environment variable %s: %s", ENV_VAR, env_addr
        )
        daemon_addr = env_addr
    else:
        daemon_addr = address
    if daemon_addr:
        return _resolve_address(daemon_addr)
    return None


def _resolve_address(address: str) -> DaemonEndpoints:
    parts = address.split(_ADDRESS_DELIMITER)
    if len(parts) == 1:
        return _parse_single_form(parts[0])
    if len(parts) == 2:
        return _parse_double_form(parts[0], parts[1])
    raise DaemonAddressError("invalid daemon address: " + address)


def _parse_double_form(first: str, second: str) -> DaemonEndpoints:
    fields1 = first.split(":")
    fields2 = second.split(":")
    if len(fields1) != 3 or len(fields2) != 3:
        raise DaemonAddressError(f"invalid daemon address: {first} {second}")

    if not (_is_port(fields1[2]) and _is_port(fields2[2])):
        raise DaemonAddressError("invalid daemon address port")

    by_protocol = {
        fields1[0]: (fields1[1], fields1[2]),
        fields2[0]: (fields2[1], fields2[2]),
    }
    if _UDP not in by_protocol or _TCP not in by_protocol:
        raise DaemonAddressError("invalid daemon address")

    udp_addr = _resolve(*by_protocol[_UDP], socket.SOCK_DGRAM)
    tcp_addr = _resolve(*by_protocol[_TCP], socket.SOCK_STREAM)
    return DaemonEndpoints(udp_addr=udp_addr, tcp_addr=tcp_addr)


def _parse_single_form(address: str) -> DaemonEndpoints:
    fields = address.split(":")
    if len(fields) != 2:
        raise DaemonAddressError("invalid daemon address: " + address)
    host, port = fields
    if not _is_port(port):
        raise DaemonAddressError("invalid daemon address port")
    return DaemonEndpoints(
        udp_addr=_resolve(host, port, socket.SOCK_DGRAM),
        tcp_addr=_resolve(host, port, socket.SOCK_STREAM),
    )


def _is_port(text: str) -> bool:
    return _PORT_RE.fullmatch(text) is not None


def _resolve(host: str, port_text: str, socktype: int) -> Address:
    port = int(port_text)
    if not 0 <= port <= 65535:
        raise DaemonAddressError(f"invalid port: {host}:{port_text}")
    if not host:
        return Address("", port)
    try:
        return Address(str(ipaddress.ip_address(host)), port)
    except ValueError:
        pass
    try:
        infos = socket.getaddrinfo(host, port, type=socktype)
    except (socket.gaierror, UnicodeError) as exc:
        raise DaemonAddressError(f"cannot resolve address {host}:{port}: {exc}") from exc
    if not infos:
        raise DaemonAddressError(f"no addresses found for {host}:{port}")
    ipv4 = [info for info in infos if info[0] == socket.AF_INET]
    chosen = (ipv4 or infos)[0]
    return Address(str(chosen[4][0]), port)