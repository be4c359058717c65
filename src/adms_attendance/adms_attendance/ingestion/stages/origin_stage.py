from __future__ import annotations

import ipaddress
from typing import Iterable, Union

from ...core.exceptions import OriginRejectedError
from .base import GuardContext, GuardStage

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_allow_list(entries: Iterable[str]) -> tuple[Network, ...]:
    """Addresses and CIDR blocks; a bare address becomes a /32 (or /128)."""

    networks = []
    for entry in entries:
        text = entry.strip()
        if text:
            networks.append(ipaddress.ip_network(text, strict=False))
    return tuple(networks)


class OriginStage(GuardStage):
    """Caller address must be inside the configured allow-list."""

    name = "origin"

    def __init__(self, allowed: Iterable[str], *, allow_loopback: bool = False):
        self._networks = parse_allow_list(allowed)
        self._allow_loopback = allow_loopback

    def check(self, ctx: GuardContext) -> None:
        try:
            address = ipaddress.ip_address((ctx.source_ip or "").strip())
        except ValueError:
            raise OriginRejectedError("unparseable_source_address")

        if getattr(address, "ipv4_mapped", None):
            address = address.ipv4_mapped

        if self._allow_loopback and address.is_loopback:
            return
        if any(address in network for network in self._networks):
            return
        raise OriginRejectedError("source_not_allowed")
