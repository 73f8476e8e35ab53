"""
Fully-qualified domain name resolution.

Sources are tried in order until one yields a dotted name:

1. the hostname itself, when forward resolution fails but it is dotted
2. the canonical name from forward resolution
3. a dotted alias that extends the canonical name
4. reverse resolution of each address (canonical name, then aliases)
5. hostname + local domain name
6. the address of the first non-loopback interface
"""

import logging
from typing import Optional

from ..core.models import inet_ntoa
from .interfaces import get_interface_config, list_interfaces


logger = logging.getLogger(__name__)

FQDN_LEN = 512


def _is_fqdn(name: str) -> bool:
    return "." in name


def _alias_match(alias: str, name: str) -> bool:
    # Plain prefix test: "host" also matches "hostile.example.com".
    return _is_fqdn(alias) and alias.startswith(name)


def _from_host_entry(backend, host) -> Optional[str]:
    if _is_fqdn(host.name):
        logger.debug("[fqdn] resolved using gethostbyname.h_name")
        return host.name
    logger.debug("[fqdn] unresolved using gethostbyname.h_name")

    for alias in host.aliases:
        if _alias_match(alias, host.name):
            logger.debug("[fqdn] resolved using gethostbyname.h_aliases")
            return alias
    logger.debug("[fqdn] unresolved using gethostbyname.h_aliases")

    for address in host.addresses:
        try:
            reverse = backend.gethostbyaddr(address)
        except OSError as e:
            logger.debug(f"[fqdn] gethostbyaddr({address}) failed: {e}")
            continue

        if _is_fqdn(reverse.name):
            logger.debug("[fqdn] resolved using gethostbyaddr.h_name")
            return reverse.name

        for alias in reverse.aliases:
            if _alias_match(alias, reverse.name):
                logger.debug("[fqdn] resolved using gethostbyaddr.h_aliases")
                return alias

    logger.debug("[fqdn] unresolved using gethostbyname.h_addr_list")
    return None


def _interface_address(context, name: str) -> str:
    """Use the first non-loopback interface address in place of ``name``."""
    try:
        iflist = list_interfaces(context)
    except OSError as e:
        logger.debug(f"[fqdn] interface list failed: {e}")
        return name

    with iflist:
        for ifname in iflist:
            try:
                config = get_interface_config(context, ifname)
            except OSError:
                continue
            if config.is_loopback:
                continue

            address = inet_ntoa(config.address)
            logger.debug(f"[fqdn] using ip address '{address}' for fqdn")
            return address

    return name


def _local_fallback(context, name: str, limit: int) -> str:
    if not _is_fqdn(name):
        try:
            domain = context.backend.getdomainname()
        except OSError as e:
            logger.debug(f"[fqdn] getdomainname failed: {e}")
            domain = ""

        # Linux reports "(none)" when no domain is set.
        if domain and not domain.startswith("("):
            name = f"{name}.{domain}"[:limit]
            logger.debug("[fqdn] resolved using getdomainname")
        else:
            logger.debug("[fqdn] getdomainname failed")

    if not _is_fqdn(name):
        name = _interface_address(context, name)[:limit]

    return name


def resolve_fqdn(context, namelen: int = FQDN_LEN) -> str:
    """
    Resolve the best known fully-qualified name of this host.

    Args:
        context: Collector context
        namelen: Size of the name buffer; results hold at most
            ``namelen - 1`` characters

    Returns:
        The FQDN, or a dotted-decimal address when no name source works

    Raises:
        OSError: The hostname itself could not be read
    """
    backend = context.backend
    limit = namelen - 1

    try:
        name = backend.gethostname()[:limit]
    except OSError as e:
        logger.error(f"[fqdn] gethostname failed: {e}")
        raise
    logger.debug(f"[fqdn] gethostname() returned: '{name}'")

    try:
        host = backend.gethostbyname(name)
    except OSError as e:
        logger.debug(f"[fqdn] gethostbyname({name}) failed: {e}")
        if _is_fqdn(name):
            return name
        return _local_fallback(context, name, limit)

    resolved = _from_host_entry(backend, host)
    if resolved:
        return resolved[:limit]

    return _local_fallback(context, name, limit)
