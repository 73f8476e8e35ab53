"""Cross-platform host facts: interfaces, FQDN, resource limits and lists."""

from .context import HostContext

__version__ = "0.1.0"

__all__ = ["HostContext", "__version__"]
