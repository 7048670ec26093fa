"""
Initialization Module.

Process-level wiring:
- logging: Logger configuration
- services: Database, gateways and per-session services
"""

from monet.initialization.logging import setup_logging
from monet.initialization.services import ServiceContainer, Services


__all__ = ["ServiceContainer", "Services", "setup_logging"]
