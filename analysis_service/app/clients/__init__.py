from .discovery_client import HttpFileDiscovery

__all__ = ["HttpFileDiscovery"]
