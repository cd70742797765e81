from cloudwright.clients.base import ApiResponse, BaseHTTPClient, classify
from cloudwright.clients.platform import PlatformClient

__all__ = ["ApiResponse", "BaseHTTPClient", "PlatformClient", "classify"]
