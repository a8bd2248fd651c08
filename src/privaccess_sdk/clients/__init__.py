"""HTTP boundary used by resource services."""

from privaccess_sdk.clients.rest import RestClient

__all__ = ["RestClient"]
