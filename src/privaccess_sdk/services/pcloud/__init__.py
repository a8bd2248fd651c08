"""Vault services: accounts, safes and platforms."""

from privaccess_sdk.services.pcloud.accounts import AccountsService
from privaccess_sdk.services.pcloud.platforms import PlatformsService
from privaccess_sdk.services.pcloud.safes import SafesService

__all__ = ["AccountsService", "PlatformsService", "SafesService"]
