"""
privaccess_sdk.services.pcloud.base

Common host layout for vault services.
"""

from __future__ import annotations

from privaccess_sdk.services.base import BaseService


class VaultService(BaseService):
    # https://<tenant>.privilegecloud.<root-domain>/passwordvault
    URL_SERVICE = "privilegecloud"
    URL_SEPARATOR = "."
    BASE_PATH = "passwordvault"
