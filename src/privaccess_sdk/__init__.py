"""
privaccess_sdk

Top-level package for the privileged-access platform SDK.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects across the codebase.
# The public entry point lives in `privaccess_sdk.client`.
