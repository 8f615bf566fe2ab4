"""
Domain models — Pydantic types for chocosync.

All models are re-exported here for convenient access:

    from chocosync.core.models import PackageAction, PackageRequest, Receipt
"""

from chocosync.core.models.action import PackageAction, Receipt
from chocosync.core.models.package import (
    NameVersionMap,
    PackageDeclaration,
    PackageRequest,
    ResolvedVersions,
)

__all__ = [
    # action.py
    "PackageAction",
    "Receipt",
    # package.py
    "NameVersionMap",
    "PackageDeclaration",
    "PackageRequest",
    "ResolvedVersions",
]
