"""
Persistence layer components: transactions, handles, identity map, unit of work.
"""

from .connection import Connection
from .handle import Handle, Ref, RefMut
from .identity_map import IdentityMap, ObjectState
from .transaction import Transaction
from .unit_of_work import FlushResult, UnitOfWork

__all__ = [
    "Connection",
    "FlushResult",
    "Handle",
    "IdentityMap",
    "ObjectState",
    "Ref",
    "RefMut",
    "Transaction",
    "UnitOfWork",
]
