"""Supabase-shaped client routed to a plain REST backend."""

from .auth_client import SIGNED_IN, SIGNED_OUT, AuthClient, Subscription
from .client import Client, create_client
from .errors import (
    ApiAuthError,
    ApiConflictError,
    ApiError,
    ApiNotFoundError,
    StructuredError,
)
from .filters import Operator, OrderClause, Predicate, QueryIntent
from .http_client import ApiClient
from .observability import configure_logging
from .query_builder import QueryBuilder
from .result import Result
from .rpc import RpcCall
from .session import Session, SessionStore
from .settings import CompatSettings
from .storage_client import BucketApi, StorageClient
from .token_storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "ApiAuthError",
    "ApiClient",
    "ApiConflictError",
    "ApiError",
    "ApiNotFoundError",
    "AuthClient",
    "BucketApi",
    "Client",
    "CompatSettings",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "Operator",
    "OrderClause",
    "Predicate",
    "QueryBuilder",
    "QueryIntent",
    "Result",
    "RpcCall",
    "SIGNED_IN",
    "SIGNED_OUT",
    "Session",
    "SessionStore",
    "StorageClient",
    "StructuredError",
    "Subscription",
    "TokenStorage",
    "configure_logging",
    "create_client",
]
