"""Scope: session state snapshots and their store."""

from .models import SCOPE_KEYS, Scope, normalize_key
from .store import ScopeStore

__all__ = ["SCOPE_KEYS", "Scope", "ScopeStore", "normalize_key"]
