"""kv_adapter - collection storage over an embedded key/value store.

Persists named collections (schema + row set) inside a key/value store and
answers create/find/update/destroy operations with a small criteria
language (equality, and, or, not, like). Intended for development setups.
"""

__version__ = "0.1.0"
