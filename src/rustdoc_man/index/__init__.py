"""Search index loading and lookup.

Re-exports the public API of the schema adapters and the index itself.
"""

from .schemas import (
    SCHEMA_ADAPTERS,
    CrateDataV1_44,
    CrateDataV1_52,
    CrateDataV1_69,
    decode_crate_data,
)
from .search_index import SearchIndex

__all__ = [
    "SCHEMA_ADAPTERS",
    "CrateDataV1_44",
    "CrateDataV1_52",
    "CrateDataV1_69",
    "SearchIndex",
    "decode_crate_data",
]
