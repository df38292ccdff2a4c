"""
Shared pydantic configuration for all model modules.

Search-index payloads carry many keys we do not read (function signatures,
aliases, deprecation bitmaps, ...), so index models ignore unknown fields.
User-supplied configuration is validated strictly so that typos surface.
"""

from __future__ import annotations

from pydantic import ConfigDict

# Used for user input (config files) to reject unknown keys
strict_config = ConfigDict(extra="forbid")

# Used for rustdoc output, which grows new keys with every release
lenient_config = ConfigDict(extra="ignore", frozen=True)
