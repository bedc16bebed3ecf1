"""
User Record Types.

Records are plain ``dict[str, str]`` mappings keyed by the schema's
``all_fields()``; the collection maps 1-based positions to records.
"""

from __future__ import annotations

UserRecord = dict[str, str]
UserCollection = dict[int, UserRecord]
