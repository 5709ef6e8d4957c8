"""
Low-level helpers shared across turtlegraph.

No domain logic should live here.
"""

from turtlegraph.utils.ids import new_id
from turtlegraph.utils.time import utc_now, iso_timestamp

__all__ = [
    "new_id",
    "utc_now",
    "iso_timestamp",
]
