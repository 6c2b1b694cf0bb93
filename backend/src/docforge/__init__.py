"""docforge — listener-driven document access core.

Provides the decision and ordering pieces used by every read/write path
of the document API:
- hooks: listener chains that approve, deny or observe an operation
- ordering: sort specification normalization and multi-field ordering
- paths: safe nested field access
"""

__version__ = "0.1.0"
