"""recordstore - embeddable single-process record store

Named tables of schema-checked JSON-like records, a small filter language,
equality indexes, buffered transactions and full-state snapshot persistence.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from recordstore.application import Database, OperationResult
from recordstore.domain.exceptions import ErrorKind

__all__ = ["Database", "OperationResult", "ErrorKind", "__version__"]
