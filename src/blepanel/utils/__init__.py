from __future__ import annotations

from .logging import setup_logging
from .redaction import Redactor

__all__ = ["Redactor", "setup_logging"]
