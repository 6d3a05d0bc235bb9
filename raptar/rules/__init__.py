from raptar.rules.index import RuleIndex
from raptar.rules.models import (
    Action,
    Bucket,
    IndexedRule,
    RawRule,
    RuleMatch,
    RuleOrigin,
)

__all__ = [
    "Action",
    "Bucket",
    "IndexedRule",
    "RawRule",
    "RuleIndex",
    "RuleMatch",
    "RuleOrigin",
]
