"""
Dataset auto-detection by weighted field-name signatures
"""

from typing import Any, FrozenSet, List, Mapping, Optional, Tuple

from ..datasets import Dataset
from .signatures import SIGNATURES, DatasetSignature


def _field_names(record: Mapping[str, Any]) -> FrozenSet[str]:
    return frozenset(record.keys())


def score_record(record: Mapping[str, Any],
                 signatures: List[DatasetSignature] = SIGNATURES) -> List[Tuple[Dataset, int]]:
    """Score of ``record`` against every signature, in declaration order"""
    names = _field_names(record)
    return [(sig.dataset, sig.score(names)) for sig in signatures]


def classify(record: Mapping[str, Any],
             signatures: List[DatasetSignature] = SIGNATURES) -> Optional[Dataset]:
    """
    Return the dataset whose signature scores highest for ``record``.

    Only signatures whose ``min_score`` is reached are candidates. Equal scores
    keep the earliest declared signature. Returns None when nothing qualifies.
    Only field names are consulted, never values.
    """
    names = _field_names(record)
    best: Optional[Dataset] = None
    best_score = 0
    for sig in signatures:
        s = sig.score(names)
        if s < sig.min_score:
            continue
        if best is None or s > best_score:
            best, best_score = sig.dataset, s
    return best
