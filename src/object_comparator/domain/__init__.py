"""
ドメイン層

値の分類・比較規則・差分マップ・データモデルを提供します。
"""

from .models import (
    Classification,
    AtomicKind,
    FieldIdentity,
    ValuePair,
    ComparisonOptions,
)
from .exceptions import InvalidArgumentError, FieldAccessError
from .classifier import TypeClassifier
from .difference_map import DifferenceMap
from .comparators import AtomicComparator, CollectionComparator, MapComparator

__all__ = [
    "Classification",
    "AtomicKind",
    "FieldIdentity",
    "ValuePair",
    "ComparisonOptions",
    "InvalidArgumentError",
    "FieldAccessError",
    "TypeClassifier",
    "DifferenceMap",
    "AtomicComparator",
    "CollectionComparator",
    "MapComparator",
]
