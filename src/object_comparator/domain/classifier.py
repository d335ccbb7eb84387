"""
型分類ロジック

任意の値を Classification (NULL / ATOMIC / ARRAY / COLLECTION / MAP / COMPOSITE)
のいずれか 1 つに分類します。分類は宣言型ではなく実行時の値ごとに行います。
"""

import array
from collections.abc import Collection, Mapping
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, Optional

import numpy as np

from .models import AtomicKind, Classification


def _sized_kinds(scalar_types, kinds_by_size: Dict[int, AtomicKind]) -> Dict[type, AtomicKind]:
    """numpy のスカラー型をバイト幅に応じた AtomicKind に対応付ける"""
    table = {}
    for scalar_type in scalar_types:
        kind = kinds_by_size.get(np.dtype(scalar_type).itemsize)
        if kind is not None:
            table[scalar_type] = kind
    return table


class TypeClassifier:
    """
    型分類クラス

    アトミック型は固定の対応表で判定します。値の型の MRO を派生側から順に
    たどり、最初に対応表に見つかった型の種別を採用します
    (bool は INTEGER ではなく BOOLEAN、datetime は DATE ではなく TIMESTAMP)。

    Note:
        実行時型の完全一致ではなく MRO で判定するため、アトミック型の
        サブクラス (str / int を継承した Enum、str のサブクラスなど) も
        アトミックに分類される。完全一致で判定する場合とは結果が異なる。

        0 次元の numpy 配列 (np.array(5) など) は配列ではなく、
        保持しているスカラー値として分類する。
    """

    _ATOMIC_KINDS: Dict[type, AtomicKind] = {
        str: AtomicKind.TEXT,
        np.str_: AtomicKind.TEXT,
        bytes: AtomicKind.CHARACTER,
        np.bytes_: AtomicKind.CHARACTER,
        bool: AtomicKind.BOOLEAN,
        np.bool_: AtomicKind.BOOLEAN,
        int: AtomicKind.INTEGER,
        float: AtomicKind.FLOAT,
        date: AtomicKind.DATE,
        datetime: AtomicKind.TIMESTAMP,
        np.datetime64: AtomicKind.DATETIME64,
        **_sized_kinds(
            (np.byte, np.short, np.intc, np.int_, np.longlong),
            {1: AtomicKind.INT8, 2: AtomicKind.INT16, 4: AtomicKind.INT32, 8: AtomicKind.INT64},
        ),
        **_sized_kinds(
            (np.half, np.single, np.double),
            {2: AtomicKind.FLOAT16, 4: AtomicKind.FLOAT32, 8: AtomicKind.FLOAT64},
        ),
    }

    # 固定長でインデックス参照できるシーケンス
    _ARRAY_TYPES = (tuple, array.array, np.ndarray)

    @staticmethod
    def classify(value: Any) -> Classification:
        """
        値を分類する

        Args:
            value: 分類対象の値

        Returns:
            Classification: 分類結果 (必ずいずれか 1 つに決まる)
        """
        value = TypeClassifier.unwrap_scalar(value)
        if value is None:
            return Classification.NULL
        if TypeClassifier.atomic_kind(value) is not None:
            return Classification.ATOMIC
        if isinstance(value, TypeClassifier._ARRAY_TYPES):
            return Classification.ARRAY
        if isinstance(value, Mapping):
            return Classification.MAP
        if isinstance(value, Collection):
            return Classification.COLLECTION
        return Classification.COMPOSITE

    @staticmethod
    def atomic_kind(value: Any) -> Optional[AtomicKind]:
        """
        値のアトミック種別を返す

        Args:
            value: 判定対象の値

        Returns:
            Optional[AtomicKind]: アトミック型でなければ None
        """
        value = TypeClassifier.unwrap_scalar(value)
        if value is None:
            return None
        return _kind_for_type(type(value))

    @staticmethod
    def unwrap_scalar(value: Any) -> Any:
        """0 次元の numpy 配列であれば保持しているスカラー値を、それ以外はそのまま返す"""
        if isinstance(value, np.ndarray) and value.ndim == 0:
            return value[()]
        return value

    @staticmethod
    def is_atomic(value: Any) -> bool:
        return TypeClassifier.atomic_kind(value) is not None

    @staticmethod
    def is_array(value: Any) -> bool:
        return TypeClassifier.classify(value) is Classification.ARRAY


@lru_cache(maxsize=None)
def _kind_for_type(value_type: type) -> Optional[AtomicKind]:
    for klass in value_type.__mro__:
        kind = TypeClassifier._ATOMIC_KINDS.get(klass)
        if kind is not None:
            return kind
    return None
