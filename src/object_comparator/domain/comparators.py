"""
値の比較ロジック

分類済みの値の組を比較し、差異を DifferenceMap に追記します:
- AtomicComparator: アトミック型ごとの等価規則による比較
- CollectionComparator: 要素の存在/非存在による比較
- MapComparator: キー集合と値の浅い比較
"""

from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Any, Collection, Optional

import numpy as np

from .classifier import TypeClassifier
from .difference_map import DifferenceMap
from .models import AtomicKind, FieldIdentity


_EPOCH = datetime(1970, 1, 1)
_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


class AtomicComparator:
    """
    アトミック値の比較

    左側の値の AtomicKind に応じた等価規則で比較します。
    """

    _INTEGER_KINDS = frozenset({
        AtomicKind.INT8, AtomicKind.INT16, AtomicKind.INT32, AtomicKind.INT64, AtomicKind.INTEGER,
    })
    _FLOAT_KINDS = frozenset({
        AtomicKind.FLOAT16, AtomicKind.FLOAT32, AtomicKind.FLOAT64, AtomicKind.FLOAT,
    })
    _TEMPORAL_KINDS = frozenset({AtomicKind.DATE, AtomicKind.TIMESTAMP, AtomicKind.DATETIME64})

    @staticmethod
    def compare(differences: DifferenceMap, field: FieldIdentity, left: Any, right: Any) -> None:
        """
        2 つのアトミック値を比較し、異なれば差異を追記

        Args:
            differences: 差異の追記先
            field: 比較中のフィールド
            left: 1 つ目の値
            right: 2 つ目の値

        Note:
            - TEXT: 大文字小文字を区別しない
            - CHARACTER: 同一オブジェクトかどうか (値の等価ではない)
            - 整数: 整数値の等価
            - 浮動小数点: 直接比較 (許容誤差なし、NaN は常に不一致)
            - 日付/時刻: ミリ秒単位のエポック値の等価
            - BOOLEAN: 比較規則がなく、常に等しいとみなす
            - 右側が None または左側と異なる種別の場合は規則を適用せず差異とする
        """
        left = TypeClassifier.unwrap_scalar(left)
        right = TypeClassifier.unwrap_scalar(right)
        kind = TypeClassifier.atomic_kind(left)
        if kind is None:
            return
        if TypeClassifier.atomic_kind(right) is not kind:
            differences.put(field, left, right)
            return
        if not AtomicComparator.equals(kind, left, right):
            differences.put(field, left, right)

    @staticmethod
    def equals(kind: AtomicKind, left: Any, right: Any) -> bool:
        """同じ種別の 2 値が等しいかを判定"""
        if kind is AtomicKind.TEXT:
            return left.casefold() == right.casefold()
        if kind is AtomicKind.CHARACTER:
            return left is right
        if kind in AtomicComparator._INTEGER_KINDS:
            return int(left) == int(right)
        if kind in AtomicComparator._FLOAT_KINDS:
            return bool(left == right)
        if kind in AtomicComparator._TEMPORAL_KINDS:
            return _epoch_millis(left) == _epoch_millis(right)
        # BOOLEAN などの規則のない種別
        return True


def _epoch_millis(value: Any) -> Optional[int]:
    """日付/時刻をミリ秒単位のエポック値に変換"""
    if isinstance(value, np.datetime64):
        return int(value.astype("datetime64[ms]").astype(np.int64))
    if isinstance(value, datetime):
        epoch = _EPOCH if value.tzinfo is None else _EPOCH_UTC
        return (value - epoch) // _MILLISECOND
    if isinstance(value, date):
        return (value - _EPOCH.date()) // _MILLISECOND
    return None


def shallow_equals(left: Any, right: Any) -> bool:
    """
    2 つの値の浅い等価判定

    同一オブジェクトであれば等しいとみなし、それ以外は == で比較します。
    numpy 配列は要素ごとの比較結果が真偽値にならないため、形状と全要素が
    一致するかで判定します。
    """
    if left is right:
        return True
    if isinstance(left, np.ndarray) or isinstance(right, np.ndarray):
        return (
            isinstance(left, np.ndarray)
            and isinstance(right, np.ndarray)
            and bool(np.array_equal(left, right))
        )
    return bool(left == right)


def _contains(values: Collection, element: Any) -> bool:
    return any(shallow_equals(element, value) for value in values)


class CollectionComparator:
    """
    コレクションの比較

    片側にのみ存在する要素を検知します。要素の構造には立ち入らず、
    要素自身の等価性 (shallow_equals) で存在を判定します。
    """

    @staticmethod
    def compare(
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Optional[Collection],
        right: Optional[Collection],
    ) -> None:
        """
        2 つのコレクションを比較し、片側にのみ存在する要素を追記

        Args:
            differences: 差異の追記先
            field: 比較中のフィールド
            left: 1 つ目のコレクション
            right: 2 つ目のコレクション

        Note:
            - 左側のみの要素は (element, None)、右側のみは (None, element)
            - 順序は無視し、重複は数えない
            - None は空のコレクションとして扱う
        """
        left = () if left is None else left
        right = () if right is None else right

        for element in left:
            if not _contains(right, element):
                differences.put(field, element, None)

        for element in right:
            if not _contains(left, element):
                differences.put(field, None, element)


class MapComparator:
    """
    マップの比較

    キー集合が一致する場合は値のみを比較し、一致しない場合は片側にのみ
    存在するキーの値も差異として追記します。値の比較は浅い等価比較です。
    """

    @staticmethod
    def compare(
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Optional[Mapping],
        right: Optional[Mapping],
    ) -> None:
        """
        2 つのマップを比較し、差異を追記

        Args:
            differences: 差異の追記先
            field: 比較中のフィールド
            left: 1 つ目のマップ
            right: 2 つ目のマップ

        Note:
            None は空のマップとして扱う
        """
        left = {} if left is None else left
        right = {} if right is None else right

        if left.keys() == right.keys():
            for key in left:
                if not shallow_equals(left[key], right[key]):
                    differences.put(field, left[key], right[key])
            return

        for key in left:
            if key not in right:
                differences.put(field, left[key], None)
            elif not shallow_equals(left[key], right[key]):
                differences.put(field, left[key], right[key])

        for key in right:
            if key not in left:
                differences.put(field, None, right[key])
