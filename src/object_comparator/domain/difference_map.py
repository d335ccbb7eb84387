"""
差分マップ

1 回の比較で検知した差異を、フィールドごとに発見順で蓄積します。
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .models import FieldIdentity, ValuePair


class DifferenceMap(Mapping):
    """
    フィールド識別子 -> 差異の値の組リスト のマッピング

    追記専用です。同じ FieldIdentity への追記は既存のリストに追加され、
    上書きされることはありません。キーの順序は最初に差異が見つかった順です。
    """

    def __init__(self):
        self._differences: Dict[FieldIdentity, List[ValuePair]] = {}

    def put(self, field: FieldIdentity, left: Any, right: Any) -> None:
        """
        差異を 1 件追記する

        Args:
            field: 差異が見つかったフィールド
            left: 1 つ目のオブジェクト側の値
            right: 2 つ目のオブジェクト側の値
        """
        self._differences.setdefault(field, []).append(ValuePair(left=left, right=right))

    def __getitem__(self, field: FieldIdentity) -> List[ValuePair]:
        return self._differences[field]

    def __iter__(self) -> Iterator[FieldIdentity]:
        return iter(self._differences)

    def __len__(self) -> int:
        return len(self._differences)

    @property
    def total_pairs(self) -> int:
        """全フィールドの差異の件数"""
        return sum(len(pairs) for pairs in self._differences.values())

    def field_names(self) -> List[str]:
        """差異のあるフィールド名 (発見順、重複なし)"""
        names = []
        for field in self._differences:
            if field.name not in names:
                names.append(field.name)
        return names

    def find(self, name: str) -> Optional[FieldIdentity]:
        """
        フィールド名から最初に見つかった FieldIdentity を返す

        Args:
            name: フィールド名

        Returns:
            Optional[FieldIdentity]: 該当なしの場合は None
        """
        for field in self._differences:
            if field.name == name:
                return field
        return None

    def pairs_for(self, name: str) -> List[ValuePair]:
        """
        フィールド名に一致するすべての差異を返す

        宣言元の型が異なる同名フィールドの差異もまとめて返します。
        """
        pairs = []
        for field, field_pairs in self._differences.items():
            if field.name == name:
                pairs.extend(field_pairs)
        return pairs

    def to_dict(self) -> Dict[str, List[Tuple[Any, Any]]]:
        """
        表示用の辞書に変換する

        Returns:
            Dict[str, List[Tuple[Any, Any]]]: "型名.フィールド名" をキーとした
            (left, right) タプルのリスト
        """
        return {
            str(field): [pair.as_tuple() for pair in pairs]
            for field, pairs in self._differences.items()
        }

    def __repr__(self) -> str:
        return f"DifferenceMap({self.to_dict()!r})"
