"""
フィールドイントロスペクター抽象基底クラス

型ごとのフィールド定義方法 (アノテーション、__slots__、インスタンス属性など)
の差異を吸収するための抽象インターフェースを定義します。
独自の記述子レジストリや ORM マッパーを使う場合は、このクラスを継承して
具象イントロスペクターを実装します。
"""

from abc import ABC, abstractmethod
from typing import Any, List

from ..domain.models import FieldIdentity


class FieldIntrospector(ABC):
    """
    フィールド列挙・読み取りの抽象クラス

    比較エンジンはこのインターフェースを通してのみ対象オブジェクトの構造に
    アクセスします。
    """

    @abstractmethod
    def all_fields(self, instance: Any) -> List[FieldIdentity]:
        """
        インスタンスの型 (継承元を含む) に宣言された全フィールドを列挙

        Args:
            instance: 列挙対象のインスタンス

        Returns:
            List[FieldIdentity]: フィールド一覧 (決定的な順序)

        Note:
            処理系が合成するメンバー (__dict__, __weakref__ など) も除外せずに
            返します。除外は呼び出し側が命名規則で行います。
        """
        pass

    def read_field(self, field: FieldIdentity, instance: Any) -> Any:
        """
        インスタンスからフィールド値を読み取る

        Args:
            field: 読み取るフィールド
            instance: 読み取り対象のインスタンス

        Returns:
            Any: フィールド値

        Raises:
            FieldAccessError: 読み取りに失敗した場合
        """
        return field.read_from(instance)
