"""
データモデル定義

このモジュールは object-comparator のドメイン層のデータモデルを定義します:
- Classification: 値ごとの分類タグ
- AtomicKind: 値として直接比較するアトミック型の種別
- FieldIdentity: 比較対象型に宣言されたフィールドの識別子
- ValuePair: 差異を表す (左, 右) の値の組
- ComparisonOptions: 比較エンジンの動作設定
"""

import os
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import FieldAccessError


# 環境変数から設定を読み込む際の接頭辞
ENV_PREFIX = "OBJECT_COMPARATOR_"


class Classification(str, Enum):
    """値の分類"""
    NULL = "null"
    ATOMIC = "atomic"
    ARRAY = "array"
    COLLECTION = "collection"
    MAP = "map"
    COMPOSITE = "composite"


class AtomicKind(str, Enum):
    """
    アトミック型の種別

    この集合は固定です。ここに含まれない数値的な型 (Decimal, Fraction 等) は
    コンポジットとしてフィールド単位で走査されます。
    """
    TEXT = "text"
    CHARACTER = "character"
    BOOLEAN = "boolean"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INTEGER = "integer"
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    FLOAT = "float"
    DATE = "date"
    TIMESTAMP = "timestamp"
    DATETIME64 = "datetime64"


class FieldIdentity(BaseModel):
    """
    フィールド識別子

    宣言元の型とフィールド名の組で同一性が決まり、差分マップのキーとして
    使用されます。同じフィールドへの差異は 1 つのエントリに蓄積されます。
    """

    model_config = ConfigDict(frozen=True)

    declaring_type: type = Field(..., description="フィールドを宣言した型")
    name: str = Field(..., description="フィールド名")

    def read_from(self, instance: Any) -> Any:
        """
        インスタンスからフィールド値を読み取る

        Args:
            instance: 読み取り対象のインスタンス

        Returns:
            Any: フィールド値

        Raises:
            FieldAccessError: 属性が存在しない、または読み取れない場合
        """
        try:
            return getattr(instance, self.name)
        except AttributeError as e:
            raise FieldAccessError(
                f"Cannot read field '{self}' from {type(instance).__name__}: {e}",
                field_name=self.name,
                owner_type=type(instance),
            ) from e

    def __str__(self) -> str:
        return f"{self.declaring_type.__qualname__}.{self.name}"


class ValuePair(BaseModel):
    """
    差異の 1 点を表す値の組

    left / right のどちらか一方は None (片側にのみ存在) になり得ます。
    値は参照のまま保持され、コピーされません。
    """

    model_config = ConfigDict(frozen=True)

    left: Any = Field(default=None, description="1 つ目のオブジェクト側の値")
    right: Any = Field(default=None, description="2 つ目のオブジェクト側の値")

    def as_tuple(self) -> Tuple[Any, Any]:
        """(left, right) のタプルを返す"""
        return (self.left, self.right)


class ComparisonOptions(BaseModel):
    """
    比較エンジンの動作設定

    Attributes:
        stop_at_first_nested_difference: ネストしたオブジェクト内で最初の差異を
            記録した時点で、そのオブジェクトの残りのフィールドの走査を打ち切る
            (アトミックなフィールドの差異でも打ち切る。アトミックなフィールドは
            すべて比較し、配列・オブジェクトのフィールドに到達した時点で差異の
            有無によらず打ち切る方式とは、記録される差異の件数が異なり得る)
        detect_cycles: 走査中のオブジェクトの組を追跡し、循環参照を検知したら
            再帰せずにスキップする
    """

    model_config = ConfigDict(frozen=True)

    stop_at_first_nested_difference: bool = True
    detect_cycles: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ComparisonOptions":
        """
        環境変数から設定を読み込む

        Args:
            environ: 参照する環境変数。None の場合は os.environ を使用。

        Returns:
            ComparisonOptions: 設定値 (未設定の項目はデフォルト値)

        Raises:
            ValidationError: 真偽値として解釈できない値が設定されている場合

        Note:
            - 変数名は OBJECT_COMPARATOR_<フィールド名の大文字> (例:
              OBJECT_COMPARATOR_DETECT_CYCLES)
            - "true" / "false" / "1" / "0" などは Pydantic が bool に変換する
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
