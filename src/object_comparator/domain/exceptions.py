"""
比較エンジンの例外定義

呼び出し側に通知されるエラーは次の 2 種類のみです:
- InvalidArgumentError: 事前条件違反 (走査開始前に送出)
- FieldAccessError: フィールド値の読み取り失敗 (走査を中断して送出)
"""

from typing import Optional


class InvalidArgumentError(ValueError):
    """
    引数不正例外

    None の引数、実行時型の不一致、配列やアトミック値そのものの比較など、
    compare の事前条件を満たさない呼び出しを表します。
    """

    def __init__(
        self,
        message: str,
        first_type: Optional[type] = None,
        second_type: Optional[type] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            first_type: 1 つ目の引数の実行時型
            second_type: 2 つ目の引数の実行時型
        """
        super().__init__(message)
        self.first_type = first_type
        self.second_type = second_type


class FieldAccessError(AttributeError):
    """
    フィールドアクセス例外

    インスタンスからフィールド値を読み取れない場合 (未設定の __slots__、
    例外を送出するプロパティなど) を表します。
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        owner_type: Optional[type] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            field_name: 読み取りに失敗したフィールド名
            owner_type: 読み取り対象インスタンスの型
        """
        super().__init__(message)
        self.field_name = field_name
        self.owner_type = owner_type
