"""比較オーケストレーションエンジン"""

from typing import Any, Optional, Set, Tuple
import logging

from ..adapters.field_introspector import FieldIntrospector
from ..adapters.reflective_introspector import ReflectiveFieldIntrospector
from ..domain.classifier import TypeClassifier
from ..domain.comparators import AtomicComparator, CollectionComparator, MapComparator
from ..domain.difference_map import DifferenceMap
from ..domain.exceptions import FieldAccessError, InvalidArgumentError
from ..domain.models import Classification, ComparisonOptions, FieldIdentity


class ComparisonEngine:
    """
    2 つのオブジェクトのフィールド単位の比較

    Responsibilities:
    - 事前条件の検証 (None、型の不一致、配列・アトミック値の拒否)
    - フィールドの列挙と除外フィールドのスキップ
    - 値の分類に応じた比較戦略 (アトミック / コレクション / マップ / 再帰走査) の選択
    - 配列 (2 段のネストまで) とネストしたオブジェクトの走査

    エンジン自体は不変の設定とイントロスペクターのみを保持します。
    差分マップと走査中のオブジェクトの組は compare の呼び出しごとに生成されます。
    """

    def __init__(
        self,
        introspector: Optional[FieldIntrospector] = None,
        options: Optional[ComparisonOptions] = None
    ):
        """
        ComparisonEngine を初期化

        Args:
            introspector: フィールドの列挙・読み取りを行うイントロスペクター。
                          None の場合は ReflectiveFieldIntrospector を使用。
            options: 比較の動作設定。None の場合はデフォルト設定を使用。
        """
        self.introspector = introspector or ReflectiveFieldIntrospector()
        self.options = options or ComparisonOptions()
        self.logger = logging.getLogger(__name__)

    def compare(self, first: Any, second: Any, *exclusions: str) -> DifferenceMap:
        """
        2 つのオブジェクトを比較し、値の異なるフィールドを返す

        Args:
            first: 比較元のオブジェクト
            second: 比較先のオブジェクト
            *exclusions: 比較しないフィールド名 (最上位の型のフィールドにのみ適用)

        Returns:
            DifferenceMap: フィールドごとの差異 (差異がなければ空)

        Raises:
            InvalidArgumentError: 事前条件を満たさない場合 (走査開始前)
            FieldAccessError: フィールド値を読み取れない場合 (部分的な結果は返さない)
        """
        self._validate(first, second)

        excluded = set(exclusions)
        differences = DifferenceMap()
        visiting: Set[Tuple[int, int]] = set()
        if self.options.detect_cycles:
            visiting.add((id(first), id(second)))

        self.logger.debug(
            f"Starting comparison of {type(first).__name__} instances",
            extra={"exclusions": sorted(excluded)}
        )

        try:
            for field in self.introspector.all_fields(first):
                if field.name in excluded or self._is_back_reference(field.name):
                    continue
                left = self.introspector.read_field(field, first)
                right = self.introspector.read_field(field, second)
                self._dispatch(differences, field, left, right, visiting)
        except FieldAccessError as e:
            self.logger.error(f"Comparison aborted: {str(e)}", exc_info=True)
            raise

        self.logger.debug(
            "Comparison completed",
            extra={
                "field_count": len(differences),
                "pair_count": differences.total_pairs
            }
        )
        return differences

    def _validate(self, first: Any, second: Any) -> None:
        """
        compare の事前条件を検証

        Raises:
            InvalidArgumentError: いずれかの条件に違反した場合
        """
        if first is None or second is None:
            raise InvalidArgumentError(
                "Arguments must not be None",
                first_type=type(first),
                second_type=type(second)
            )
        if type(first) is not type(second):
            raise InvalidArgumentError(
                f"Objects must be of the same type: "
                f"{type(first).__name__} != {type(second).__name__}",
                first_type=type(first),
                second_type=type(second)
            )
        if TypeClassifier.is_array(first):
            raise InvalidArgumentError(
                f"Argument is an array: {type(first).__name__}",
                first_type=type(first),
                second_type=type(second)
            )
        if TypeClassifier.is_atomic(first) or TypeClassifier.is_atomic(second):
            raise InvalidArgumentError(
                f"Argument is an atomic value: {type(first).__name__}",
                first_type=type(first),
                second_type=type(second)
            )

    def _dispatch(
        self,
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Any,
        right: Any,
        visiting: Set[Tuple[int, int]]
    ) -> None:
        """左側の値の分類に応じて比較戦略を選択"""
        left = TypeClassifier.unwrap_scalar(left)
        right = TypeClassifier.unwrap_scalar(right)
        classification = TypeClassifier.classify(left)

        if classification is Classification.ATOMIC:
            AtomicComparator.compare(differences, field, left, right)
        elif classification is Classification.COLLECTION:
            CollectionComparator.compare(differences, field, left, right)
        elif classification is Classification.MAP:
            MapComparator.compare(differences, field, left, right)
        elif classification is Classification.ARRAY:
            self._compare_arrays(differences, field, left, right, visiting)
        else:
            self._traverse_object(differences, field, left, right, visiting)

    def _compare_arrays(
        self,
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Any,
        right: Any,
        visiting: Set[Tuple[int, int]]
    ) -> None:
        """
        配列を比較

        Note:
            - 先頭要素の分類で配列全体の扱いを決める (要素の型は揃っている前提)
            - 片側のみ空 (または右側が None) の場合は、先頭要素を見ずに配列全体を
              1 件の差異とする
            - 先頭要素が配列の場合は、1 段下の先頭の配列同士にのみ同じ規則を適用する
              (3 段以上のネストは特別扱いせずオブジェクトとして走査する)
            - 先頭要素がオブジェクトの場合は配列自体をオブジェクトとして走査する
              (配列型にはフィールドがないため、通常は差異が検知されない)
        """
        if self._record_if_empty_or_missing(differences, field, left, right):
            return

        head = left[0]
        head_classification = TypeClassifier.classify(head)

        if head_classification is Classification.ATOMIC:
            self._compare_atomic_elements(differences, field, left, right)
            return

        if head_classification is Classification.ARRAY:
            inner_right = right[0]
            if self._record_if_empty_or_missing(differences, field, head, inner_right):
                return
            if TypeClassifier.is_atomic(head[0]):
                self._compare_atomic_elements(differences, field, head, inner_right)
                return

        self._traverse_object(differences, field, left, right, visiting)

    @staticmethod
    def _record_if_empty_or_missing(
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Any,
        right: Any
    ) -> bool:
        """
        空の配列・欠落した配列を処理

        Returns:
            bool: 処理済み (要素の比較が不要) であれば True
        """
        left_empty = len(left) == 0
        right_empty = right is None or len(right) == 0
        if left_empty and right_empty:
            return True
        if left_empty or right_empty:
            # 空と非空 (その逆も) は配列全体を 1 件の差異とする
            differences.put(field, left, right)
            return True
        return False

    @staticmethod
    def _compare_atomic_elements(
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Any,
        right: Any
    ) -> None:
        """長さが異なれば配列全体を、同じならインデックスごとの差異を記録"""
        if len(left) != len(right):
            differences.put(field, left, right)
            return
        for left_element, right_element in zip(left, right):
            AtomicComparator.compare(differences, field, left_element, right_element)

    def _traverse_object(
        self,
        differences: DifferenceMap,
        field: FieldIdentity,
        left: Any,
        right: Any,
        visiting: Set[Tuple[int, int]]
    ) -> None:
        """
        ネストしたオブジェクトをフィールド単位で再帰的に走査

        Note:
            - 呼び出し元の除外フィールドは適用しない (最上位の型のフィールド名のため)
            - stop_at_first_nested_difference が有効な場合、差異を記録した
              フィールドの時点で残りのフィールドの走査を打ち切る
            - detect_cycles が有効な場合、走査中のオブジェクトの組に再度到達したら
              再帰せずにスキップする
        """
        if left is None or right is None:
            if left is not right:
                differences.put(field, left, right)
            return

        key = (id(left), id(right))
        if self.options.detect_cycles:
            if key in visiting:
                self.logger.warning(
                    f"Cyclic reference detected, skipping field {field}",
                    extra={"object_type": type(left).__name__}
                )
                return
            visiting.add(key)

        try:
            for nested_field in self.introspector.all_fields(left):
                if self._is_back_reference(nested_field.name):
                    continue
                recorded = differences.total_pairs
                nested_left = self.introspector.read_field(nested_field, left)
                nested_right = self.introspector.read_field(nested_field, right)
                self._dispatch(differences, nested_field, nested_left, nested_right, visiting)
                if (
                    self.options.stop_at_first_nested_difference
                    and differences.total_pairs > recorded
                ):
                    break
        finally:
            if self.options.detect_cycles:
                visiting.discard(key)

    @staticmethod
    def _is_back_reference(name: str) -> bool:
        """処理系が合成するメンバー (__dict__, __weakref__ など) か"""
        return name.startswith("__") and name.endswith("__")


def compare(
    first: Any,
    second: Any,
    *exclusions: str,
    options: Optional[ComparisonOptions] = None,
    introspector: Optional[FieldIntrospector] = None
) -> DifferenceMap:
    """
    2 つのオブジェクトを比較する (ComparisonEngine の簡易呼び出し)

    Args:
        first: 比較元のオブジェクト
        second: 比較先のオブジェクト
        *exclusions: 比較しないフィールド名
        options: 比較の動作設定
        introspector: フィールドイントロスペクター

    Returns:
        DifferenceMap: フィールドごとの差異
    """
    engine = ComparisonEngine(introspector=introspector, options=options)
    return engine.compare(first, second, *exclusions)
