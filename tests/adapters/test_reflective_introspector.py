"""
ReflectiveFieldIntrospector のユニットテスト

継承階層を含むフィールド列挙と読み取りを検証します。
"""

from dataclasses import InitVar, dataclass, field
from typing import ClassVar, List

import pytest
from pydantic import BaseModel

from src.object_comparator.adapters.field_introspector import FieldIntrospector
from src.object_comparator.adapters.reflective_introspector import ReflectiveFieldIntrospector
from src.object_comparator.domain.exceptions import FieldAccessError
from src.object_comparator.domain.models import FieldIdentity


class PlainAnimal:
    def __init__(self, species: str, sex: str):
        self.species = species
        self.sex = sex


@dataclass
class BaseRecord:
    id: int
    desc: str
    registry: ClassVar[str] = "default"


@dataclass
class TaggedRecord(BaseRecord):
    tags: List[str] = field(default_factory=list)
    scale: InitVar[int] = 1
    legacy: "ClassVar[int]" = 0

    def __post_init__(self, scale: int):
        self.size = scale * 10


class Slotted:
    __slots__ = ("x", "__secret", "__weakref__")

    def __init__(self, x: int, secret: str):
        self.x = x
        self.__secret = secret


class AnimalModel(BaseModel):
    species: str
    age_months: int = 0


@pytest.fixture
def introspector():
    return ReflectiveFieldIntrospector()


def names(fields: List[FieldIdentity]) -> List[str]:
    return [f.name for f in fields]


class TestReflectiveFieldIntrospectorInterface:
    """インターフェース実装のテスト"""

    def test_is_field_introspector(self, introspector):
        """FieldIntrospector を継承していること"""
        assert isinstance(introspector, FieldIntrospector)


class TestReflectiveFieldIntrospectorPlainClass:
    """通常クラスの列挙のテスト"""

    def test_instance_attributes_in_assignment_order(self, introspector):
        """__init__ で設定した属性が代入順に列挙されること"""
        fields = introspector.all_fields(PlainAnimal("犬", "男の子"))

        assert fields == [
            FieldIdentity(declaring_type=PlainAnimal, name="species"),
            FieldIdentity(declaring_type=PlainAnimal, name="sex"),
        ]

    def test_extra_attributes_are_appended(self, introspector):
        """インスタンスにのみ存在する属性は実行時型のフィールドとして末尾に追加されること"""
        record = BaseRecord(1, "a")
        record.note = "memo"

        fields = introspector.all_fields(record)

        assert names(fields) == ["id", "desc", "note"]
        assert fields[-1].declaring_type is BaseRecord

    def test_objects_without_fields(self, introspector):
        """フィールドを持たない値は空のリストになること"""
        assert introspector.all_fields((1, 2)) == []
        assert introspector.all_fields(object()) == []


class TestReflectiveFieldIntrospectorInheritance:
    """継承階層の列挙のテスト"""

    def test_derived_fields_come_first(self, introspector):
        """派生側の型のフィールドが先に、継承元のフィールドが後に並ぶこと"""
        fields = introspector.all_fields(TaggedRecord(1, "a", ["x"]))

        assert names(fields)[:3] == ["tags", "id", "desc"]
        assert fields[0].declaring_type is TaggedRecord
        assert fields[1].declaring_type is BaseRecord
        assert fields[2].declaring_type is BaseRecord

    def test_class_level_annotations_are_skipped(self, introspector):
        """ClassVar と InitVar はフィールドとして列挙されないこと"""
        field_names = names(introspector.all_fields(TaggedRecord(1, "a")))

        assert "registry" not in field_names
        assert "legacy" not in field_names
        assert "scale" not in field_names

    def test_post_init_attributes_are_included(self, introspector):
        """__post_init__ で設定した属性も列挙されること"""
        fields = introspector.all_fields(TaggedRecord(1, "a", scale=2))

        assert names(fields) == ["tags", "id", "desc", "size"]

    def test_order_is_deterministic(self, introspector):
        """同じ型のインスタンスでは常に同じ順序になること"""
        first = introspector.all_fields(TaggedRecord(1, "a"))
        second = introspector.all_fields(TaggedRecord(2, "b"))

        assert first == second


class TestReflectiveFieldIntrospectorSlots:
    """__slots__ の列挙のテスト"""

    def test_slots_are_listed_with_mangled_names(self, introspector):
        """__slots__ のプライベート名はマングリング後の名前で列挙されること"""
        fields = introspector.all_fields(Slotted(1, "s"))

        assert names(fields) == ["x", "_Slotted__secret", "__weakref__"]

    def test_slot_values_are_readable(self, introspector):
        """マングリングされたスロットの値を読み取れること"""
        instance = Slotted(1, "s")
        secret = FieldIdentity(declaring_type=Slotted, name="_Slotted__secret")

        assert introspector.read_field(secret, instance) == "s"


class TestReflectiveFieldIntrospectorPydantic:
    """Pydantic モデルの列挙のテスト"""

    def test_model_fields_are_listed(self, introspector):
        """モデルのフィールドが宣言順に列挙されること"""
        fields = introspector.all_fields(AnimalModel(species="猫"))
        visible = [name for name in names(fields) if not name.startswith("__")]

        assert visible == ["species", "age_months"]

    def test_synthesized_members_are_not_filtered(self, introspector):
        """処理系が合成するメンバーは列挙側では除外しないこと"""
        fields = introspector.all_fields(AnimalModel(species="猫"))

        assert "__dict__" in names(fields)


class TestReflectiveFieldIntrospectorRead:
    """フィールド読み取りのテスト"""

    def test_read_field(self, introspector):
        """フィールド値を読み取れること"""
        species = FieldIdentity(declaring_type=PlainAnimal, name="species")

        assert introspector.read_field(species, PlainAnimal("犬", "不明")) == "犬"

    def test_unset_slot_raises_field_access_error(self, introspector):
        """未設定のスロットの読み取りは FieldAccessError になること"""
        instance = Slotted.__new__(Slotted)
        x = FieldIdentity(declaring_type=Slotted, name="x")

        with pytest.raises(FieldAccessError) as exc_info:
            introspector.read_field(x, instance)

        assert exc_info.value.field_name == "x"
        assert exc_info.value.owner_type is Slotted
