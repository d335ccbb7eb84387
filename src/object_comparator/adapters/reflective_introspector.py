"""
リフレクションによるフィールドイントロスペクター

型の MRO をたどり、アノテーション・__slots__・インスタンス属性から
フィールドを列挙する標準実装です。
"""

import dataclasses
import inspect
from functools import lru_cache
from typing import Any, ClassVar, List, Tuple, get_origin

from .field_introspector import FieldIntrospector
from ..domain.models import FieldIdentity


class ReflectiveFieldIntrospector(FieldIntrospector):
    """
    リフレクションによるフィールド列挙の実装

    dataclass、Pydantic モデル、__slots__ を持つクラス、__init__ で属性を
    設定するだけの通常クラスのいずれにも対応します。
    """

    def all_fields(self, instance: Any) -> List[FieldIdentity]:
        """
        インスタンスの全フィールドを列挙

        Args:
            instance: 列挙対象のインスタンス

        Returns:
            List[FieldIdentity]: フィールド一覧

        Note:
            - 派生側の型から順に、各型のアノテーション (ClassVar / InitVar を除く)、
              __slots__ の順で列挙する
            - 最後に、どの型にも宣言されていないインスタンス属性を実行時型の
              フィールドとして追加する
            - 同名のフィールドは最も派生側の宣言のみを採用する
        """
        instance_type = type(instance)
        fields = list(_declared_fields(instance_type))
        seen = {field.name for field in fields}

        for name in self._instance_attribute_names(instance):
            if name not in seen:
                seen.add(name)
                fields.append(FieldIdentity(declaring_type=instance_type, name=name))

        return fields

    @staticmethod
    def _instance_attribute_names(instance: Any) -> List[str]:
        """インスタンスの __dict__ に格納された属性名 (挿入順)"""
        namespace = getattr(instance, "__dict__", None)
        if not isinstance(namespace, dict):
            return []
        return [name for name in namespace if isinstance(name, str)]


@lru_cache(maxsize=None)
def _declared_fields(cls: type) -> Tuple[FieldIdentity, ...]:
    """型とその継承元に宣言されたフィールド (型ごとにキャッシュ)"""
    fields = []
    seen = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name in _own_field_names(klass):
            if name not in seen:
                seen.add(name)
                fields.append(FieldIdentity(declaring_type=klass, name=name))
    return tuple(fields)


def _own_field_names(klass: type) -> List[str]:
    names = []

    for name, annotation in inspect.get_annotations(klass).items():
        if not _is_class_level(annotation):
            names.append(name)

    slots = klass.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    for slot in slots:
        name = _mangle(klass, slot)
        if name not in names:
            names.append(name)

    return names


def _is_class_level(annotation: Any) -> bool:
    """ClassVar / InitVar のアノテーションか (インスタンスには値を持たない)"""
    if isinstance(annotation, str):
        head = annotation.split("[", 1)[0].strip().rsplit(".", 1)[-1]
        return head in ("ClassVar", "InitVar")
    if annotation is ClassVar or get_origin(annotation) is ClassVar:
        return True
    return annotation is dataclasses.InitVar or isinstance(annotation, dataclasses.InitVar)


def _mangle(klass: type, name: str) -> str:
    # __x は _Class__x として格納される
    if name.startswith("__") and not name.endswith("__"):
        return f"_{klass.__name__.lstrip('_')}{name}"
    return name
