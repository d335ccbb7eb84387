"""
アダプター層

比較対象オブジェクトのフィールド列挙・読み取りロジックを提供します。
"""

from .field_introspector import FieldIntrospector
from .reflective_introspector import ReflectiveFieldIntrospector
from ..domain.exceptions import FieldAccessError

__all__ = ["FieldIntrospector", "ReflectiveFieldIntrospector", "FieldAccessError"]
