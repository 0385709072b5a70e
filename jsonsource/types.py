"""Column types used by schema inference and row conversion."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple


class DataType:
    """Base class of every column type. Instances compare by value."""

    name = "unknown"

    def simple_string(self) -> str:
        return self.name

    def json_value(self) -> Any:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class NullType(DataType):
    name = "null"


class BooleanType(DataType):
    name = "boolean"


class LongType(DataType):
    name = "long"


class DoubleType(DataType):
    name = "double"


class StringType(DataType):
    name = "string"


NULL = NullType()
BOOLEAN = BooleanType()
LONG = LongType()
DOUBLE = DoubleType()
STRING = StringType()

_ATOMIC = {t.name: t for t in (NULL, BOOLEAN, LONG, DOUBLE, STRING)}


@dataclass(frozen=True, eq=True)
class ArrayType(DataType):
    element_type: DataType
    contains_null: bool = True

    name = "array"

    def simple_string(self) -> str:
        return f"array<{self.element_type.simple_string()}>"

    def json_value(self) -> Any:
        return {
            "type": "array",
            "elementType": self.element_type.json_value(),
            "containsNull": self.contains_null,
        }


@dataclass(frozen=True, eq=True)
class StructField:
    name: str
    data_type: DataType
    nullable: bool = True

    def json_value(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.data_type.json_value(),
            "nullable": self.nullable,
            "metadata": {},
        }


@dataclass(frozen=True, eq=True)
class StructType(DataType):
    fields: Tuple[StructField, ...] = ()

    name = "struct"

    def __init__(self, fields=()):
        object.__setattr__(self, "fields", tuple(fields))

    def __iter__(self) -> Iterator[StructField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, name: str) -> StructField:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def field_index(self, name: str) -> Optional[int]:
        for i, field in enumerate(self.fields):
            if field.name == name:
                return i
        return None

    def add(self, name: str, data_type: DataType, nullable: bool = True) -> "StructType":
        return StructType(self.fields + (StructField(name, data_type, nullable),))

    def without(self, name: str) -> "StructType":
        return StructType(f for f in self.fields if f.name != name)

    def simple_string(self) -> str:
        inner = ",".join(f"{f.name}:{f.data_type.simple_string()}" for f in self.fields)
        return f"struct<{inner}>"

    def json_value(self) -> Dict[str, Any]:
        return {"type": "struct", "fields": [f.json_value() for f in self.fields]}

    def __repr__(self) -> str:
        return f"StructType({list(self.fields)!r})"


def from_json_value(value: Any) -> DataType:
    """Rebuild a type from the dict produced by ``json_value()``."""
    if isinstance(value, str):
        try:
            return _ATOMIC[value]
        except KeyError:
            raise ValueError(f"Unsupported data type: {value!r}") from None
    if not isinstance(value, dict):
        raise ValueError(f"Cannot read a data type from {value!r}")
    kind = value.get("type")
    if kind == "array":
        return ArrayType(from_json_value(value["elementType"]), value.get("containsNull", True))
    if kind == "struct":
        return StructType(
            StructField(f["name"], from_json_value(f["type"]), f.get("nullable", True))
            for f in value.get("fields", [])
        )
    raise ValueError(f"Unsupported data type: {kind!r}")


def row_as_dict(schema: StructType, row: Optional[tuple]) -> Optional[Dict[str, Any]]:
    """Turn a positional row (nested tuples included) into plain dicts."""
    if row is None:
        return None
    return {f.name: _value_as_plain(f.data_type, v) for f, v in zip(schema.fields, row)}


def _value_as_plain(data_type: DataType, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(data_type, StructType):
        return row_as_dict(data_type, value)
    if isinstance(data_type, ArrayType):
        return [_value_as_plain(data_type.element_type, v) for v in value]
    return value
