"""Unit tests for reflection.meta_object (kind dispatch, reads, writes)."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType, SimpleNamespace

import pytest
from pydantic import BaseModel

from dbmapper.reflection import MetaObject, ResolutionError, ValueKind, kind_of


@dataclass
class Address:
    city: str
    tags: list[str] = field(default_factory=list)


@dataclass
class User:
    name: str
    address: Address | None = None


@dataclass(frozen=True)
class Point:
    x: int
    y: int


class Order(BaseModel):
    id: int
    items: list[dict] = []


class TestKindOf:
    @pytest.mark.parametrize("value", [None, "s", b"b", 1, 1.5, True, Decimal("1"), date(2024, 1, 1)])
    def test_scalars(self, value):
        assert kind_of(value) is ValueKind.SCALAR

    def test_sequence(self):
        assert kind_of([1]) is ValueKind.SEQUENCE
        assert kind_of((1,)) is ValueKind.SEQUENCE

    def test_mapping(self):
        assert kind_of({}) is ValueKind.MAPPING
        assert kind_of(MappingProxyType({})) is ValueKind.MAPPING

    def test_record(self):
        assert kind_of(User("a")) is ValueKind.RECORD
        assert kind_of(SimpleNamespace(a=1)) is ValueKind.RECORD
        assert kind_of(Order(id=1)) is ValueKind.RECORD


class TestGetValue:
    def test_mapping_key(self):
        assert MetaObject({"id": 5}).get_value("id") == 5

    def test_nested_record(self):
        user = User("ann", Address("Hanoi"))
        assert MetaObject(user).get_value("address.city") == "Hanoi"

    def test_indexed_list(self):
        meta = MetaObject({"items": [{"name": "a"}, {"name": "b"}]})
        assert meta.get_value("items[1].name") == "b"

    def test_indexed_mapping(self):
        meta = MetaObject({"attrs": {"color": "red"}})
        assert meta.get_value("attrs[color]") == "red"

    def test_pydantic_record(self):
        order = Order(id=7, items=[{"sku": "x"}])
        assert MetaObject(order).get_value("items[0].sku") == "x"

    def test_none_leaf_is_returned(self):
        assert MetaObject({"a": None}).get_value("a") is None

    def test_missing_key_raises(self):
        with pytest.raises(ResolutionError, match="No key 'missing'"):
            MetaObject({"id": 1}).get_value("missing")

    def test_missing_attribute_raises(self):
        with pytest.raises(ResolutionError, match="no property 'email'"):
            MetaObject(User("a")).get_value("email")

    def test_descend_into_none_raises(self):
        with pytest.raises(ResolutionError):
            MetaObject(User("a")).get_value("address.city")

    def test_descend_into_scalar_raises(self):
        with pytest.raises(ResolutionError, match="scalar"):
            MetaObject({"id": 5}).get_value("id.value")

    def test_index_out_of_range(self):
        with pytest.raises(ResolutionError, match="out of range"):
            MetaObject({"items": [1]}).get_value("items[3]")

    def test_non_numeric_sequence_index(self):
        with pytest.raises(ResolutionError, match="non-negative integer"):
            MetaObject({"items": [1]}).get_value("items[-1]")

    def test_non_ascii_digit_index(self):
        with pytest.raises(ResolutionError, match="non-negative integer"):
            MetaObject({"items": [1, 2, 3]}).get_value("items[\u00b2]")

    def test_index_on_scalar(self):
        with pytest.raises(ResolutionError, match="not indexable"):
            MetaObject({"n": 3}).get_value("n[0]")

    def test_has_value(self):
        meta = MetaObject({"a": {"b": 1}})
        assert meta.has_value("a.b") is True
        assert meta.has_value("a.c") is False


class TestSetValue:
    def test_set_top_level(self):
        root: dict = {}
        MetaObject(root).set_value("name", "Alice")
        assert root == {"name": "Alice"}

    def test_creates_intermediate_dicts(self):
        root: dict = {}
        MetaObject(root).set_value("user.address.city", "Hue")
        assert root == {"user": {"address": {"city": "Hue"}}}

    def test_overwrites_existing(self):
        root = {"a": {"b": 1}}
        MetaObject(root).set_value("a.b", 2)
        assert root["a"]["b"] == 2

    def test_list_assign_and_append(self):
        root = {"items": ["x"]}
        meta = MetaObject(root)
        meta.set_value("items[0]", "y")
        meta.set_value("items[1]", "z")
        assert root["items"] == ["y", "z"]

    def test_list_beyond_end_raises(self):
        root = {"items": []}
        with pytest.raises(ResolutionError, match="out of range"):
            MetaObject(root).set_value("items[2]", "z")

    def test_indexed_missing_container_raises(self):
        with pytest.raises(ResolutionError, match="No key 'items'"):
            MetaObject({}).set_value("items[0]", 1)

    def test_indexed_intermediate_not_created(self):
        with pytest.raises(ResolutionError):
            MetaObject({}).set_value("items[0].name", "a")

    def test_set_through_list_element(self):
        root = {"items": [{"name": "a"}]}
        MetaObject(root).set_value("items[0].name", "b")
        assert root["items"][0]["name"] == "b"

    def test_mapping_index_assign(self):
        root = {"attrs": {}}
        MetaObject(root).set_value("attrs[color]", "red")
        assert root["attrs"] == {"color": "red"}

    def test_tuple_is_not_writable(self):
        root = {"pair": (1, 2)}
        with pytest.raises(ResolutionError, match="indexed assignment"):
            MetaObject(root).set_value("pair[0]", 9)

    def test_read_only_mapping(self):
        root = {"ro": MappingProxyType({"a": 1})}
        with pytest.raises(ResolutionError, match="read-only"):
            MetaObject(root).set_value("ro.a", 2)

    def test_record_attribute(self):
        user = User("a", Address("Hanoi"))
        MetaObject(user).set_value("address.city", "Da Nang")
        assert user.address.city == "Da Nang"

    def test_frozen_record_raises(self):
        with pytest.raises(ResolutionError, match="Cannot set property 'x'"):
            MetaObject({"p": Point(1, 2)}).set_value("p.x", 5)

    def test_set_on_scalar_raises(self):
        with pytest.raises(ResolutionError):
            MetaObject({"n": 1}).set_value("n.value", 2)

    def test_set_then_get_returns_same_object(self):
        value = object()
        meta = MetaObject({})
        meta.set_value("a.b", value)
        assert meta.get_value("a.b") is value
