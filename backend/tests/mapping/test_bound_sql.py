"""Unit tests for mapping.bound_sql (BoundSql carrier)."""

from unittest.mock import MagicMock

import pytest

from dbmapper.mapping import BoundSql, ParameterMapping
from dbmapper.reflection import MetaObject, ResolutionError


def _bound(parameter_object=None, mappings=None) -> BoundSql:
    return BoundSql(
        "SELECT * FROM t WHERE id = ?",
        mappings if mappings is not None else [ParameterMapping("id")],
        parameter_object,
    )


class TestAccessors:
    def test_sql_is_verbatim(self):
        assert _bound().sql == "SELECT * FROM t WHERE id = ?"

    def test_parameter_object_is_same_reference(self):
        obj = {"id": 5}
        assert _bound(obj).parameter_object is obj

    def test_parameter_mappings_keep_order(self):
        mappings = [ParameterMapping("b"), ParameterMapping("a"), ParameterMapping("c")]
        b = _bound(mappings=mappings)
        first = [m.property for m in b.parameter_mappings]
        second = [m.property for m in b.parameter_mappings]
        assert first == second == ["b", "a", "c"]

    def test_parameter_mappings_are_a_snapshot(self):
        mappings = [ParameterMapping("id")]
        b = _bound(mappings=mappings)
        mappings.append(ParameterMapping("other"))
        assert len(b.parameter_mappings) == 1
        assert isinstance(b.parameter_mappings, tuple)

    def test_additional_parameters_start_empty_and_read_only(self):
        b = _bound()
        assert dict(b.additional_parameters) == {}
        with pytest.raises(TypeError):
            b.additional_parameters["x"] = 1  # type: ignore[index]


class TestAdditionalParameters:
    def test_loop_item_scenario(self):
        b = _bound()
        b.set_additional_parameter("loop_item_0", "Alice")
        assert b.has_additional_parameter("loop_item_0") is True
        assert b.get_additional_parameter("loop_item_0") == "Alice"

    @pytest.mark.parametrize("path", ["item", "item[0]", "item.name", "item[3].x"])
    def test_has_checks_root_name(self, path):
        b = _bound()
        b.set_additional_parameter("item", [{"name": "a"}])
        assert b.has_additional_parameter(path) is True

    def test_has_after_nested_set(self):
        b = _bound()
        b.set_additional_parameter("item.name", "a")
        assert b.has_additional_parameter("item[0]") is True
        assert b.has_additional_parameter("other") is False

    def test_get_returns_scalar_unchanged(self):
        b = _bound()
        for value in (0, "", 3.5, False, None):
            b.set_additional_parameter("v", value)
            assert b.get_additional_parameter("v") == value

    def test_nested_set_and_get(self):
        b = _bound()
        b.set_additional_parameter("user.name", "Bob")
        assert b.get_additional_parameter("user.name") == "Bob"
        assert b.additional_parameters["user"] == {"name": "Bob"}

    def test_indexed_set_on_stored_list(self):
        b = _bound()
        b.set_additional_parameter("items", ["a"])
        b.set_additional_parameter("items[1]", "b")
        assert b.get_additional_parameter("items[1]") == "b"

    def test_get_missing_raises(self):
        with pytest.raises(ResolutionError):
            _bound().get_additional_parameter("nope")

    def test_set_out_of_range_raises(self):
        b = _bound()
        b.set_additional_parameter("items", [])
        with pytest.raises(ResolutionError):
            b.set_additional_parameter("items[5]", "x")

    def test_namespace_is_never_pruned(self):
        b = _bound()
        b.set_additional_parameter("a", 1)
        b.set_additional_parameter("b", 2)
        b.set_additional_parameter("a", 3)
        assert dict(b.additional_parameters) == {"a": 3, "b": 2}

    def test_caller_object_untouched(self):
        obj = {"id": 5}
        b = _bound(obj)
        b.set_additional_parameter("id", 99)
        assert obj == {"id": 5}


def test_custom_meta_object_factory_gets_namespace() -> None:
    factory = MagicMock(side_effect=MetaObject)
    b = BoundSql("SELECT 1", [], None, meta_object_factory=factory)
    factory.assert_called_once()
    b.set_additional_parameter("x", 1)
    assert factory.call_args.args[0] == {"x": 1}


def test_repr_lists_mappings() -> None:
    b = _bound()
    b.set_additional_parameter("__bind_0", 1)
    r = repr(b)
    assert "'id'" in r and "__bind_0" in r


def test_parameter_mapping_rejects_empty_property() -> None:
    with pytest.raises(ValueError):
        ParameterMapping("")
