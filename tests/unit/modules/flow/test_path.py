import pytest
from src.modules.flow.path import NOT_FOUND, lookup_path, split_path


def test_lookup_nested_object():
    """Test walking nested objects."""
    assert lookup_path({"a": {"b": {"c": 1}}}, "a.b.c") == 1


def test_lookup_array_index():
    """Test that numeric segments index into arrays."""
    assert lookup_path({"items": [{"id": "x"}, {"id": "y"}]}, "items.1.id") == "y"


def test_lookup_missing_key():
    """Test that missing keys resolve to NOT_FOUND."""
    assert lookup_path({"a": {}}, "a.b") is NOT_FOUND


def test_lookup_out_of_range_and_non_numeric_index():
    """Test invalid array access."""
    data = {"items": [1, 2]}
    assert lookup_path(data, "items.5") is NOT_FOUND
    assert lookup_path(data, "items.first") is NOT_FOUND


def test_lookup_through_scalar():
    """Test that walking past a scalar is NOT_FOUND."""
    assert lookup_path({"a": "text"}, "a.length") is NOT_FOUND
    assert lookup_path("text", "a") is NOT_FOUND


def test_null_is_distinct_from_not_found():
    """Test that a JSON null is returned as None, not as NOT_FOUND."""
    result = lookup_path({"a": None}, "a")
    assert result is None
    assert result is not NOT_FOUND


def test_not_found_is_falsy_singleton():
    """Test the NOT_FOUND marker."""
    assert not NOT_FOUND
    assert type(NOT_FOUND)() is NOT_FOUND
    assert repr(NOT_FOUND) == "<not found>"


@pytest.mark.parametrize("path", ["", "   ", "a..b", ".a", "a."])
def test_malformed_paths(path):
    """Test that empty or malformed paths are rejected."""
    with pytest.raises(ValueError):
        split_path(path)


def test_split_path():
    """Test splitting a dotted path."""
    assert split_path(" user.items.0 ") == ["user", "items", "0"]
