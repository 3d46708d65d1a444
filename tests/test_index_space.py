"""Tests for index spaces."""

import numpy as np
import pytest

from scenario_kernel.errors import InvalidRange
from scenario_kernel.models.index_space import (
    IndexRange,
    IndexSubset,
    index_range,
    parse_index_space,
    subset,
)


class TestIndexSubset:
    def test_size_and_positions(self):
        space = subset(0, 3, 8)
        assert space.size() == 3
        assert list(space.positions()) == [0, 3, 8]
        assert space.to_array().tolist() == [0, 3, 8]
        assert space.is_bounded is True

    def test_positions_are_restartable(self):
        space = subset(1, 2)
        assert list(space.positions()) == list(space.positions()) == [1, 2]

    def test_empty_subset(self):
        space = IndexSubset()
        assert space.size() == 0
        assert list(space.positions()) == []
        assert space.to_array().dtype == np.intp

    def test_negative_index_rejected(self):
        with pytest.raises(Exception):
            subset(0, -1)

    def test_not_resorted(self):
        space = subset(5, 1)
        assert list(space.positions()) == [5, 1]

    def test_serialization(self):
        assert subset(0, 3).model_dump() == {"shape": "subset", "indices": (0, 3)}
        assert subset(0, 3).model_dump(mode="json") == {"shape": "subset", "indices": [0, 3]}


class TestIndexRange:
    def test_bounded_range(self):
        space = index_range(2, 5)
        assert space.size() == 3
        assert list(space.positions()) == [2, 3, 4]
        assert space.to_array().tolist() == [2, 3, 4]

    def test_empty_range(self):
        space = index_range(4, 4)
        assert space.size() == 0
        assert list(space.positions()) == []

    def test_first_greater_than_last(self):
        with pytest.raises(InvalidRange):
            IndexRange(first=5, last=2)

    def test_unbounded_has_no_size_until_resolved(self):
        space = index_range(2)
        assert space.is_bounded is False
        assert space.size() is None
        assert space.size(5) == 3

    def test_unbounded_resolves_like_bounded(self):
        assert index_range(2).to_array(5).tolist() == index_range(2, 5).to_array(5).tolist()
        assert list(index_range(2).positions(5)) == [2, 3, 4]

    def test_bounded_range_is_clamped(self):
        assert index_range(1, 100).to_array(4).tolist() == [1, 2, 3]
        assert index_range(1, 100).size(4) == 3

    def test_first_beyond_bound_is_empty(self):
        assert index_range(7).to_array(5).tolist() == []
        assert index_range(7).size(5) == 0

    def test_unbounded_cannot_be_enumerated_without_bound(self):
        with pytest.raises(InvalidRange):
            list(index_range(3).positions())
        with pytest.raises(InvalidRange):
            index_range(3).to_array()

    def test_serialization_uses_null_for_unbounded(self):
        assert index_range(2).model_dump(mode="json") == {"shape": "range", "first": 2, "last": None}
        assert index_range(2, 6).model_dump(mode="json") == {"shape": "range", "first": 2, "last": 6}


class TestParseIndexSpace:
    def test_parse_subset(self):
        space = parse_index_space({"shape": "subset", "indices": [0, 3, 8]})
        assert isinstance(space, IndexSubset)
        assert space == subset(0, 3, 8)

    def test_parse_range(self):
        space = parse_index_space({"shape": "range", "first": 1, "last": None})
        assert isinstance(space, IndexRange)
        assert space == index_range(1)

    def test_parse_invalid_range(self):
        with pytest.raises(InvalidRange):
            parse_index_space({"shape": "range", "first": 3, "last": 1})

    def test_parse_unknown_shape(self):
        with pytest.raises(Exception):
            parse_index_space({"shape": "grid", "indices": [1]})

    def test_spaces_are_hashable(self):
        assert len({subset(1, 2), subset(1, 2), index_range(0, 2)}) == 2
