"""
Тесты для модуля XySequence

Проверяет:
1. Создание и доступ к точкам
2. Immutable вариант (read-only y-values, copy_of без копирования)
3. Mutable вариант (set/add/multiply/complement/clear/transform)
4. trim() и is_clear()
5. Фабрики create_sequence и add_to_map
"""

import math

import numpy as np
import pytest

from src.core.data.errors import (
    ArgumentError,
    DataIndexError,
    StateError,
    UnsupportedOperationError,
)
from src.core.data.xy_sequence import (
    AbstractXySequence,
    MutableXySequence,
    XyPoint,
    XySequence,
    add_to_map,
    create_sequence,
)

XS = [0.0, 1.0, 2.0, 3.0]
YS = [-1.0, 10.5, 5.25, 2.5]


@pytest.fixture
def immutable() -> XySequence:
    return XySequence.create(XS, YS)


@pytest.fixture
def mutable() -> MutableXySequence:
    return MutableXySequence.create(XS, YS)


# =============================================================================
# ТЕСТЫ СОЗДАНИЯ И ДОСТУПА
# =============================================================================


class TestCreate:
    """Тесты создания sequence"""

    def test_values(self, immutable: XySequence) -> None:
        assert immutable.size() == 4
        assert len(immutable) == 4
        for i in range(4):
            assert immutable.x(i) == XS[i]
            assert immutable.y(i) == YS[i]

    def test_input_is_copied(self) -> None:
        """Изменение входа не влияет на sequence"""
        xs = np.array(XS)
        ys = np.array(YS)
        sequence = XySequence.create(xs, ys)
        ys[0] = 100.0
        xs[3] = 100.0

        assert sequence.y(0) == -1.0
        assert sequence.x(3) == 3.0

    def test_invalid_arrays_raise(self) -> None:
        with pytest.raises(ArgumentError):
            XySequence.create([], [])
        with pytest.raises(ArgumentError):
            MutableXySequence.create([1.0, 0.0], [1.0, 2.0])

    @pytest.mark.parametrize("index", [-1, 4])
    def test_index_out_of_range(self, immutable: XySequence, index: int) -> None:
        with pytest.raises(DataIndexError):
            immutable.x(index)
        with pytest.raises(DataIndexError):
            immutable.y(index)

    def test_min_max_points(self, immutable: XySequence) -> None:
        assert immutable.min().x() == 0.0
        assert immutable.min().y() == -1.0
        assert immutable.max().x() == 3.0
        assert immutable.max().y() == 2.5

    def test_iteration(self, immutable: XySequence) -> None:
        points = list(immutable)
        assert all(isinstance(point, XyPoint) for point in points)
        assert [point.x() for point in points] == XS
        assert [point.y() for point in points] == YS

    def test_values_arrays(self, immutable: XySequence) -> None:
        assert immutable.x_values().tolist() == XS
        assert immutable.y_values().tolist() == YS

    def test_repr_and_str(self, immutable: XySequence) -> None:
        assert repr(immutable.min()) == "XyPoint: [0.0, -1.0]"
        text = str(immutable)
        assert text.startswith("XySequence:")
        assert "XyPoint: [3.0, 2.5]" in text


# =============================================================================
# ТЕСТЫ IMMUTABLE ВАРИАНТА
# =============================================================================


class TestImmutable:
    """Тесты XySequence"""

    def test_arrays_are_read_only(self, immutable: XySequence) -> None:
        assert not immutable.x_values().flags.writeable
        assert not immutable.y_values().flags.writeable
        with pytest.raises(ValueError):
            immutable.y_values()[0] = 1.0

    def test_point_set_raises(self, immutable: XySequence) -> None:
        """Точка immutable sequence read-only"""
        with pytest.raises(UnsupportedOperationError, match="read-only"):
            immutable.min().set(2.0)
        assert immutable.y(0) == -1.0

    def test_unsupported_operation_is_type_error(self, immutable: XySequence) -> None:
        with pytest.raises(TypeError):
            immutable.max().set(2.0)

    def test_has_no_mutators(self, immutable: XySequence) -> None:
        for name in ("set", "add", "multiply", "complement", "clear", "transform"):
            assert not hasattr(immutable, name)

    def test_copy_of_immutable_returns_same(self, immutable: XySequence) -> None:
        assert XySequence.copy_of(immutable) is immutable

    def test_copy_of_mutable(self, mutable: MutableXySequence) -> None:
        """Immutable копия mutable sequence не зависит от оригинала"""
        copy = XySequence.copy_of(mutable)

        assert type(copy) is XySequence
        assert copy.x_keys() is mutable.x_keys()
        assert copy == mutable

        mutable.set(0, 42.0)
        assert copy.y(0) == -1.0

    def test_wraps_writeable_view(self) -> None:
        """Writeable данные оборачиваются в read-only view"""
        xs = XySequence.create(XS, YS).x_keys()
        ys = np.array(YS)
        sequence = XySequence(xs, ys)

        assert not sequence.y_values().flags.writeable
        assert ys.flags.writeable

    def test_equal_and_hash(self, immutable: XySequence) -> None:
        other = XySequence.create(XS, YS)
        assert immutable == other
        assert hash(immutable) == hash(other)
        assert immutable != XySequence.create(XS, [0.0, 0.0, 0.0, 1.0])

    def test_signed_zero_equal_and_hash(self) -> None:
        """0.0 и -0.0 равны, значит и hash совпадает"""
        positive = XySequence.create([0.0, 1.0], [0.0, 1.0])
        negative = XySequence.create([-0.0, 1.0], [-0.0, 1.0])

        assert positive == negative
        assert hash(positive) == hash(negative)
        assert len({positive, negative}) == 1

    def test_equal_across_variants(self, immutable: XySequence, mutable: MutableXySequence) -> None:
        assert immutable == mutable
        assert mutable == immutable


# =============================================================================
# ТЕСТЫ MUTABLE ВАРИАНТА
# =============================================================================


class TestMutable:
    """Тесты MutableXySequence"""

    def test_create_without_ys_is_clear(self) -> None:
        sequence = MutableXySequence.create(XS)
        assert sequence.is_clear()
        assert sequence.y_values().tolist() == [0.0, 0.0, 0.0, 0.0]

    def test_y_values_view_is_read_only(self, mutable: MutableXySequence) -> None:
        view = mutable.y_values()
        assert not view.flags.writeable
        mutable.set(1, 7.0)
        assert view[1] == 7.0

    def test_not_hashable(self, mutable: MutableXySequence) -> None:
        with pytest.raises(TypeError):
            hash(mutable)

    def test_set(self, mutable: MutableXySequence) -> None:
        assert mutable.set(2, 9.0) is mutable
        assert mutable.y(2) == 9.0
        with pytest.raises(DataIndexError):
            mutable.set(4, 1.0)

    def test_point_set(self, mutable: MutableXySequence) -> None:
        mutable.max().set(8.0)
        assert mutable.y(3) == 8.0

    def test_add_scalar(self, mutable: MutableXySequence) -> None:
        mutable.add(5.5)
        assert mutable.y_values().tolist() == [y + 5.5 for y in YS]

    def test_add_values(self, mutable: MutableXySequence) -> None:
        mutable.add([1.0, 2.0, 3.0, 4.0])
        assert mutable.y_values().tolist() == [0.0, 12.5, 8.25, 6.5]

    def test_add_values_wrong_size_raises(self, mutable: MutableXySequence) -> None:
        with pytest.raises(ArgumentError, match=r"Values size \(3\)"):
            mutable.add([1.0, 2.0, 3.0])

    def test_add_sequence(self, mutable: MutableXySequence, immutable: XySequence) -> None:
        mutable.add(immutable)
        assert mutable.y_values().tolist() == [2 * y for y in YS]

    def test_add_self(self, mutable: MutableXySequence) -> None:
        mutable.add(mutable)
        assert mutable.y_values().tolist() == [2 * y for y in YS]

    def test_add_mismatched_sequence_raises(self, mutable: MutableXySequence) -> None:
        other = XySequence.create([0.0, 1.0, 2.0, 4.0], YS)
        with pytest.raises(ArgumentError, match="x-values do not match"):
            mutable.add(other)
        assert mutable.y_values().tolist() == YS

    def test_add_is_linear(self, immutable: XySequence) -> None:
        """copy_of(s).add(a).add(b) == copy_of(s).add(a + b)"""
        a = XySequence.create(XS, [0.5, 0.25, 1.0, 2.0])
        b = XySequence.create(XS, [1.0, 3.0, 0.5, 0.75])
        a_plus_b = MutableXySequence.copy_of(a).add(b)

        left = MutableXySequence.copy_of(immutable).add(a).add(b)
        right = MutableXySequence.copy_of(immutable).add(a_plus_b)

        assert left.y_values().tolist() == pytest.approx(right.y_values().tolist())

    def test_multiply_scalar(self, mutable: MutableXySequence) -> None:
        mutable.multiply(2.0)
        assert mutable.y_values().tolist() == [2 * y for y in YS]

    def test_multiply_sequence(self, mutable: MutableXySequence, immutable: XySequence) -> None:
        mutable.multiply(immutable)
        assert mutable.y_values().tolist() == [y * y for y in YS]

    def test_multiply_by_list_raises(self, mutable: MutableXySequence) -> None:
        with pytest.raises(ArgumentError, match="Cannot multiply"):
            mutable.multiply([1.0, 2.0, 3.0, 4.0])  # type: ignore[arg-type]

    def test_add_non_numeric_raises(self, mutable: MutableXySequence) -> None:
        with pytest.raises(ArgumentError, match="not numeric"):
            mutable.add("ab")  # type: ignore[arg-type]
        assert mutable.y_values().tolist() == YS

    def test_complement(self) -> None:
        sequence = MutableXySequence.create([0.0, 1.0, 2.0], [0.0, 0.25, 1.0])
        sequence.complement()
        assert sequence.y_values().tolist() == [1.0, 0.75, 0.0]

    def test_clear(self, mutable: MutableXySequence) -> None:
        assert mutable.clear().is_clear()

    def test_transform(self, mutable: MutableXySequence) -> None:
        mutable.transform(lambda y: math.exp(2 * y))
        assert mutable.y_values().tolist() == [math.exp(2 * y) for y in YS]

    def test_chaining(self, mutable: MutableXySequence) -> None:
        result = mutable.add(1.0).multiply(0.5).complement()
        assert result is mutable

    def test_copy_of_shares_x_copies_y(self, immutable: XySequence) -> None:
        copy = MutableXySequence.copy_of(immutable)

        assert copy.x_keys() is immutable.x_keys()
        copy.set(0, 100.0)
        assert immutable.y(0) == -1.0

    def test_copy_of_clear(self, immutable: XySequence) -> None:
        copy = MutableXySequence.copy_of(immutable, clear=True)

        assert copy.x_keys() is immutable.x_keys()
        assert copy.is_clear()
        assert not immutable.is_clear()


# =============================================================================
# ТЕСТЫ TRIM
# =============================================================================


class TestTrim:
    """Тесты trim() и is_clear()"""

    def test_trim_removes_leading_and_trailing_zeros(self) -> None:
        sequence = XySequence.create(
            [0.0, 1.0, 2.0, 3.0, 4.0, 5.0],
            [0.0, 0.0, 1.0, 2.0, 0.0, 0.0],
        )
        trimmed = sequence.trim()

        assert isinstance(trimmed, XySequence)
        assert trimmed.x_values().tolist() == [2.0, 3.0]
        assert trimmed.y_values().tolist() == [1.0, 2.0]

    def test_trim_keeps_interior_zeros(self) -> None:
        sequence = XySequence.create(
            [0.0, 1.0, 2.0, 3.0, 4.0],
            [0.0, 1.0, 0.0, 2.0, 0.0],
        )
        trimmed = sequence.trim()

        assert trimmed.x_values().tolist() == [1.0, 2.0, 3.0]
        assert trimmed.y_values().tolist() == [1.0, 0.0, 2.0]

    def test_trim_without_zeros_is_equal(self, immutable: XySequence) -> None:
        assert immutable.trim() == immutable

    def test_trim_mutable_returns_mutable(self) -> None:
        sequence = MutableXySequence.create([0.0, 1.0, 2.0], [0.0, 3.0, 0.0])
        trimmed = sequence.trim()

        assert isinstance(trimmed, MutableXySequence)
        trimmed.set(0, 5.0)
        assert sequence.y(1) == 3.0

    def test_trim_clear_raises(self) -> None:
        sequence = MutableXySequence.create(XS)
        with pytest.raises(StateError, match="clear"):
            sequence.trim()

    def test_is_clear(self, immutable: XySequence) -> None:
        assert not immutable.is_clear()
        assert XySequence.create(XS, [0.0, 0.0, 0.0, 0.0]).is_clear()


# =============================================================================
# ТЕСТЫ ФАБРИК
# =============================================================================


class TestFactories:
    """Тесты для create_sequence и add_to_map"""

    def test_create_sequence_variants(self) -> None:
        assert type(create_sequence(XS, YS, mutable=False)) is XySequence
        assert type(create_sequence(XS, YS, mutable=True)) is MutableXySequence

    def test_create_sequence_without_ys(self) -> None:
        sequence = create_sequence(XS, None, mutable=False)
        assert isinstance(sequence, AbstractXySequence)
        assert sequence.is_clear()
        assert not sequence.y_values().flags.writeable

    def test_add_to_map_new_key_stores_copy(self, immutable: XySequence) -> None:
        mapping: dict[str, MutableXySequence] = {}
        add_to_map("a", mapping, immutable)

        stored = mapping["a"]
        assert isinstance(stored, MutableXySequence)
        assert stored == immutable

        stored.add(1.0)
        assert immutable.y(0) == -1.0

    def test_add_to_map_existing_key_adds(self, immutable: XySequence) -> None:
        mapping: dict[str, MutableXySequence] = {}
        add_to_map("a", mapping, immutable)
        add_to_map("a", mapping, immutable)

        assert mapping["a"].y_values().tolist() == [2 * y for y in YS]

    def test_add_to_map_mismatch_raises(self, immutable: XySequence) -> None:
        mapping = {"a": MutableXySequence.create([0.0, 1.0])}
        with pytest.raises(ArgumentError):
            add_to_map("a", mapping, immutable)
