"""
Тесты для IntervalVolume и IntervalVolumeBuilder

Проверяет:
1. Доступ по значениям и индексам, колонки уровней как XySequence
2. collapse() в IntervalTable и далее в IntervalArray
3. Мутации builder'а (add_column/add_volume/...)
4. Жизненный цикл builder'а
"""

import pytest

from src.core.data.errors import ArgumentError, DataIndexError, StateError
from src.core.data.interval_data import IntervalFormat
from src.core.data.interval_table import IntervalTable
from src.core.data.interval_volume import IntervalVolume, IntervalVolumeBuilder
from src.core.data.xy_sequence import XySequence


def _builder() -> IntervalVolumeBuilder:
    """Объём 2x3x4 с единичными бинами"""
    return (
        IntervalVolumeBuilder()
        .rows(0.0, 2.0, 1.0)
        .columns(0.0, 3.0, 1.0)
        .levels(0.0, 4.0, 1.0)
    )


def _ones() -> IntervalVolume:
    return _builder().build(lambda row, column, level: 1.0)


# =============================================================================
# ТЕСТЫ ДОСТУПА
# =============================================================================


class TestIntervalVolume:
    """Тесты для IntervalVolume"""

    def test_get_by_value_and_index(self) -> None:
        volume = _builder().add(1.2, 2.7, 3.1, 5.0).build()

        assert volume.get(1.5, 2.5, 3.5) == 5.0
        assert volume.get_at(1, 2, 3) == 5.0
        assert volume.get_at(0, 0, 0) == 0.0

    def test_structure(self) -> None:
        volume = _builder().build()

        assert volume.rows().tolist() == [0.5, 1.5]
        assert volume.columns().tolist() == [0.5, 1.5, 2.5]
        assert volume.levels().tolist() == [0.5, 1.5, 2.5, 3.5]
        assert volume.shape() == (2, 3, 4)
        assert (volume.row_min(), volume.row_max(), volume.row_delta()) == (0.0, 2.0, 1.0)
        assert (volume.column_min(), volume.column_max(), volume.column_delta()) == (0.0, 3.0, 1.0)
        assert (volume.level_min(), volume.level_max(), volume.level_delta()) == (0.0, 4.0, 1.0)

    def test_get_out_of_range_raises(self) -> None:
        volume = _ones()

        with pytest.raises(DataIndexError):
            volume.get(0.5, 0.5, 4.0)
        with pytest.raises(DataIndexError):
            volume.get_at(0, 3, 0)
        with pytest.raises(DataIndexError):
            volume.get_at(2, 0, 0)

    def test_column_is_level_sequence(self) -> None:
        volume = _builder().add_column(0.5, 1.5, [1.0, 2.0, 3.0, 4.0]).build()
        column = volume.column(0.5, 1.5)

        assert isinstance(column, XySequence)
        assert column.x_keys() is volume.levels()
        assert column.y_values().tolist() == [1.0, 2.0, 3.0, 4.0]
        assert volume.column_at(0, 1) == column

    def test_column_at_out_of_range_raises(self) -> None:
        with pytest.raises(DataIndexError):
            _ones().column_at(0, 3)

    def test_sum(self) -> None:
        assert _ones().sum() == 24.0

    def test_extreme_indices(self) -> None:
        volume = _builder().set_at(1, 2, 0, -1.0).set_at(0, 1, 3, 2.0).build()

        assert volume.min_index() == (1, 2, 0)
        assert volume.max_index() == (0, 1, 3)

    def test_str(self) -> None:
        lines = str(_ones()).split("\n")

        assert lines[0].startswith(" " * 20 + "[")
        assert lines[1].startswith("[   0.50] [   0.50] [")
        assert len(lines) == 1 + 2 * 3

    def test_format_custom(self) -> None:
        fmt = IntervalFormat(
            key_format="%.1f",
            key_with_brackets="[%.1f] ",
            data_format="%.1f",
            zero_value="0",
        )
        lines = _ones().format(fmt).split("\n")

        assert lines[0] == " " * 12 + "[0.5, 1.5, 2.5, 3.5]"
        assert lines[1] == "[0.5] [0.5] [1.0, 1.0, 1.0, 1.0]"
        assert lines[-1] == "[1.5] [2.5] [1.0, 1.0, 1.0, 1.0]"


class TestVolumeCollapse:
    """Тесты collapse()"""

    def test_collapse_to_table(self) -> None:
        table = _ones().collapse()

        assert isinstance(table, IntervalTable)
        assert table.shape() == (2, 3)
        assert table.get_at(1, 2) == 4.0

    def test_double_collapse_of_uniform_volume(self) -> None:
        """Каждый элемент = levels * columns"""
        array = _ones().collapse().collapse()
        assert array.values().y_values().tolist() == [12.0, 12.0]

    def test_collapse_preserves_sum(self) -> None:
        volume = _builder().build(lambda row, column, level: row * column + level)
        assert volume.collapse().sum() == pytest.approx(volume.sum())
        assert volume.collapse().collapse().sum() == pytest.approx(volume.sum())

    def test_collapse_shares_keys(self) -> None:
        volume = _ones()
        table = volume.collapse()

        assert table.rows() is volume.rows()
        assert table.columns() is volume.columns()


# =============================================================================
# ТЕСТЫ BUILDER
# =============================================================================


class TestIntervalVolumeBuilder:
    """Тесты мутаций IntervalVolumeBuilder"""

    def test_set_and_add(self) -> None:
        volume = (
            _builder()
            .set(0.5, 0.5, 0.5, 2.0)
            .add(0.5, 0.5, 0.5, 1.0)
            .add_at(0, 0, 0, 0.5)
            .build()
        )
        assert volume.get_at(0, 0, 0) == 3.5

    def test_indices(self) -> None:
        builder = _builder()
        assert builder.row_index(1.0) == 1
        assert builder.column_index(2.9) == 2
        assert builder.level_index(0.0) == 0

    def test_set_at_out_of_range_raises(self) -> None:
        with pytest.raises(DataIndexError, match="level index"):
            _builder().set_at(0, 0, 4, 1.0)

    def test_add_column_overrun_raises(self) -> None:
        with pytest.raises(DataIndexError, match="overrun"):
            _builder().add_column(0.5, 0.5, [1.0, 2.0, 3.0, 4.0, 5.0])

    def test_add_volume_same_model(self) -> None:
        model = _ones()
        volume = IntervalVolumeBuilder.from_model(model).add_volume(model).add_volume(model).build()

        assert volume.sum() == 48.0
        assert volume.levels() is model.levels()

    def test_add_volume_mismatch_raises(self) -> None:
        builder = (
            IntervalVolumeBuilder()
            .rows(0.0, 2.0, 1.0)
            .columns(0.0, 3.0, 1.0)
            .levels(0.0, 4.0, 2.0)
        )
        with pytest.raises(ArgumentError, match="Level keys do not match"):
            builder.add_volume(_ones())

    def test_multiply(self) -> None:
        volume = IntervalVolumeBuilder.copy_of(_ones()).multiply(0.5).build()
        assert volume.sum() == 12.0

    def test_loader_overwrites_previous_values(self) -> None:
        volume = _builder().set_at(0, 0, 0, 9.0).build(lambda row, column, level: level)
        assert volume.column_at(0, 0).y_values().tolist() == [0.5, 1.5, 2.5, 3.5]


# =============================================================================
# ТЕСТЫ ЖИЗНЕННОГО ЦИКЛА
# =============================================================================


class TestVolumeBuilderLifecycle:
    """Тесты одноразовости builder'а"""

    def test_second_build_raises(self) -> None:
        builder = _builder()
        builder.build()
        with pytest.raises(StateError, match="already been used"):
            builder.build()

    def test_data_before_levels_raises(self) -> None:
        builder = IntervalVolumeBuilder().rows(0.0, 2.0, 1.0).columns(0.0, 3.0, 1.0)
        with pytest.raises(StateError, match="Level data have not yet been fully specified"):
            builder.add_at(0, 0, 0, 1.0)

    def test_redefine_after_configured_raises(self) -> None:
        with pytest.raises(StateError, match="already been initialized"):
            _builder().levels(0.0, 2.0, 1.0)

    def test_copy_of_is_independent(self) -> None:
        original = _ones()
        copy = IntervalVolumeBuilder.copy_of(original).add_at(0, 0, 0, 1.0).build()

        assert original.get_at(0, 0, 0) == 1.0
        assert copy.get_at(0, 0, 0) == 2.0

    def test_built_data_is_read_only(self) -> None:
        builder = _builder()
        volume = builder.build()

        assert builder._data is None
        with pytest.raises(ValueError):
            volume.column_at(0, 0).y_values()[0] = 1.0
