"""
IntervalVolume — трёхмерный контейнер binned данных

Immutable объём float значений по (строка, колонка, уровень). Контракт
тот же, что у IntervalTable, расширенный на одно измерение:
- column(...) возвращает XySequence по уровням (общий массив ключей
  уровней + read-only срез данных)
- collapse() суммирует по уровням и возвращает IntervalTable

Backing массив — float64[rows, columns, levels].
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import numpy as np

from src.core.data.double_data import check_element_index, collapse, max_index, min_index
from src.core.data.interval_data import (
    DEFAULT_FORMAT,
    IntervalBuilder,
    IntervalDimension,
    IntervalFormat,
    format_key,
    format_keys,
    format_values,
)
from src.core.data.interval_table import IntervalTable, IntervalTableBuilder
from src.core.data.xy_sequence import AbstractXySequence, XySequence

logger = logging.getLogger(__name__)

VolumeLoader = Callable[[float, float, float], float]


class IntervalVolume:
    """
    Immutable трёхмерный контейнер binned данных.

    Backing массив read-only и принадлежит только этому объёму.
    """

    __slots__ = ("_rows", "_columns", "_levels", "_data")

    def __init__(
        self,
        rows: IntervalDimension,
        columns: IntervalDimension,
        levels: IntervalDimension,
        data: np.ndarray,
    ):
        # Внутренний конструктор. Используйте IntervalVolumeBuilder
        self._rows = rows
        self._columns = columns
        self._levels = levels
        self._data = data

    def get(self, row_value: float, column_value: float, level_value: float) -> float:
        """
        Значение бина, содержащего (row_value, column_value, level_value).

        Не путать с get_at (по индексам).

        Raises:
            DataIndexError: Если любое из значений вне диапазона
        """
        return float(
            self._data[
                self._rows.index_of(row_value),
                self._columns.index_of(column_value),
                self._levels.index_of(level_value),
            ]
        )

    def get_at(self, row_index: int, column_index: int, level_index: int) -> float:
        """
        Значение бина по индексам.

        Raises:
            DataIndexError: Если любой из индексов вне диапазона
        """
        return float(self._data[_checked(self._data.shape, row_index, column_index, level_index)])

    def column(self, row_value: float, column_value: float) -> XySequence:
        """Immutable view уровней для (row_value, column_value). См. column_at."""
        return self.column_at(self._rows.index_of(row_value), self._columns.index_of(column_value))

    def column_at(self, row_index: int, column_index: int) -> XySequence:
        """
        Immutable view уровней по индексам строки и колонки. См. column.

        x-values — ключи уровней (общий массив), y-values — срез данных.
        """
        row_index = check_element_index(row_index, self._rows.size, "row index")
        column_index = check_element_index(column_index, self._columns.size, "column index")
        return XySequence(self._levels.keys, self._data[row_index, column_index])

    def rows(self) -> np.ndarray:
        return self._rows.keys

    def row_min(self) -> float:
        return self._rows.min

    def row_max(self) -> float:
        return self._rows.max

    def row_delta(self) -> float:
        return self._rows.delta

    def columns(self) -> np.ndarray:
        return self._columns.keys

    def column_min(self) -> float:
        return self._columns.min

    def column_max(self) -> float:
        return self._columns.max

    def column_delta(self) -> float:
        return self._columns.delta

    def levels(self) -> np.ndarray:
        return self._levels.keys

    def level_min(self) -> float:
        return self._levels.min

    def level_max(self) -> float:
        return self._levels.max

    def level_delta(self) -> float:
        return self._levels.delta

    def shape(self) -> tuple[int, int, int]:
        return (self._rows.size, self._columns.size, self._levels.size)

    def collapse(self) -> IntervalTable:
        """Новая IntervalTable по строкам и колонкам: сумма по уровням."""
        return IntervalTableBuilder._with_structure(
            {"row": self._rows, "column": self._columns},
            collapse(self._data),
        ).build()

    def sum(self) -> float:
        return float(self._data.sum())

    def min_index(self) -> tuple[int, int, int]:
        """Индексы (строка, колонка, уровень) бина с минимальным значением."""
        return min_index(self._data)

    def max_index(self) -> tuple[int, int, int]:
        """Индексы (строка, колонка, уровень) бина с максимальным значением."""
        return max_index(self._data)

    def _dimensions(self) -> dict[str, IntervalDimension]:
        return {"row": self._rows, "column": self._columns, "level": self._levels}

    def format(self, fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
        """Текстовое представление: ключи уровней, затем строка на (строку, колонку)."""
        indent = " " * (2 * len(format_key(0.0, fmt)))
        lines = [format_keys(indent, self._levels.key_list(), fmt)]
        for row_key, row in zip(self._rows.key_list(), self._data.tolist()):
            for column_key, values in zip(self._columns.key_list(), row):
                prefix = format_key(row_key, fmt) + format_key(column_key, fmt)
                lines.append(prefix + format_values(values, fmt))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class IntervalVolumeBuilder(IntervalBuilder):
    """
    Одноразовый builder IntervalVolume.

    Строки, колонки и уровни должны быть определены до добавления данных.
    """

    DIMENSIONS = ("row", "column", "level")

    @classmethod
    def copy_of(cls, volume: IntervalVolume) -> IntervalVolumeBuilder:
        """Builder со структурой и копией данных volume."""
        logger.debug("Copying IntervalVolume with shape %s", volume.shape())
        return cls._with_structure(volume._dimensions(), np.array(volume._data, copy=True))

    @classmethod
    def from_model(cls, model: IntervalVolume) -> IntervalVolumeBuilder:
        """Builder со структурой model и нулевыми данными."""
        return cls._with_structure(model._dimensions())

    def rows(self, min_value: float, max_value: float, delta: float) -> IntervalVolumeBuilder:
        """Определить интервалы строк."""
        self._define("row", min_value, max_value, delta)
        return self

    def columns(self, min_value: float, max_value: float, delta: float) -> IntervalVolumeBuilder:
        """Определить интервалы колонок."""
        self._define("column", min_value, max_value, delta)
        return self

    def levels(self, min_value: float, max_value: float, delta: float) -> IntervalVolumeBuilder:
        """Определить интервалы уровней."""
        self._define("level", min_value, max_value, delta)
        return self

    def row_index(self, row_value: float) -> int:
        return self._dimension("row").index_of(row_value)

    def column_index(self, column_value: float) -> int:
        return self._dimension("column").index_of(column_value)

    def level_index(self, level_value: float) -> int:
        return self._dimension("level").index_of(level_value)

    def set(
        self,
        row_value: float,
        column_value: float,
        level_value: float,
        value: float,
    ) -> IntervalVolumeBuilder:
        """Установить значение бина по значениям. См. set_at."""
        return self.set_at(
            self.row_index(row_value),
            self.column_index(column_value),
            self.level_index(level_value),
            value,
        )

    def set_at(
        self,
        row_index: int,
        column_index: int,
        level_index: int,
        value: float,
    ) -> IntervalVolumeBuilder:
        """Установить значение бина по индексам. См. set."""
        data = self._require_data()
        data[_checked(data.shape, row_index, column_index, level_index)] = value
        return self

    def add(
        self,
        row_value: float,
        column_value: float,
        level_value: float,
        value: float,
    ) -> IntervalVolumeBuilder:
        """Прибавить к значению бина по значениям. См. add_at."""
        return self.add_at(
            self.row_index(row_value),
            self.column_index(column_value),
            self.level_index(level_value),
            value,
        )

    def add_at(
        self,
        row_index: int,
        column_index: int,
        level_index: int,
        value: float,
    ) -> IntervalVolumeBuilder:
        """Прибавить к значению бина по индексам. См. add."""
        data = self._require_data()
        data[_checked(data.shape, row_index, column_index, level_index)] += value
        return self

    def add_column(
        self,
        row_value: float,
        column_value: float,
        values: Iterable[float] | AbstractXySequence,
    ) -> IntervalVolumeBuilder:
        """
        Поэлементно прибавить values к уровням (row_value, column_value).

        Raises:
            DataIndexError: Если values выходят за последний уровень
        """
        data = self._require_data()
        target = data[self.row_index(row_value), self.column_index(column_value)]
        self._add_values(target, values, 0, "column")
        return self

    def add_volume(self, volume: IntervalVolume) -> IntervalVolumeBuilder:
        """
        Прибавить значения другого объёма.

        Raises:
            ArgumentError: Если строки, колонки или уровни не совпадают
        """
        self._check_structure(volume._dimensions())
        self._data += volume._data
        return self

    def multiply(self, scale: float) -> IntervalVolumeBuilder:
        """Умножить все значения на scale."""
        data = self._require_data()
        data *= scale
        return self

    def build(self, loader: VolumeLoader | None = None) -> IntervalVolume:
        """
        Новый immutable IntervalVolume.

        Args:
            loader: Опционально, функция loader(row, column, level) → значение
                для каждого бина; перезаписывает значения, заданные ранее

        Raises:
            StateError: Если измерения не определены или builder уже использован
        """
        if loader is not None:
            self._fill(loader)
        dimensions, data = self._finish()
        return IntervalVolume(dimensions["row"], dimensions["column"], dimensions["level"], data)


def _checked(
    shape: tuple[int, ...],
    row_index: int,
    column_index: int,
    level_index: int,
) -> tuple[int, int, int]:
    return (
        check_element_index(row_index, shape[0], "row index"),
        check_element_index(column_index, shape[1], "column index"),
        check_element_index(level_index, shape[2], "level index"),
    )
