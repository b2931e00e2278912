"""
IntervalTable — двумерный контейнер binned данных

Immutable таблица float значений, упорядоченная по возрастающим,
равномерно распределённым ключам строк и колонок. Ключи — центры бинов,
индексация вычисляется от границ бинов, что убирает ошибки округления
при поиске по явным float значениям.

Backing массив — float64[rows, columns]: строка — 1-е измерение,
колонка — 2-е. row(...) возвращает XySequence, x-values которой — общий
массив ключей колонок (по ссылке), а y-values — read-only срез строки
(без копирования).

Ключи ограничены точностью 4 десятичных знака.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import numpy as np

from src.core.data.double_data import check_element_index, collapse, max_index, min_index
from src.core.data.interval_array import IntervalArray, IntervalArrayBuilder
from src.core.data.interval_data import (
    DEFAULT_FORMAT,
    IntervalBuilder,
    IntervalDimension,
    IntervalFormat,
    format_key,
    format_keys,
    format_values,
)
from src.core.data.xy_sequence import AbstractXySequence, XySequence

logger = logging.getLogger(__name__)

TableLoader = Callable[[float, float], float]


class IntervalTable:
    """
    Immutable двумерный контейнер binned данных.

    Backing массив read-only и принадлежит только этой таблице.
    Безопасен для конкурентного чтения.
    """

    __slots__ = ("_rows", "_columns", "_data")

    def __init__(self, rows: IntervalDimension, columns: IntervalDimension, data: np.ndarray):
        # Внутренний конструктор. Используйте IntervalTableBuilder
        self._rows = rows
        self._columns = columns
        self._data = data

    def get(self, row_value: float, column_value: float) -> float:
        """
        Значение бина, содержащего (row_value, column_value).

        Не путать с get_at (по индексам).

        Raises:
            DataIndexError: Если любое из значений вне диапазона
        """
        return float(
            self._data[self._rows.index_of(row_value), self._columns.index_of(column_value)]
        )

    def get_at(self, row_index: int, column_index: int) -> float:
        """
        Значение бина по индексам строки и колонки.

        Не путать с get (по значениям).

        Raises:
            DataIndexError: Если любой из индексов вне диапазона
        """
        return float(self._data[self._check_row(row_index), self._check_column(column_index)])

    def row(self, row_value: float) -> XySequence:
        """Immutable view строки, содержащей row_value. См. row_at."""
        return self.row_at(self._rows.index_of(row_value))

    def row_at(self, row_index: int) -> XySequence:
        """
        Immutable view строки по индексу. См. row.

        x-values — ключи колонок (общий массив), y-values — срез данных.
        """
        return XySequence(self._columns.keys, self._data[self._check_row(row_index)])

    def rows(self) -> np.ndarray:
        """Read-only массив ключей строк (центров бинов)."""
        return self._rows.keys

    def row_min(self) -> float:
        return self._rows.min

    def row_max(self) -> float:
        return self._rows.max

    def row_delta(self) -> float:
        return self._rows.delta

    def columns(self) -> np.ndarray:
        """Read-only массив ключей колонок (центров бинов)."""
        return self._columns.keys

    def column_min(self) -> float:
        return self._columns.min

    def column_max(self) -> float:
        return self._columns.max

    def column_delta(self) -> float:
        return self._columns.delta

    def shape(self) -> tuple[int, int]:
        return (self._rows.size, self._columns.size)

    def collapse(self) -> IntervalArray:
        """Новый IntervalArray по строкам этой таблицы: сумма по колонкам."""
        return IntervalArrayBuilder._with_structure(
            {"row": self._rows},
            collapse(self._data),
        ).build()

    def sum(self) -> float:
        return float(self._data.sum())

    def min_index(self) -> tuple[int, int]:
        """Индексы (строка, колонка) бина с минимальным значением."""
        return min_index(self._data)

    def max_index(self) -> tuple[int, int]:
        """Индексы (строка, колонка) бина с максимальным значением."""
        return max_index(self._data)

    def _check_row(self, row_index: int) -> int:
        return check_element_index(row_index, self._rows.size, "row index")

    def _check_column(self, column_index: int) -> int:
        return check_element_index(column_index, self._columns.size, "column index")

    def _dimensions(self) -> dict[str, IntervalDimension]:
        return {"row": self._rows, "column": self._columns}

    def format(self, fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
        """
        Текстовое представление: ключи колонок, затем по строке данных
        на каждую строку таблицы с её ключом в квадратных скобках.
        """
        indent = " " * len(format_key(0.0, fmt))
        lines = [format_keys(indent, self._columns.key_list(), fmt)]
        for row_key, values in zip(self._rows.key_list(), self._data.tolist()):
            lines.append(format_key(row_key, fmt) + format_values(values, fmt))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class IntervalTableBuilder(IntervalBuilder):
    """
    Одноразовый builder IntervalTable.

    Строки и колонки должны быть определены до добавления данных.
    Если max - min не делится на Δ нацело, max может не совпадать
    с верхней границей верхнего бина.
    """

    DIMENSIONS = ("row", "column")

    @classmethod
    def copy_of(cls, table: IntervalTable) -> IntervalTableBuilder:
        """Builder со структурой и копией данных table."""
        logger.debug("Copying IntervalTable with shape %s", table.shape())
        return cls._with_structure(table._dimensions(), np.array(table._data, copy=True))

    @classmethod
    def from_model(cls, model: IntervalTable) -> IntervalTableBuilder:
        """Builder со структурой model и нулевыми данными."""
        return cls._with_structure(model._dimensions())

    def rows(self, min_value: float, max_value: float, delta: float) -> IntervalTableBuilder:
        """
        Определить интервалы строк.

        Raises:
            ArgumentError: Если Δ <= 0, max <= min или Δ > max - min
            StateError: Если builder уже сконфигурирован или использован
        """
        self._define("row", min_value, max_value, delta)
        return self

    def columns(self, min_value: float, max_value: float, delta: float) -> IntervalTableBuilder:
        """
        Определить интервалы колонок.

        Raises:
            ArgumentError: Если Δ <= 0, max <= min или Δ > max - min
            StateError: Если builder уже сконфигурирован или использован
        """
        self._define("column", min_value, max_value, delta)
        return self

    def row_index(self, row_value: float) -> int:
        """Индекс строки, содержащей row_value."""
        return self._dimension("row").index_of(row_value)

    def column_index(self, column_value: float) -> int:
        """Индекс колонки, содержащей column_value."""
        return self._dimension("column").index_of(column_value)

    def set(self, row_value: float, column_value: float, value: float) -> IntervalTableBuilder:
        """Установить значение бина по значениям. См. set_at."""
        return self.set_at(self.row_index(row_value), self.column_index(column_value), value)

    def set_at(self, row_index: int, column_index: int, value: float) -> IntervalTableBuilder:
        """Установить значение бина по индексам. См. set."""
        data = self._require_data()
        data[self._checked(row_index, column_index)] = value
        return self

    def add(self, row_value: float, column_value: float, value: float) -> IntervalTableBuilder:
        """Прибавить к значению бина по значениям. См. add_at."""
        return self.add_at(self.row_index(row_value), self.column_index(column_value), value)

    def add_at(self, row_index: int, column_index: int, value: float) -> IntervalTableBuilder:
        """Прибавить к значению бина по индексам. См. add."""
        data = self._require_data()
        data[self._checked(row_index, column_index)] += value
        return self

    def add_row(
        self,
        row_value: float,
        values: Iterable[float] | AbstractXySequence,
    ) -> IntervalTableBuilder:
        """
        Поэлементно прибавить values к строке, начиная с первой колонки.

        Для XySequence используются её y-values.

        Raises:
            DataIndexError: Если values выходят за конец строки
        """
        data = self._require_data()
        self._add_values(data[self.row_index(row_value)], values, 0, "row")
        return self

    def add_row_from(
        self,
        row_value: float,
        column_value: float,
        values: Iterable[float] | AbstractXySequence,
    ) -> IntervalTableBuilder:
        """
        Поэлементно прибавить values к строке, начиная с колонки column_value.

        Значения прибавляются к бинам, как в add_row; для перезаписи
        используйте set/set_at.

        Raises:
            DataIndexError: Если values выходят за конец строки
        """
        data = self._require_data()
        # Сумма, не присваивание: существующие значения бинов сохраняются
        start = self.column_index(column_value)
        self._add_values(data[self.row_index(row_value)], values, start, "row")
        return self

    def add_table(self, table: IntervalTable) -> IntervalTableBuilder:
        """
        Прибавить значения другой таблицы.

        Эффективно, если builder и table созданы из одной модели
        (см. from_model).

        Raises:
            ArgumentError: Если строки или колонки table не совпадают
        """
        self._check_structure(table._dimensions())
        self._data += table._data
        return self

    def multiply(self, scale: float) -> IntervalTableBuilder:
        """Умножить все значения на scale."""
        data = self._require_data()
        data *= scale
        return self

    def build(self, loader: TableLoader | None = None) -> IntervalTable:
        """
        Новая immutable IntervalTable.

        Args:
            loader: Опционально, функция loader(row, column) → значение для
                каждой пары центров бинов; перезаписывает все значения,
                заданные ранее через set/add

        Raises:
            StateError: Если измерения не определены или builder уже использован
        """
        if loader is not None:
            self._fill(loader)
        dimensions, data = self._finish()
        return IntervalTable(dimensions["row"], dimensions["column"], data)

    def _checked(self, row_index: int, column_index: int) -> tuple[int, int]:
        shape = self._data.shape
        return (
            check_element_index(row_index, shape[0], "row index"),
            check_element_index(column_index, shape[1], "column index"),
        )
