"""
IntervalArray — одномерный контейнер binned данных

Immutable массив float значений, упорядоченный по возрастающим,
равномерно распределённым ключам (центрам бинов). Поиск по значению
вычисляется от нижней границы и ширины бинов.

Создаётся только через IntervalArrayBuilder:

    array = (
        IntervalArrayBuilder()
        .rows(5.0, 8.0, 1.0)
        .add(6.2, 1.0)
        .build()
    )
    array.get(6.0)     # по значению → 1.0
    array.get_at(1)    # по индексу → 1.0
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import numpy as np

from src.core.data.double_data import check_element_index, max_index, min_index
from src.core.data.interval_data import (
    DEFAULT_FORMAT,
    IntervalBuilder,
    IntervalDimension,
    IntervalFormat,
    format_keys,
    format_values,
)
from src.core.data.xy_sequence import AbstractXySequence, XySequence

logger = logging.getLogger(__name__)

ArrayLoader = Callable[[float], float]


class IntervalArray:
    """
    Immutable одномерный контейнер binned данных.

    Backing массив read-only и принадлежит только этому контейнеру.
    Безопасен для конкурентного чтения.
    """

    __slots__ = ("_rows", "_data")

    def __init__(self, rows: IntervalDimension, data: np.ndarray):
        # Внутренний конструктор. Используйте IntervalArrayBuilder
        self._rows = rows
        self._data = data

    def get(self, row_value: float) -> float:
        """
        Значение бина, содержащего row_value.

        Не путать с get_at (по индексу).

        Raises:
            DataIndexError: Если row_value вне диапазона строк
        """
        return float(self._data[self._rows.index_of(row_value)])

    def get_at(self, row_index: int) -> float:
        """
        Значение бина по индексу.

        Не путать с get (по значению).

        Raises:
            DataIndexError: Если row_index вне [0, size)
        """
        return float(self._data[check_element_index(row_index, self._data.size, "row index")])

    def values(self) -> XySequence:
        """Immutable sequence пар (центр бина, значение) без копирования."""
        return XySequence(self._rows.keys, self._data)

    def rows(self) -> np.ndarray:
        """Read-only массив ключей строк (центров бинов)."""
        return self._rows.keys

    def row_min(self) -> float:
        """Нижняя граница нижнего бина."""
        return self._rows.min

    def row_max(self) -> float:
        """Верхняя граница верхнего бина (как задано при создании)."""
        return self._rows.max

    def row_delta(self) -> float:
        return self._rows.delta

    def size(self) -> int:
        return int(self._data.size)

    def __len__(self) -> int:
        return self.size()

    def sum(self) -> float:
        return float(self._data.sum())

    def min_index(self) -> int:
        """Индекс бина с минимальным значением (первое вхождение)."""
        return min_index(self._data)

    def max_index(self) -> int:
        """Индекс бина с максимальным значением (первое вхождение)."""
        return max_index(self._data)

    def _dimensions(self) -> dict[str, IntervalDimension]:
        return {"row": self._rows}

    def format(self, fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
        """Текстовое представление: строка ключей, затем строка данных."""
        return "\n".join(
            [
                format_keys("", self._rows.key_list(), fmt),
                format_values(self._data.tolist(), fmt),
            ]
        )

    def __str__(self) -> str:
        return self.format()


class IntervalArrayBuilder(IntervalBuilder):
    """
    Одноразовый builder IntervalArray.

    Строки должны быть определены до добавления данных. Если max - min
    не делится на Δ нацело, max может не совпадать с верхней границей
    верхнего бина.
    """

    DIMENSIONS = ("row",)

    @classmethod
    def copy_of(cls, array: IntervalArray) -> IntervalArrayBuilder:
        """Builder со структурой и копией данных array."""
        logger.debug("Copying IntervalArray of size %d", array.size())
        return cls._with_structure(array._dimensions(), np.array(array._data, copy=True))

    @classmethod
    def from_model(cls, model: IntervalArray) -> IntervalArrayBuilder:
        """Builder со структурой model и нулевыми данными."""
        return cls._with_structure(model._dimensions())

    def rows(self, min_value: float, max_value: float, delta: float) -> IntervalArrayBuilder:
        """
        Определить интервалы строк.

        Args:
            min_value: Нижняя граница нижнего бина
            max_value: Верхняя граница верхнего бина
            delta: Ширина бина Δ

        Raises:
            ArgumentError: Если Δ <= 0, max <= min или Δ > max - min
            StateError: Если строки уже определены или builder использован
        """
        self._define("row", min_value, max_value, delta)
        return self

    def row_index(self, row_value: float) -> int:
        """Индекс строки, содержащей row_value."""
        return self._dimension("row").index_of(row_value)

    def set(self, row_value: float, value: float) -> IntervalArrayBuilder:
        """Установить значение бина по значению строки. См. set_at."""
        return self.set_at(self.row_index(row_value), value)

    def set_at(self, row_index: int, value: float) -> IntervalArrayBuilder:
        """Установить значение бина по индексу строки. См. set."""
        data = self._require_data()
        data[check_element_index(row_index, data.size, "row index")] = value
        return self

    def add(self, row_value: float, value: float) -> IntervalArrayBuilder:
        """Прибавить к значению бина по значению строки. См. add_at."""
        return self.add_at(self.row_index(row_value), value)

    def add_at(self, row_index: int, value: float) -> IntervalArrayBuilder:
        """Прибавить к значению бина по индексу строки. См. add."""
        data = self._require_data()
        data[check_element_index(row_index, data.size, "row index")] += value
        return self

    def add_all(self, values: Iterable[float] | AbstractXySequence) -> IntervalArrayBuilder:
        """
        Поэлементно прибавить values, начиная с первого бина.

        Raises:
            DataIndexError: Если values длиннее массива
        """
        self._add_values(self._require_data(), values, 0, "array")
        return self

    def add_array(self, array: IntervalArray) -> IntervalArrayBuilder:
        """
        Прибавить значения другого IntervalArray.

        Эффективно, если builder и array созданы из одной модели.

        Raises:
            ArgumentError: Если строки array не совпадают со строками builder
        """
        self._check_structure(array._dimensions())
        self._data += array._data
        return self

    def multiply(self, scale: float) -> IntervalArrayBuilder:
        """Умножить все значения на scale."""
        data = self._require_data()
        data *= scale
        return self

    def build(self, loader: ArrayLoader | None = None) -> IntervalArray:
        """
        Новый immutable IntervalArray.

        Args:
            loader: Опционально, функция loader(row) → значение для каждого
                центра бина; перезаписывает все значения, заданные ранее
                через set/add

        Raises:
            StateError: Если строки не определены или builder уже использован
        """
        if loader is not None:
            self._fill(loader)
        dimensions, data = self._finish()
        return IntervalArray(dimensions["row"], data)
