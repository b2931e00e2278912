"""
XySequence — упорядоченные последовательности пар (x, y)

Два sealed-варианта с общим read-only интерфейсом AbstractXySequence:
- XySequence: immutable; y-values read-only, экземпляр hashable
- MutableXySequence: y-values изменяются in-place (set/add/multiply/...)

x-values неизменяемы в обоих вариантах и могут разделяться между
экземплярами по ссылке: все строки IntervalTable используют один массив
ключей колонок, а MutableXySequence.copy_of не копирует x-values.

Операции мутации существуют только на MutableXySequence. XyPoint
дополнительно проверяет capability на уровне точки: set() через точку
immutable sequence всегда падает с UnsupportedOperationError.

MutableXySequence не thread-safe: при конкурентном использовании доступ
должен сериализоваться снаружи.
"""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterable, Iterator, MutableMapping
from typing import ClassVar, TypeVar

import numpy as np

from src.core.data.double_data import (
    are_zero_valued,
    check_element_index,
    first_non_zero_index,
    freeze,
    last_non_zero_index,
    read_only_view,
    to_array,
)
from src.core.data.errors import ArgumentError, StateError, UnsupportedOperationError
from src.core.data.sequences import check_same_keys, validate_arrays

K = TypeVar("K", bound=Hashable)


# =============================================================================
# POINT VIEW
# =============================================================================


class XyPoint:
    """
    Transient view одной пары (x, y) по индексу.

    Не владеет данными: читает backing-массивы sequence.
    """

    __slots__ = ("_sequence", "_index", "_mutable")

    def __init__(self, sequence: AbstractXySequence, index: int, mutable: bool):
        self._sequence = sequence
        self._index = index
        self._mutable = mutable

    def x(self) -> float:
        return self._sequence.x(self._index)

    def y(self) -> float:
        return self._sequence.y(self._index)

    def set(self, y: float) -> None:
        """
        Установить y-value точки.

        Raises:
            UnsupportedOperationError: Если точка принадлежит immutable sequence
        """
        if not self._mutable:
            raise UnsupportedOperationError("XyPoint is read-only")
        self._sequence.set(self._index, y)  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"XyPoint: [{self.x()}, {self.y()}]"


# =============================================================================
# READ-ONLY INTERFACE
# =============================================================================


class AbstractXySequence(ABC):
    """
    Общий read-only интерфейс sequence, возрастающей по x.

    Инварианты (гарантируются validate_arrays при создании):
    - size() > 0
    - len(xs) == len(ys)
    - xs строго возрастают
    """

    __slots__ = ("_xs", "_ys")

    _MUTABLE: ClassVar[bool] = False

    def __init__(self, xs: np.ndarray, ys: np.ndarray):
        # Внутренний конструктор: массивы уже проверены. Используйте create()
        self._xs = xs
        self._ys = ys

    @classmethod
    @abstractmethod
    def _new(cls, xs: np.ndarray, ys: np.ndarray) -> AbstractXySequence:
        """Экземпляр того же варианта из собственных (owned) массивов."""

    def x_keys(self) -> np.ndarray:
        """Массив x-values по ссылке (read-only, для проверки identity)."""
        return self._xs

    def x(self, index: int) -> float:
        """
        x-value по индексу.

        Raises:
            DataIndexError: Если index вне [0, size)
        """
        return float(self._xs[check_element_index(index, self._xs.size)])

    def y(self, index: int) -> float:
        """
        y-value по индексу.

        Raises:
            DataIndexError: Если index вне [0, size)
        """
        return float(self._ys[check_element_index(index, self._ys.size)])

    def x_values(self) -> np.ndarray:
        """Read-only массив x-values."""
        return self._xs

    def y_values(self) -> np.ndarray:
        """Read-only view y-values (без копирования)."""
        return read_only_view(self._ys)

    def size(self) -> int:
        return int(self._xs.size)

    def __len__(self) -> int:
        return self.size()

    def min(self) -> XyPoint:
        """Первая точка sequence."""
        return XyPoint(self, 0, self._MUTABLE)

    def max(self) -> XyPoint:
        """Последняя точка sequence."""
        return XyPoint(self, self.size() - 1, self._MUTABLE)

    def __iter__(self) -> Iterator[XyPoint]:
        for index in range(self.size()):
            yield XyPoint(self, index, self._MUTABLE)

    def is_clear(self) -> bool:
        """True если все y-values точно равны 0.0."""
        return are_zero_valued(self._ys)

    def trim(self) -> AbstractXySequence:
        """
        Новая sequence без ведущих и замыкающих точек с y == 0.

        Нулевые точки в середине сохраняются. Результат того же варианта
        (immutable/mutable), данные копируются.

        Raises:
            StateError: Если sequence полностью "clear" (пустой результат)
        """
        if self.is_clear():
            raise StateError("trim() not permitted for 'clear' sequences")

        start = first_non_zero_index(self._ys)
        stop = last_non_zero_index(self._ys) + 1
        return self._new(freeze(self._xs[start:stop].copy()), self._ys[start:stop].copy())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, AbstractXySequence):
            return NotImplemented
        return bool(
            np.array_equal(self._xs, other._xs) and np.array_equal(self._ys, other._ys)
        )

    def __str__(self) -> str:
        points = "\n".join(repr(point) for point in self)
        return f"{type(self).__name__}:\n{points}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(xs={self._xs.tolist()}, ys={self._ys.tolist()})"


# =============================================================================
# IMMUTABLE VARIANT
# =============================================================================


class XySequence(AbstractXySequence):
    """
    Immutable sequence пар (x, y).

    y-values хранятся как read-only массив или read-only view (например,
    строка IntervalTable без копирования).
    """

    __slots__ = ()

    def __init__(self, xs: np.ndarray, ys: np.ndarray):
        super().__init__(xs, ys if not ys.flags.writeable else read_only_view(ys))

    @classmethod
    def _new(cls, xs: np.ndarray, ys: np.ndarray) -> XySequence:
        return cls(xs, freeze(ys))

    @classmethod
    def create(
        cls,
        xs: Iterable[float] | np.ndarray,
        ys: Iterable[float] | np.ndarray,
    ) -> XySequence:
        """
        Новая immutable sequence из копий переданных значений.

        Raises:
            ArgumentError: Если xs пустой, размеры различаются или xs
                не возрастают строго
        """
        xs_array, ys_array = validate_arrays(xs, ys)
        return cls._new(xs_array, ys_array)

    @classmethod
    def copy_of(cls, sequence: AbstractXySequence) -> XySequence:
        """
        Immutable копия sequence.

        Если sequence уже XySequence, возвращается она же (без копирования).
        x-values никогда не копируются.
        """
        if type(sequence) is XySequence:
            return sequence
        return cls._new(sequence.x_keys(), np.array(sequence.y_values(), copy=True))

    def y_values(self) -> np.ndarray:
        return self._ys

    def __hash__(self) -> int:
        # + 0.0 приводит -0.0 к 0.0, как при сравнении в __eq__
        return hash(((self._xs + 0.0).tobytes(), (self._ys + 0.0).tobytes()))


# =============================================================================
# MUTABLE VARIANT
# =============================================================================


class MutableXySequence(AbstractXySequence):
    """
    Sequence с изменяемыми y-values.

    Все мутаторы возвращают self для chaining:
        MutableXySequence.copy_of(s).add(a).multiply(0.5)

    Не thread-safe.
    """

    __slots__ = ()

    _MUTABLE: ClassVar[bool] = True

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def _new(cls, xs: np.ndarray, ys: np.ndarray) -> MutableXySequence:
        return cls(xs, ys)

    @classmethod
    def create(
        cls,
        xs: Iterable[float] | np.ndarray,
        ys: Iterable[float] | np.ndarray | None = None,
    ) -> MutableXySequence:
        """
        Новая mutable sequence из копий переданных значений.

        Args:
            xs: x-values
            ys: y-values; None → все y равны 0.0

        Raises:
            ArgumentError: Если xs пустой, размеры различаются или xs
                не возрастают строго
        """
        xs_array, ys_array = validate_arrays(xs, ys)
        return cls._new(xs_array, ys_array)

    @classmethod
    def copy_of(cls, sequence: AbstractXySequence, clear: bool = False) -> MutableXySequence:
        """
        Mutable копия sequence.

        x-values разделяются по ссылке, y-values копируются.

        Args:
            sequence: Исходная sequence (любого варианта)
            clear: Заполнить y-values нулями вместо копирования
        """
        xs = sequence.x_keys()
        if clear:
            return cls._new(xs, np.zeros(xs.size, dtype=np.float64))
        return cls._new(xs, np.array(sequence.y_values(), copy=True))

    def set(self, index: int, value: float) -> MutableXySequence:
        """
        Установить y-value по индексу.

        Raises:
            DataIndexError: Если index вне [0, size)
        """
        self._ys[check_element_index(index, self._ys.size)] = value
        return self

    def add(self, term: float | Iterable[float] | AbstractXySequence) -> MutableXySequence:
        """
        Прибавить scalar, массив или sequence к y-values.

        Raises:
            ArgumentError: Если x-values sequence не совпадают или размер
                массива отличается от size()
        """
        self._ys += self._operand(term)
        return self

    def multiply(self, scale: float | AbstractXySequence) -> MutableXySequence:
        """
        Умножить y-values на scalar или поэлементно на sequence.

        Raises:
            ArgumentError: Если x-values sequence не совпадают
        """
        if not isinstance(scale, (numbers.Real, AbstractXySequence)):
            raise ArgumentError(f"Cannot multiply by {type(scale).__name__}")
        self._ys *= self._operand(scale)
        return self

    def complement(self) -> MutableXySequence:
        """y ← 1 - y (для sequence со значениями вероятностей)."""
        np.subtract(1.0, self._ys, out=self._ys)
        return self

    def clear(self) -> MutableXySequence:
        """Обнулить все y-values."""
        self._ys.fill(0.0)
        return self

    def transform(self, function: Callable[[float], float]) -> MutableXySequence:
        """Применить function к каждому y-value in-place."""
        for index, y in enumerate(self._ys.tolist()):
            self._ys[index] = function(y)
        return self

    def _operand(self, term: float | Iterable[float] | AbstractXySequence) -> float | np.ndarray:
        if isinstance(term, AbstractXySequence):
            check_same_keys(self, term)
            return term.y_values()
        if isinstance(term, numbers.Real):
            return float(term)
        values = to_array(term)
        if values.size != self._ys.size:
            raise ArgumentError(
                f"Values size ({values.size}) does not match sequence size ({self._ys.size})"
            )
        return values


# =============================================================================
# FACTORIES
# =============================================================================


def create_sequence(
    xs: Iterable[float] | np.ndarray,
    ys: Iterable[float] | np.ndarray | None,
    mutable: bool,
) -> AbstractXySequence:
    """
    Создание sequence нужного варианта.

    Для immutable варианта ys=None даёт sequence из нулей.
    """
    if mutable:
        return MutableXySequence.create(xs, ys)
    xs_array, ys_array = validate_arrays(xs, ys)
    return XySequence._new(xs_array, ys_array)


def add_to_map(
    key: K,
    mapping: MutableMapping[K, MutableXySequence],
    sequence: AbstractXySequence,
) -> None:
    """
    Прибавить sequence к значению mapping[key].

    Если key отсутствует, в mapping кладётся mutable копия sequence.

    Raises:
        ArgumentError: Если x-values не совпадают с существующей sequence
    """
    if key in mapping:
        mapping[key].add(sequence)
    else:
        mapping[key] = MutableXySequence.copy_of(sequence)
