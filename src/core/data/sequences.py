"""
Sequences — валидация backing-массивов и структурная совместимость

Все XySequence создаются через validate_arrays, который гарантирует:
1. xs не пустой
2. len(xs) == len(ys)
3. xs строго возрастают (без повторов)

Структурная совместимость двух sequence (или измерений контейнеров)
проверяется через same_keys: сначала identity массива ключей (дёшево,
типичный случай для строк одной таблицы), затем поэлементное сравнение.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import numpy as np

from src.core.data.double_data import are_monotonic, freeze, to_array
from src.core.data.errors import ArgumentError


@runtime_checkable
class KeyedData(Protocol):
    """Данные, упорядоченные по массиву ключей (x-values)."""

    def x_keys(self) -> np.ndarray:
        """Массив ключей; может разделяться между экземплярами."""
        ...


def validate_arrays(
    xs: Iterable[float] | np.ndarray,
    ys: Iterable[float] | np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Копирование и валидация backing-массивов sequence.

    Args:
        xs: x-values
        ys: y-values; None → массив нулей того же размера

    Returns:
        (xs, ys): новые массивы; xs уже read-only, ys writeable

    Raises:
        ArgumentError: Если xs пустой, размеры различаются или xs
            не возрастают строго
    """
    xs_array = to_array(xs)
    ys_array = np.zeros_like(xs_array) if ys is None else to_array(ys)

    if xs_array.size == 0:
        raise ArgumentError("x-values may not be empty")

    if xs_array.size != ys_array.size:
        raise ArgumentError(
            f"x- and y-values are different sizes ({xs_array.size} != {ys_array.size})"
        )

    if not are_monotonic(xs_array, increasing=True, strict=True):
        raise ArgumentError("x-values do not increase monotonically")

    return freeze(xs_array), ys_array


def keys_match(a: np.ndarray, b: np.ndarray) -> bool:
    """Identity массивов, затем поэлементное равенство."""
    return a is b or (a.shape == b.shape and bool(np.array_equal(a, b)))


def same_keys(a: KeyedData, b: KeyedData) -> bool:
    """True если у a и b одинаковые x-keys."""
    return keys_match(a.x_keys(), b.x_keys())


def check_same_keys(a: KeyedData, b: KeyedData) -> None:
    """
    Проверка структурной совместимости двух sequence.

    Raises:
        ArgumentError: Если x-keys различаются
    """
    if not same_keys(a, b):
        raise ArgumentError("Sequence x-values do not match")
