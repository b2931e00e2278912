"""
DoubleData — примитивы над float64 массивами

Модуль содержит функции, на которых построены XySequence и interval
контейнеры:
- Копирование и заморозка (read-only) numpy массивов
- Проверка индексов и ширины бинов (Δ)
- Проверка монотонности и нулевых значений
- Построение "чистых" последовательностей ключей с фиксированной точностью
- Свёртка (collapse) по внутреннему измерению и поиск экстремумов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Функции-проверки никогда не возвращают невалидный результат (raise)
2. to_array всегда возвращает новую копию, входные данные не изменяются
3. freeze необратим для владельца массива
"""

import math
import operator
from collections.abc import Iterable
from typing import Final

import numpy as np

from src.core.data.errors import ArgumentError, DataIndexError

# =============================================================================
# ПАРАМЕТРЫ ТОЧНОСТИ
# =============================================================================

# Количество десятичных знаков для сгенерированных ключей (центров бинов)
KEY_PRECISION: Final[int] = 4

# Допуск при подсчёте числа шагов последовательности
# Компенсирует ошибку float в (hi - lo) / step, например 0.3 / 0.1 = 2.9999...
SEQUENCE_EPS: Final[float] = 1e-9


# =============================================================================
# МАССИВЫ
# =============================================================================


def to_array(values: Iterable[float] | np.ndarray) -> np.ndarray:
    """
    Копия значений в новый одномерный float64 массив.

    Args:
        values: Итерируемые значения или numpy массив

    Returns:
        Новый writeable массив (никогда не разделяет память с входом)

    Raises:
        ArgumentError: Если значения не числовые или не образуют
            одномерный массив
    """
    try:
        if isinstance(values, np.ndarray):
            array = np.array(values, dtype=np.float64, copy=True)
        else:
            array = np.array(list(values), dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ArgumentError(f"Values are not numeric: {e}") from e

    if array.ndim != 1:
        raise ArgumentError(f"Expected 1-dimensional values, got shape {array.shape}")

    return array


def freeze(array: np.ndarray) -> np.ndarray:
    """Пометить массив как read-only и вернуть его же."""
    array.flags.writeable = False
    return array


def read_only_view(array: np.ndarray) -> np.ndarray:
    """
    Read-only view, разделяющий память с исходным массивом.

    Владелец по-прежнему может изменять данные через исходную ссылку.
    """
    view = array.view()
    view.flags.writeable = False
    return view


# =============================================================================
# ПРОВЕРКИ
# =============================================================================


def check_element_index(index: int, size: int, label: str = "index") -> int:
    """
    Проверка индекса элемента в диапазоне [0, size).

    Отрицательные индексы запрещены: numpy "заворачивает" их с конца
    массива, что маскирует ошибки.

    Args:
        index: Проверяемый индекс (int или numpy integer)
        size: Размер массива или измерения
        label: Имя индекса для сообщения об ошибке

    Returns:
        index как int

    Raises:
        TypeError: Если index не целое число (например, float)
        DataIndexError: Если index вне [0, size)
    """
    index = operator.index(index)
    if index < 0 or index >= size:
        raise DataIndexError(f"{label} ({index}) must be in range [0, {size})")
    return index


def check_delta(min_value: float, max_value: float, delta: float) -> float:
    """
    Проверка ширины бина Δ для диапазона [min, max].

    Args:
        min_value: Нижняя граница нижнего бина
        max_value: Верхняя граница верхнего бина
        delta: Ширина бина

    Returns:
        delta

    Raises:
        ArgumentError: Если значения NaN/Inf, Δ <= 0, max <= min
            или Δ > max - min (нет ни одного полного бина)
    """
    for name, value in (("min", min_value), ("max", max_value), ("Δ", delta)):
        if not math.isfinite(value):
            raise ArgumentError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if delta <= 0:
        raise ArgumentError(f"Δ must be positive, got {delta}")

    if max_value <= min_value:
        raise ArgumentError(f"max ({max_value}) must be greater than min ({min_value})")

    span = max_value - min_value
    if delta > span * (1.0 + SEQUENCE_EPS):
        raise ArgumentError(f"Δ ({delta}) is wider than the interval [{min_value}, {max_value}]")

    return delta


def are_monotonic(values: np.ndarray, increasing: bool = True, strict: bool = True) -> bool:
    """
    Проверка монотонности значений.

    Args:
        values: Одномерный массив
        increasing: Проверять возрастание (True) или убывание (False)
        strict: Запретить повторяющиеся значения

    Returns:
        True если массив монотонен (массив из 0 или 1 элемента монотонен)
    """
    diffs = np.diff(values)
    if not increasing:
        diffs = -diffs
    if strict:
        return bool(np.all(diffs > 0))
    return bool(np.all(diffs >= 0))


def are_zero_valued(values: np.ndarray) -> bool:
    """True если все значения точно равны 0.0."""
    return not np.any(values)


def first_non_zero_index(values: np.ndarray) -> int:
    """
    Индекс первого ненулевого значения.

    Returns:
        Индекс или -1 если все значения нулевые
    """
    indices = np.flatnonzero(values)
    return int(indices[0]) if indices.size else -1


def last_non_zero_index(values: np.ndarray) -> int:
    """
    Индекс последнего ненулевого значения.

    Returns:
        Индекс или -1 если все значения нулевые
    """
    indices = np.flatnonzero(values)
    return int(indices[-1]) if indices.size else -1


# =============================================================================
# ПОСЛЕДОВАТЕЛЬНОСТИ
# =============================================================================


def build_clean_sequence(
    lo: float,
    hi: float,
    step: float,
    scale: int = KEY_PRECISION,
) -> np.ndarray:
    """
    Возрастающая последовательность lo, lo + step, ... <= hi.

    Значения вычисляются как lo + i * step (без накопления суммы)
    и округляются до scale десятичных знаков, чтобы ошибка float не
    копилась на большом числе бинов.

    Args:
        lo: Первое значение
        hi: Верхний предел (включительно, с допуском SEQUENCE_EPS)
        step: Шаг (положительный)
        scale: Число десятичных знаков после округления

    Returns:
        Новый writeable массив

    Examples:
        >>> build_clean_sequence(5.5, 7.5, 1.0)
        array([5.5, 6.5, 7.5])
    """
    if step <= 0:
        raise ArgumentError(f"step must be positive, got {step}")
    if hi - lo < -SEQUENCE_EPS * step:
        raise ArgumentError(f"hi ({hi}) must not be less than lo ({lo})")

    size = max(int(math.floor((hi - lo) / step + SEQUENCE_EPS)), 0) + 1
    values = lo + step * np.arange(size, dtype=np.float64)
    return np.round(values, scale)


# =============================================================================
# АГРЕГАЦИЯ
# =============================================================================


def collapse(data: np.ndarray) -> np.ndarray:
    """
    Сумма по внутреннему (последнему) измерению.

    double[r][c] → double[r], double[r][c][l] → double[r][c].
    Результат — новый массив, не связанный с data.
    """
    return data.sum(axis=-1)


def min_index(data: np.ndarray) -> int | tuple[int, ...]:
    """
    Позиция минимального значения (первое вхождение).

    Returns:
        int для одномерных данных, tuple индексов для многомерных
    """
    flat = int(np.argmin(data))
    if data.ndim == 1:
        return flat
    return tuple(int(i) for i in np.unravel_index(flat, data.shape))


def max_index(data: np.ndarray) -> int | tuple[int, ...]:
    """
    Позиция максимального значения (первое вхождение).

    Returns:
        int для одномерных данных, tuple индексов для многомерных
    """
    flat = int(np.argmax(data))
    if data.ndim == 1:
        return flat
    return tuple(int(i) for i in np.unravel_index(flat, data.shape))
