"""
IntervalData — ключи, индексы и жизненный цикл builder'ов interval контейнеров

Interval контейнеры (IntervalArray / IntervalTable / IntervalVolume)
хранят binned данные: ключи строк/колонок/уровней — центры бинов,
а поиск по значению вычисляется от границ бинов (min, Δ). Это убирает
проблемы округления при индексации по явным float значениям.

Содержимое модуля:
- keys / index_of: генерация центров бинов и перевод значения в индекс
- check_data_state: проверка, что измерения builder определены
- IntervalDimension: immutable метаданные одного измерения {min, max, Δ, keys}
- BuilderState + IntervalBuilder: явная state machine
  UNCONFIGURED → CONFIGURED → BUILT, общая для всех builder'ов
- IntervalFormat + format_*: текстовое представление контейнеров

ТОЧНОСТЬ:
Ключи округляются до KEY_PRECISION (4) десятичных знаков. Контейнеры не
предназначены для данных очень высокой точности.
"""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Final

import numpy as np
from pydantic import BaseModel, Field, PrivateAttr, ValidationError, model_validator

from src.core.data.double_data import (
    KEY_PRECISION,
    build_clean_sequence,
    check_delta,
    check_element_index,
    freeze,
    to_array,
)
from src.core.data.errors import ArgumentError, DataIndexError, StateError
from src.core.data.sequences import keys_match
from src.core.data.xy_sequence import AbstractXySequence

logger = logging.getLogger(__name__)


# =============================================================================
# КЛЮЧИ И ИНДЕКСЫ
# =============================================================================


def keys(min_value: float, max_value: float, delta: float) -> np.ndarray:
    """
    Ключи (центры бинов) для interval контейнера.

    Первый центр = min + Δ/2, шаг Δ, последний центр <= max - Δ/2.
    Значения округлены до KEY_PRECISION десятичных знаков.
    Если (max - min) не делится на Δ нацело, верхний неполный бин
    отбрасывается.

    Args:
        min_value: Нижняя граница нижнего бина
        max_value: Верхняя граница верхнего бина
        delta: Ширина бина Δ

    Returns:
        Read-only массив ключей

    Raises:
        ArgumentError: Если Δ <= 0, max <= min или Δ > max - min

    Examples:
        >>> keys(5.0, 8.0, 1.0)
        array([5.5, 6.5, 7.5])
    """
    check_delta(min_value, max_value, delta)
    half_delta = delta / 2.0
    return freeze(
        build_clean_sequence(
            min_value + half_delta,
            max_value - half_delta,
            delta,
            KEY_PRECISION,
        )
    )


def index_of(min_value: float, delta: float, value: float, size: int) -> int:
    """
    Индекс бина, содержащего value.

    index = floor((value - min) / Δ)

    Значение точно на границе бинов попадает в верхний бин.
    Округление вниз (к -inf), поэтому значения ниже min не попадают
    в бин 0.

    Args:
        min_value: Нижняя граница нижнего бина
        delta: Ширина бина Δ
        value: Значение для поиска
        size: Число бинов

    Returns:
        Индекс в [0, size)

    Raises:
        DataIndexError: Если индекс вне [0, size) или value NaN/Inf
    """
    if not math.isfinite(value):
        raise DataIndexError(f"value must be a valid float (not NaN/Inf), got {value}")
    position = (value - min_value) / delta
    if not math.isfinite(position):
        raise DataIndexError(f"index of {value} is out of range [0, {size})")
    return check_element_index(math.floor(position), size, f"index of {value}")


def check_data_state(**dimensions: Any) -> None:
    """
    Проверка, что все переданные измерения определены.

    Измерения проверяются в порядке передачи (row → column → level).

    Example:
        check_data_state(row=rows, column=columns)

    Raises:
        StateError: С именем первого неопределённого измерения
    """
    for label, dimension in dimensions.items():
        if dimension is None:
            raise StateError(f"{label.capitalize()} data have not yet been fully specified")


# =============================================================================
# МЕТАДАННЫЕ ИЗМЕРЕНИЯ
# =============================================================================


class IntervalDimension(BaseModel):
    """
    Метаданные одного измерения interval контейнера.

    Immutable модель (frozen=True). Массив ключей вычисляется один раз
    при создании и разделяется по ссылке всеми контейнерами и builder'ами,
    созданными из одной модели (copy_of / from_model). Поэтому проверка
    структурной совместимости сначала сравнивает identity массивов.
    """

    min: float = Field(..., description="Нижняя граница нижнего бина")
    max: float = Field(..., description="Верхняя граница верхнего бина")
    delta: float = Field(..., description="Ширина бина Δ")

    _keys: np.ndarray = PrivateAttr()

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="after")
    def validate_interval(self) -> "IntervalDimension":
        """Δ > 0, max > min, хотя бы один полный бин."""
        check_delta(self.min, self.max, self.delta)
        return self

    def model_post_init(self, context: Any) -> None:
        self._keys = keys(self.min, self.max, self.delta)

    @classmethod
    def of(cls, min_value: float, max_value: float, delta: float) -> "IntervalDimension":
        """
        Создание измерения с ошибками ArgumentError вместо ValidationError.

        Raises:
            ArgumentError: Если Δ <= 0, max <= min или Δ > max - min
        """
        try:
            return cls(min=min_value, max=max_value, delta=delta)
        except ValidationError as e:
            raise ArgumentError(
                f"Invalid interval [{min_value}, {max_value}] with Δ={delta}: "
                f"{e.errors()[0]['msg']}"
            ) from e

    @property
    def keys(self) -> np.ndarray:
        """Read-only массив центров бинов."""
        return self._keys

    @property
    def size(self) -> int:
        return int(self._keys.size)

    def key_list(self) -> list[float]:
        return self._keys.tolist()

    def index_of(self, value: float) -> int:
        """
        Индекс бина, содержащего value.

        Raises:
            DataIndexError: Если value вне [min, min + size * Δ)
        """
        return index_of(self.min, self.delta, value, self.size)

    def same_structure(self, other: "IntervalDimension") -> bool:
        """Identity массива ключей, затем поэлементное сравнение."""
        return self is other or keys_match(self._keys, other._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalDimension):
            return NotImplemented
        return (self.min, self.max, self.delta) == (other.min, other.max, other.delta)

    def __hash__(self) -> int:
        return hash((self.min, self.max, self.delta))


# =============================================================================
# BUILDER STATE MACHINE
# =============================================================================


class BuilderState(str, Enum):
    """
    Состояние builder'а.

    UNCONFIGURED → (все измерения определены) → CONFIGURED → build() → BUILT
    """

    UNCONFIGURED = "UNCONFIGURED"
    CONFIGURED = "CONFIGURED"
    BUILT = "BUILT"


class IntervalBuilder:
    """
    Базовый одноразовый builder interval контейнера.

    Подклассы задают DIMENSIONS (порядок: row, column, level). Backing
    массив выделяется, когда определено последнее измерение.

    Правила state machine (проверяются на каждом входе):
    - измерения определяются только в UNCONFIGURED
    - операции с данными требуют CONFIGURED
    - build() разрешён ровно один раз; после него builder разыменовывает
      данные и измерения, чтобы "забытая" ссылка на builder не могла
      изменить опубликованный контейнер

    Не thread-safe.
    """

    DIMENSIONS: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        self._state = BuilderState.UNCONFIGURED
        self._dimensions: dict[str, IntervalDimension | None] = dict.fromkeys(self.DIMENSIONS)
        self._data: np.ndarray | None = None

    @property
    def state(self) -> BuilderState:
        return self._state

    @classmethod
    def _with_structure(
        cls,
        dimensions: dict[str, IntervalDimension],
        data: np.ndarray | None = None,
    ) -> Any:
        """
        Builder с готовыми измерениями (по ссылке) и, опционально, данными.

        data должен принадлежать новому builder'у (копия или новый массив).
        """
        builder = cls()
        builder._dimensions.update(dimensions)
        builder._data = data
        builder._init()
        return builder

    def _define(self, label: str, min_value: float, max_value: float, delta: float) -> None:
        self._check_not_built()
        if self._state is BuilderState.CONFIGURED:
            raise StateError("Builder has already been initialized")
        self._dimensions[label] = IntervalDimension.of(min_value, max_value, delta)
        self._init()

    def _init(self) -> None:
        if any(dimension is None for dimension in self._dimensions.values()):
            return
        if self._data is None:
            shape = tuple(dimension.size for dimension in self._dimensions.values())
            self._data = np.zeros(shape, dtype=np.float64)
        self._state = BuilderState.CONFIGURED

    def _check_not_built(self) -> None:
        if self._state is BuilderState.BUILT:
            raise StateError("This builder has already been used")

    def _dimension(self, label: str) -> IntervalDimension:
        self._check_not_built()
        dimension = self._dimensions[label]
        check_data_state(**{label: dimension})
        return dimension

    def _require_data(self) -> np.ndarray:
        """Backing массив; только в состоянии CONFIGURED."""
        self._check_not_built()
        check_data_state(**self._dimensions)
        return self._data

    def _check_structure(self, dimensions: dict[str, IntervalDimension]) -> None:
        """
        Проверка совпадения измерений с измерениями другого контейнера.

        Дёшево, если builder и контейнер созданы из одной модели.

        Raises:
            ArgumentError: Если ключи хотя бы одного измерения различаются
        """
        self._require_data()
        for label, dimension in self._dimensions.items():
            if not dimension.same_structure(dimensions[label]):
                raise ArgumentError(f"{label.capitalize()} keys do not match")

    @staticmethod
    def _add_values(
        target: np.ndarray,
        values: Iterable[float] | np.ndarray | AbstractXySequence,
        start: int,
        label: str,
    ) -> None:
        """
        Поэлементно прибавить values к target, начиная с позиции start.

        Raises:
            DataIndexError: Если values выходят за конец target
        """
        if isinstance(values, AbstractXySequence):
            array = values.y_values()
        else:
            array = to_array(values)
        if start + array.size > target.size:
            raise DataIndexError(f"Supplied values overrun end of {label}")
        target[start : start + array.size] += array

    def _fill(self, loader: Callable[..., float]) -> None:
        """Перезаписать все бины значениями loader(*центры бинов)."""
        if loader is None:
            raise ArgumentError("loader may not be None")
        data = self._require_data()
        key_lists = [dimension.key_list() for dimension in self._dimensions.values()]
        for index in np.ndindex(data.shape):
            data[index] = loader(*(keys[i] for keys, i in zip(key_lists, index)))

    def _finish(self) -> tuple[dict[str, IntervalDimension], np.ndarray]:
        """
        Перевод в BUILT: заморозка данных и разыменование builder'а.

        Данные не копируются: контейнер становится единственным владельцем.
        """
        data = freeze(self._require_data())
        dimensions = dict(self._dimensions)
        self._data = None
        self._dimensions = dict.fromkeys(self.DIMENSIONS)
        self._state = BuilderState.BUILT
        logger.debug("Built %s with shape %s", type(self).__name__, data.shape)
        return dimensions, data


# =============================================================================
# ТЕКСТОВОЕ ПРЕДСТАВЛЕНИЕ
# =============================================================================


@dataclass(frozen=True)
class IntervalFormat:
    """
    Форматы текстового представления interval контейнеров.

    Нулевые значения данных выводятся как "0.0" с выравниванием
    по ширине data_format.
    """

    key_format: str = "%8.2f"
    key_with_brackets: str = "[%7.2f] "
    data_format: str = "%7.2e"
    delimiter: str = ", "
    zero_value: str = "     0.0"


DEFAULT_FORMAT: Final[IntervalFormat] = IntervalFormat()


def format_keys(prefix: str, values: Iterable[float], fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
    """Строка ключей: prefix + [k1, k2, ...]."""
    body = fmt.delimiter.join(fmt.key_format % value for value in values)
    return f"{prefix}[{body}]"


def format_key(value: float, fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
    """Ключ строки/колонки в квадратных скобках."""
    return fmt.key_with_brackets % value


def format_values(values: Iterable[float], fmt: IntervalFormat = DEFAULT_FORMAT) -> str:
    """Строка данных: [v1, v2, ...]."""
    body = fmt.delimiter.join(
        fmt.zero_value if value == 0.0 else fmt.data_format % value for value in values
    )
    return f"[{body}]"
