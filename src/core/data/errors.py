"""
Errors — таксономия исключений для sequence и interval data

Все ошибки fail-fast: внутри модели данных нет retry или частичного
успеха. Любое исключение означает дефект входных данных или ошибку
программиста, а не временное состояние.

Каждый класс также наследует ближайшее builtin-исключение, чтобы
вызывающий код мог ловить ValueError / IndexError и т.д.
"""


class DataError(Exception):
    """Базовый класс для всех ошибок модуля data."""

    pass


class ArgumentError(DataError, ValueError):
    """
    Невалидные входные данные конструктора или операции.

    Примеры:
    - пустые x-values, разные размеры xs/ys, x-values не возрастают строго
    - Δ <= 0, max <= min, Δ шире диапазона
    - структурно несовместимые операнды add/multiply
    """

    pass


class DataIndexError(DataError, IndexError):
    """Индекс или значение вне допустимого диапазона sequence или измерения."""

    pass


class StateError(DataError, RuntimeError):
    """
    Операция вызвана в недопустимом состоянии.

    - измерения builder ещё не определены
    - builder уже использован (повторный build())
    - trim() для sequence, где все y == 0
    """

    pass


class UnsupportedOperationError(DataError, TypeError):
    """Попытка изменить данные через immutable view."""

    pass
