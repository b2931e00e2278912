"""
Core data modules для расчётов сейсмической опасности

Числовая модель данных, индексированная по интервалам:
- XySequence / MutableXySequence: упорядоченные по x последовательности пар
- IntervalArray / IntervalTable / IntervalVolume: 1-, 2- и 3-мерные
  binned контейнеры с одноразовыми builder'ами
"""

# Errors
from src.core.data.errors import (
    ArgumentError,
    DataError,
    DataIndexError,
    StateError,
    UnsupportedOperationError,
)

# Double Data
from src.core.data.double_data import (
    KEY_PRECISION,
    SEQUENCE_EPS,
    are_monotonic,
    are_zero_valued,
    build_clean_sequence,
    check_delta,
    check_element_index,
    collapse,
    first_non_zero_index,
    freeze,
    last_non_zero_index,
    max_index,
    min_index,
    read_only_view,
    to_array,
)

# Sequences
from src.core.data.sequences import (
    KeyedData,
    check_same_keys,
    keys_match,
    same_keys,
    validate_arrays,
)
from src.core.data.xy_sequence import (
    AbstractXySequence,
    MutableXySequence,
    XyPoint,
    XySequence,
    add_to_map,
    create_sequence,
)

# Interval Data
from src.core.data.interval_data import (
    DEFAULT_FORMAT,
    BuilderState,
    IntervalBuilder,
    IntervalDimension,
    IntervalFormat,
    check_data_state,
    format_key,
    format_keys,
    format_values,
    index_of,
    keys,
)
from src.core.data.interval_array import ArrayLoader, IntervalArray, IntervalArrayBuilder
from src.core.data.interval_table import IntervalTable, IntervalTableBuilder, TableLoader
from src.core.data.interval_volume import IntervalVolume, IntervalVolumeBuilder, VolumeLoader

__all__ = [
    # Errors
    "DataError",
    "ArgumentError",
    "DataIndexError",
    "StateError",
    "UnsupportedOperationError",
    # Double Data — Constants
    "KEY_PRECISION",
    "SEQUENCE_EPS",
    # Double Data — Arrays
    "to_array",
    "freeze",
    "read_only_view",
    # Double Data — Validation
    "check_element_index",
    "check_delta",
    "are_monotonic",
    "are_zero_valued",
    "first_non_zero_index",
    "last_non_zero_index",
    # Double Data — Sequences and aggregation
    "build_clean_sequence",
    "collapse",
    "min_index",
    "max_index",
    # Sequences
    "KeyedData",
    "validate_arrays",
    "keys_match",
    "same_keys",
    "check_same_keys",
    "XyPoint",
    "AbstractXySequence",
    "XySequence",
    "MutableXySequence",
    "create_sequence",
    "add_to_map",
    # Interval Data — Keys and indices
    "keys",
    "index_of",
    "check_data_state",
    # Interval Data — Types
    "IntervalDimension",
    "BuilderState",
    "IntervalBuilder",
    "IntervalFormat",
    "DEFAULT_FORMAT",
    "format_key",
    "format_keys",
    "format_values",
    # Containers
    "IntervalArray",
    "IntervalArrayBuilder",
    "ArrayLoader",
    "IntervalTable",
    "IntervalTableBuilder",
    "TableLoader",
    "IntervalVolume",
    "IntervalVolumeBuilder",
    "VolumeLoader",
]
