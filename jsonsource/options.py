"""Reader options, parsed from a case-insensitive mapping of strings or values."""
from __future__ import annotations

import codecs
import os
from typing import Any, Mapping, Optional

from .parse_modes import ParseMode

DEFAULT_CORRUPT_RECORD_COLUMN = "_corrupt_record"
CORRUPT_RECORD_COLUMN_ENV = "JSONSOURCE_CORRUPT_RECORD_COLUMN"


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    raise ValueError(f"{key} should be a boolean, got {value!r}")


class JSONOptions:
    """Options recognised by the JSON data sources.

    Keys are matched case-insensitively, so ``multiLine`` and ``multiline``
    are the same option. Values may be given as strings (``"true"``,
    ``"0.5"``) or as already-typed Python values.
    """

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None,
                 default_column_name_of_corrupt_record: Optional[str] = None):
        self.parameters = {k.lower(): v for k, v in (parameters or {}).items()}

        self.multi_line = self._bool("multiLine", False)
        self.primitives_as_string = self._bool("primitivesAsString", False)
        self.drop_field_if_all_null = self._bool("dropFieldIfAllNull", False)
        self.allow_non_numeric_numbers = self._bool("allowNonNumericNumbers", True)

        self.sampling_ratio = float(self._get("samplingRatio", 1.0))
        if not 0.0 < self.sampling_ratio <= 1.0:
            raise ValueError(f"samplingRatio ({self.sampling_ratio}) should be in (0, 1]")

        sample_size = self._get("sampleSize", None)
        self.sample_size = int(sample_size) if sample_size is not None else None
        if self.sample_size is not None and self.sample_size <= 0:
            raise ValueError(f"sampleSize ({self.sample_size}) should be greater than 0")
        self.sampling_seed = int(self._get("samplingSeed", 1))

        mode = self._get("mode", ParseMode.PERMISSIVE)
        self.parse_mode = mode if isinstance(mode, ParseMode) else ParseMode.from_string(str(mode))

        default_corrupt = (default_column_name_of_corrupt_record
                           or os.environ.get(CORRUPT_RECORD_COLUMN_ENV)
                           or DEFAULT_CORRUPT_RECORD_COLUMN)
        self.column_name_of_corrupt_record = str(
            self._get("columnNameOfCorruptRecord", default_corrupt))

        encoding = str(self._get("encoding", "utf-8"))
        try:
            self.encoding = codecs.lookup(encoding).name
        except LookupError:
            raise ValueError(f"Unsupported encoding: {encoding}") from None
        if not self.multi_line and self.encoding != "utf-8":
            raise ValueError(
                f"The {encoding} encoding in line-delimited mode is not supported; "
                f"set multiLine to true to read files in that encoding")

    def _get(self, key: str, default: Any) -> Any:
        return self.parameters.get(key.lower(), default)

    def _bool(self, key: str, default: bool) -> bool:
        return _to_bool(key, self._get(key, default))

    def __repr__(self) -> str:
        return (f"JSONOptions(multi_line={self.multi_line}, mode={self.parse_mode.value}, "
                f"sampling_ratio={self.sampling_ratio}, sample_size={self.sample_size}, "
                f"column_name_of_corrupt_record={self.column_name_of_corrupt_record!r})")
