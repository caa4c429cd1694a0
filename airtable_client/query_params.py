"""Validation and encoding of listing parameters.

Parameters use the API's own camelCase names; snake_case spellings are
accepted and normalized. Anything unrecognized is rejected before a request
is ever built.
"""

from typing import Any, Callable

from .errors import InvalidParametersError

MAX_PAGE_SIZE = 100


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return "must be a string"
    return None


def _check_str_list(value: Any) -> str | None:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        return "must be a list of strings"
    return None


def _check_max_records(value: Any) -> str | None:
    if not _is_int(value) or value < 1:
        return "must be a positive integer"
    return None


def _check_page_size(value: Any) -> str | None:
    if not _is_int(value) or not 1 <= value <= MAX_PAGE_SIZE:
        return f"must be an integer between 1 and {MAX_PAGE_SIZE}"
    return None


def _check_sort(value: Any) -> str | None:
    if not isinstance(value, (list, tuple)):
        return "must be a list of {field, direction} objects"
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            return f"item {i} must be an object with a 'field' key"
        extra = set(item) - {"field", "direction"}
        if extra:
            return f"item {i} has unknown keys: {', '.join(sorted(extra))}"
        if not isinstance(item.get("field"), str):
            return f"item {i} must have a string 'field'"
        if item.get("direction", "asc") not in ("asc", "desc"):
            return f"item {i} direction must be 'asc' or 'desc'"
    return None


def _check_cell_format(value: Any) -> str | None:
    if value not in ("json", "string"):
        return "must be 'json' or 'string'"
    return None


def _check_bool(value: Any) -> str | None:
    if not isinstance(value, bool):
        return "must be a boolean"
    return None


VALIDATORS: dict[str, Callable[[Any], str | None]] = {
    "fields": _check_str_list,
    "filterByFormula": _check_str,
    "maxRecords": _check_max_records,
    "pageSize": _check_page_size,
    "sort": _check_sort,
    "view": _check_str,
    "cellFormat": _check_cell_format,
    "timeZone": _check_str,
    "userLocale": _check_str,
    "returnFieldsByFieldId": _check_bool,
}

ALIASES = {
    "filter_by_formula": "filterByFormula",
    "max_records": "maxRecords",
    "page_size": "pageSize",
    "cell_format": "cellFormat",
    "time_zone": "timeZone",
    "user_locale": "userLocale",
    "return_fields_by_field_id": "returnFieldsByFieldId",
}


def validate_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Return the normalized parameters or raise listing every problem."""
    if params is None:
        return {}
    if not isinstance(params, dict):
        raise InvalidParametersError("the parameter for `select` should be a dict or None")

    valid: dict[str, Any] = {}
    errors: list[str] = []
    for key, value in params.items():
        name = ALIASES.get(key, key)
        check = VALIDATORS.get(name)
        if check is None:
            errors.append(f"`{key}` is not a recognized parameter")
            continue
        if name in valid:
            errors.append(f"`{name}` was given more than once")
            continue
        problem = check(value)
        if problem:
            errors.append(f"`{name}` {problem}")
            continue
        valid[name] = value

    if errors:
        lines = "\n".join(f"  * {e}" for e in errors)
        raise InvalidParametersError(f"invalid parameters for `select`:\n{lines}")
    return valid


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query_params(params: dict[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten lists and dicts into the bracket notation the API expects.

    ``{"fields": ["a", "b"]}`` becomes ``fields[]=a&fields[]=b`` and
    ``{"sort": [{"field": "a"}]}`` becomes ``sort[0][field]=a``. ``None``
    values are dropped.
    """
    out: list[tuple[str, str]] = []

    def _add(prefix: str, value: Any):
        if value is None:
            return
        if isinstance(value, dict):
            for k, v in value.items():
                _add(f"{prefix}[{k}]", v)
        elif isinstance(value, (list, tuple)):
            if all(not isinstance(v, (dict, list, tuple)) for v in value):
                for v in value:
                    _add(f"{prefix}[]", v)
            else:
                for i, v in enumerate(value):
                    _add(f"{prefix}[{i}]", v)
        else:
            out.append((prefix, _scalar(value)))

    for key, value in (params or {}).items():
        _add(key, value)
    return out
