"""Parsing of repeatable `key=value` CLI options.

Several commands accept pairs such as `--replace host_(engine)=PRODHOST` or
`--where name=CUSTOMER`. This module centralizes their validation so every
command reports malformed input the same way.
"""

from typing import Iterable

from igcrest.core.assets import Condition


def parse_pairs(values: Iterable[str], *, option_name: str) -> dict[str, str]:
    """
    Turn `key=value` strings into a mapping.

    Args:
        values: Raw option values.
        option_name: Option name used in error messages.

    Returns:
        A dict of key to value (later duplicates win).

    Raises:
        ValueError: If an entry does not follow the `key=value` format or
                    has an empty key.
    """
    pairs: dict[str, str] = {}
    for raw in values:
        if "=" not in raw:
            raise ValueError(f"Invalid {option_name}: '{raw}' (expected key=value)")
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid {option_name}: '{raw}' (empty key)")
        pairs[key] = value
    return pairs


def build_conditions(values: Iterable[str]) -> list[Condition]:
    """Build equality conditions from `property=value` strings."""
    return [
        Condition(property=prop, value=value)
        for prop, value in parse_pairs(values, option_name="--where").items()
    ]
