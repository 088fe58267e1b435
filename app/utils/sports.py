"""Display names for sport categories."""

DIVISION_NAMES = {
    "men": "Men's",
    "women": "Women's",
    "mixed": "Mixed",
}

LEVEL_NAMES = {
    "elementary": "Elementary",
    "high_school": "High School",
    "college": "College",
}


def _enum_value(value) -> str:
    return getattr(value, "value", value)


def format_division(division) -> str:
    value = _enum_value(division)
    return DIVISION_NAMES.get(value, value)


def format_category_name(division, levels) -> str:
    """Combine division and level, e.g. ("men", "college") -> "Men's College"."""
    level = _enum_value(levels)
    return f"{format_division(division)} {LEVEL_NAMES.get(level, level)}"
