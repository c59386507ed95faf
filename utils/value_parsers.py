from typing import List

DURATION_UNITS = [('d', 86400), ('h', 3600), ('m', 60), ('s', 1)]


def split_list(s: str) -> List[str]:
    """
    Splits a multi-extruder setting value. Slicers use either ';' or ',' as the separator.
    The result always has at least two entries so it can fill both extruder slots.
    """
    if ';' in s:
        parts = s.split(';')
    else:
        parts = s.split(',')
    if len(parts) == 1:
        parts.append('')
    return [p.strip() for p in parts]


def split_floats(s: str) -> List[float]:
    return [parse_float(p) for p in split_list(s)]


def parse_float(s: str) -> float:
    try:
        return float(s)
    except ValueError:
        return 0.0


def parse_int(s: str) -> int:
    try:
        return int(s)
    except ValueError:
        return 0


def parse_duration(s: str) -> int:
    """ Converts a duration like "2d 12h 8m 58s" into seconds """
    remaining = ''.join(s.split())
    total = 0
    for unit, seconds in DURATION_UNITS:
        i = remaining.find(unit)
        if i >= 0:
            total += parse_int(remaining[:i]) * seconds
            remaining = remaining[i + 1:]
    return total
