from typing import Tuple

MIN_SETTING_LINE_LENGTH = 5


def match_setting(line: str, *aliases: str) -> Tuple[str, bool]:
    """
    Checks whether a comment line assigns one of the given keys, e.g. "; nozzle_diameter = 0.4,0.4".
    Aliases are tried in order and matched as exact literal prefixes.
    Returns the trimmed value and whether there was a match.
    """
    if len(line) <= MIN_SETTING_LINE_LENGTH or line[0] != ';':
        return '', False

    for key in aliases:
        if len(line) < len(key) + 4:
            continue
        prefix = f"; {key} ="
        if line.startswith(prefix):
            return line[len(prefix):].strip(), True

    return '', False
