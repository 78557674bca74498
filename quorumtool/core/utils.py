import re
from typing import Optional

_STRTOL_PATTERN = re.compile(r'\s*(?P<sign>[+-]?)'
                             r'(?:0[xX](?P<hexadecimal>[0-9a-fA-F]+)'
                             r'|(?P<octal>0[0-7]*)'
                             r'|(?P<decimal>[1-9][0-9]*))')


def bounded_copy(value: str, size: int) -> str:
    """
    Returns at most ``size - 1`` leading characters of given value,
    leaving room for a terminator like a fixed-size buffer would.
    """
    if size <= 0:
        raise ValueError(f'Buffer size should be positive, but found {size}.')
    return value[:size - 1]


def parse_integer(text: str) -> Optional[int]:
    match = _STRTOL_PATTERN.match(text)
    if match is None:
        return None
    hexadecimal, octal, decimal = match.group('hexadecimal', 'octal',
                                              'decimal')
    result = (int(hexadecimal, 16)
              if hexadecimal is not None
              else (int(octal, 8)
                    if octal is not None
                    else int(decimal)))
    return -result if match.group('sign') == '-' else result
