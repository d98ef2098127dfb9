"""
Parse point files into Points.

Format is free-form whitespace-delimited tokens:

    <count> <dim>
    <name> <x1> ... <x_dim>     (repeated count times)

Line breaks carry no meaning; only token order does.
"""

from pathlib import Path

from .clustering.models import Point


class InputFormatError(ValueError):
    """Raised when a point file does not follow the expected format."""


def _parse_int(token: str, what: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise InputFormatError(f"Expected integer {what}, got {token!r}") from None
    if value < 0:
        raise InputFormatError(f"{what} must be nonnegative, got {value}")
    return value


def parse_points(content: str) -> list[Point]:
    """
    Parse point file content.

    Args:
        content: Full text of a point file

    Returns:
        Points in file order

    Raises:
        InputFormatError: On a bad header, missing or non-numeric values,
            or tokens left over after the declared points
    """
    tokens = content.split()
    if len(tokens) < 2:
        raise InputFormatError("Missing header: expected '<count> <dim>'")

    count = _parse_int(tokens[0], "point count")
    dim = _parse_int(tokens[1], "dimension")

    expected = 2 + count * (dim + 1)
    if len(tokens) < expected:
        raise InputFormatError(
            f"Truncated input: header declares {count} points of dimension {dim} "
            f"({expected - 2} tokens), found {len(tokens) - 2}"
        )
    if len(tokens) > expected:
        raise InputFormatError(
            f"Unexpected trailing data after {count} points: {tokens[expected]!r}"
        )

    points = []
    pos = 2
    for i in range(count):
        name = tokens[pos]
        values = []
        for raw in tokens[pos + 1:pos + 1 + dim]:
            try:
                values.append(float(raw))
            except ValueError:
                raise InputFormatError(
                    f"Point {i} ({name!r}): non-numeric value {raw!r}"
                ) from None
        points.append(Point.create(name, values))
        pos += dim + 1

    return points


def load_points(input_path: Path) -> list[Point]:
    """
    Load and parse a point file.

    Raises:
        InputFormatError: If the file is not found or malformed
    """
    input_path = Path(input_path)
    if not input_path.exists():
        raise InputFormatError(f"Input file not found: {input_path}")

    with open(input_path) as f:
        content = f.read()

    return parse_points(content)
