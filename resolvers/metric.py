"""Metric grammar — slash-delimited numeric expressions.

    ""                    -> 0
    "14", "0x7f", ".5"    -> literal
    "size_body"           -> value of the metric entry "size_body"
    "named/size_body"     -> same, explicitly
    "add/1/2/3"           -> 6      (also mul, min, max)
    "switch/1/10/20/30"   -> 20     (0-based selector; out of range -> last)

Function heads consume the entire remainder of the string as their argument
list. Failures are logged and reported as None to the caller; a metric entry
that fails resolves to INVALID_METRIC.
"""
import logging
import math
import re
from typing import TYPE_CHECKING

from models.cache import Dependency
from models.values import INVALID_METRIC

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import MetricEntry

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_HEXADECIMAL = re.compile(r"[+-]?0[xX]([0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)([pP][+-]?\d+)?")

# Minimum argument count is exclusive: each function needs strictly more.
_FUNCTIONS = {"add": 1, "mul": 1, "min": 1, "max": 1, "switch": 2}

Extraction = tuple[list[float], list[Dependency]]


def resolve(entry: "MetricEntry", document: "Document") -> float:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_METRIC,
        label=f'metric "{entry.raw}"',
    )


def _compute(entry: "MetricEntry", document: "Document") -> float | None:
    if not entry.raw:
        # Tolerated as the value of a key used as a comment, but never usable.
        return None
    extracted = extract_one_metric(entry.raw, document)
    if extracted is None:
        return None
    value, dependencies = extracted
    entry.cache.depends_on_all(dependencies)
    return value


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

def parse_number(token: str) -> float | None:
    """Parse a decimal or hexadecimal (``0x7f``) floating-point literal."""
    if _DECIMAL.fullmatch(token):
        return float(token)
    if _HEXADECIMAL.fullmatch(token):
        sign = -1.0 if token.startswith("-") else 1.0
        digits = token.lstrip("+-")
        if "p" not in digits.lower():
            digits += "p0"
        try:
            return sign * float.fromhex(digits)
        except OverflowError:
            return None
    return None


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

def extract_metrics(
    s: str,
    document: "Document",
    expecting: str = "extracting a metric",
    requested: int | None = None,
) -> Extraction | None:
    """Extract ``requested`` values from ``s``, or all of them when None.

    Fails if text remains unconsumed or fewer values than requested were found.
    """
    values: list[float] = []
    dependencies: list[Dependency] = []
    remaining: str | None = s

    while requested is None or len(values) < requested:
        if remaining is None:
            break
        head, sep, rest = remaining.partition("/")
        tail = rest if sep else None
        remaining = None

        if head in _FUNCTIONS:
            if tail is None:
                logger.warning('While %s, found no parameters to "%s" in "%s"', expecting, head, s)
                return None
            extracted = extract_metrics(tail, document, expecting)
            if extracted is None or len(extracted[0]) <= _FUNCTIONS[head]:
                logger.warning('While %s, found insufficient parameters to "%s" in "%s"', expecting, head, s)
                return None
            args, deps = extracted
            values.append(_apply(head, args))
            dependencies.extend(deps)
        elif head == "":
            values.append(0.0)
            remaining = tail
        elif head == "named":
            if tail is None:
                logger.warning('While %s, encountered missing name in "%s"', expecting, s)
                return None
            value = _named_metric(tail, document, expecting, s)
            if value is None:
                return None
            dependencies.append(("metric", tail))
            values.append(value)
        else:
            value = parse_number(head)
            if value is None:
                value = _named_metric(head, document, expecting, s)
                if value is None:
                    return None
                dependencies.append(("metric", head))
            values.append(value)
            remaining = tail

    if not all(math.isfinite(v) for v in values):
        logger.warning('While %s, "%s" does not evaluate to a finite number', expecting, s)
        return None
    if remaining is not None:
        logger.warning('While %s, did not process remaining expression "%s" out of entire "%s"',
                       expecting, remaining, s)
        return None
    if requested is not None and len(values) < requested:
        logger.warning('While %s, could not extract sufficient values out of "%s"', expecting, s)
        return None
    return values, dependencies


def _apply(function: str, args: list[float]) -> float:
    if function == "add":
        return sum(args)
    if function == "mul":
        return math.prod(args)
    if function == "min":
        return min(args)
    if function == "max":
        return max(args)
    selector, options = args[0], args[1:]
    if selector.is_integer() and 0 <= selector < len(options):
        return options[int(selector)]
    return options[-1]


def _named_metric(name: str, document: "Document", expecting: str, s: str) -> float | None:
    entry = document.metrics.get(name)
    if entry is None:
        logger.warning('While %s, could not recognise value or expression "%s" within "%s"',
                       expecting, name, s)
        return None
    value = entry.resolved(document)
    if not entry.cache.is_valid():
        logger.warning('While %s, tried to use invalid metric entry "%s"', expecting, name)
        return None
    return value


def extract_one_metric(
    s: str, document: "Document", expecting: str = "extracting a metric"
) -> tuple[float, list[Dependency]] | None:
    """Extract exactly one value from ``s`` after removing all spaces."""
    extracted = extract_metrics(s.replace(" ", ""), document, expecting, requested=1)
    if extracted is None or not extracted[0]:
        return None
    values, dependencies = extracted
    return values[0], dependencies


def extract_metric_for_each(
    strings: list[str], document: "Document", expecting: str = "extracting a metric"
) -> Extraction | None:
    """Extract one value from each string; fails if any one fails."""
    values: list[float] = []
    dependencies: list[Dependency] = []
    for string in strings:
        extracted = extract_one_metric(string, document, expecting)
        if extracted is None:
            return None
        value, deps = extracted
        values.append(value)
        dependencies.extend(deps)
    return values, dependencies


def extract_insets(
    raw: str, document: "Document", expecting: str
) -> Extraction | None:
    """Four ``top/left/bottom/right`` expressions; the last absorbs any further slashes."""
    parts = raw.replace(" ", "").split("/", 3)
    extracted = extract_metric_for_each(parts, document, expecting)
    if extracted is None or len(extracted[0]) != 4:
        logger.warning('Could not parse %s from "%s" (format: "top/left/bottom/right")', expecting, raw)
        return None
    return extracted


# ---------------------------------------------------------------------------
# JSON leaves
# ---------------------------------------------------------------------------

def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def extract_one_metric_from_json(
    value: object, document: "Document", expecting: str = "extracting a metric"
) -> tuple[float, list[Dependency]] | None:
    """A JSON number is taken as is; a string is a metric expression."""
    if isinstance(value, str):
        return extract_one_metric(value, document, expecting)
    number = _as_number(value)
    if number is None:
        return None
    return number, []


def extract_metrics_from_json(
    value: object,
    document: "Document",
    expecting: str = "extracting metrics",
    requested: int | None = None,
) -> Extraction | None:
    """Extract values from a JSON array, a slash-delimited string, or a single number."""
    values: list[float] = []
    dependencies: list[Dependency] = []
    if isinstance(value, list):
        for item in value:
            extracted = extract_one_metric_from_json(item, document, expecting)
            if extracted is None:
                return None
            values.append(extracted[0])
            dependencies.extend(extracted[1])
    elif isinstance(value, str):
        extracted_all = extract_metrics(value.replace(" ", ""), document, expecting, requested)
        if extracted_all is None:
            return None
        values, dependencies = extracted_all
    else:
        number = _as_number(value)
        if number is None:
            return None
        values.append(number)
    if requested is not None and len(values) != requested:
        return None
    return values, dependencies
