import json
import re
from abc import ABC, abstractmethod
from types import SimpleNamespace
from typing import Any, Callable, Optional

from pydantic_core import from_json

from optimistic_json.constants import FALSE_LITERAL, FLOAT_MARKERS, NULL_LITERAL, NUMBER_CHARS, TRUE_LITERAL, WHITESPACE_CHARS
from optimistic_json.helpers.json_helpers import json_loads, records_from, to_record
from optimistic_json.log import get_logger
from optimistic_json.settings import ParserBackend, settings

logger = get_logger(__name__)

LEADING_INT = re.compile(r"-?\d*")
LEADING_FLOAT = re.compile(r"-?\d*\.?\d*")

# (original text, parsed data, unconsumed remainder)
ExtraTokenHandler = Callable[[str, Any, str], Any]


class JSONParser(ABC):
    @abstractmethod
    def parse(self, input_str: str, associative: bool = True) -> Any:
        raise NotImplementedError()


class PydanticJSONParser(JSONParser):
    """
    https://docs.pydantic.dev/latest/concepts/json/#json-parsing
    If `strict` is True, we will not allow for partial parsing of JSON.

    Compared with `OptimisticJSONParser`, this parser is more strict.
    Note: This will not partially parse numbers, and an unterminated string is only kept when it is the trailing value.
    """

    def __init__(self, strict=False):
        self.strict = strict

    def parse(self, input_str: str, associative: bool = True) -> Any:
        if not input_str:
            return {} if associative else SimpleNamespace()
        try:
            data = from_json(input_str, allow_partial="trailing-strings" if not self.strict else False)
        except ValueError as e:
            logger.error(f"Failed to parse JSON: {e}")
            raise
        return data if associative else records_from(data)


class _Cursor:
    """The unconsumed part of the input, `text[pos:end]`. Moving the cursor never copies the text."""

    __slots__ = ("text", "pos", "end")

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.end = len(text)

    def __bool__(self) -> bool:
        return self.pos < self.end

    def peek(self) -> str:
        return self.text[self.pos]

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos, self.end)

    def find(self, char: str, start: int) -> int:
        return self.text.find(char, start, self.end)

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, self.end)

    def strip(self) -> None:
        """Trim whitespace from both ends of the view."""
        while self.pos < self.end and self.text[self.pos] in WHITESPACE_CHARS:
            self.pos += 1
        while self.end > self.pos and self.text[self.end - 1] in WHITESPACE_CHARS:
            self.end -= 1

    def take(self, stop: int) -> str:
        """Consume up to (not including) `stop` and return the consumed text."""
        taken = self.text[self.pos : stop]
        self.pos = stop
        return taken

    def take_rest(self) -> str:
        return self.take(self.end)

    def remainder(self) -> str:
        return self.text[self.pos : self.end]


class OptimisticJSONParser(JSONParser):
    """
    A JSON parser that attempts to parse a given string using `json.loads`,
    and if that fails, it parses as much valid JSON as possible while
    allowing extra tokens to remain. Those extra tokens can be retrieved
    from `self.last_parse_remainder`. If `strict` is False, the parser
    tolerates incomplete strings and incomplete numbers by returning
    their raw text, turns closed strings that don't decode into None
    and reads malformed numbers up to their longest valid prefix.

    Only the original `json.JSONDecodeError` is ever raised: when the
    partial parse hits something it cannot recover from (an unknown
    leading character, a missing ':' or a broken literal) the strict
    decoder's own error is re-raised.
    """

    def __init__(self, strict: bool = False, on_extra_token: Optional[ExtraTokenHandler] = None):
        self.strict = strict
        self.parsers = {
            " ": self._parse_space,
            "\r": self._parse_space,
            "\n": self._parse_space,
            "\t": self._parse_space,
            "[": self._parse_array,
            "{": self._parse_object,
            '"': self._parse_string,
            "t": self._parse_true,
            "f": self._parse_false,
            "n": self._parse_null,
        }
        # Register number parser for digits, the decimal point and the sign
        for char in NUMBER_CHARS:
            self.parsers[char] = self._parse_number

        self.last_parse_remainder: Optional[str] = None
        self.on_extra_token: Optional[ExtraTokenHandler] = on_extra_token or self._default_on_extra_token

    def _default_on_extra_token(self, text, data, remainder):
        logger.warning(f"Parsed JSON with extra tokens: {data}, remaining: {remainder!r}")

    def parse(self, input_str: str, associative: bool = True) -> Any:
        """
        Try to parse the entire `input_str` as JSON. If parsing fails,
        attempts a partial parse, storing leftover text in
        `self.last_parse_remainder`. A callback (`on_extra_token`) is
        triggered if extra tokens remain.

        With `associative=False` objects come back as `SimpleNamespace`
        records instead of dicts.
        """
        self.last_parse_remainder = None
        if len(input_str) >= 1:
            try:
                return json_loads(input_str, associative=associative)
            except json.JSONDecodeError as decode_error:
                logger.debug(f"Strict decode failed ({decode_error}), falling back to partial parse")
                data, remainder = self.parse_partial(input_str, decode_error, associative=associative)
                self.last_parse_remainder = remainder
                if self.on_extra_token and remainder:
                    self.on_extra_token(input_str, data, remainder)
                return data
        else:
            return json_loads("{}", associative=associative)

    def parse_partial(self, input_str: str, decode_error: json.JSONDecodeError, associative: bool = True) -> tuple[Any, str]:
        """Run only the partial parse, returning the recovered value and the unconsumed remainder."""
        cursor = _Cursor(input_str)
        data = self._parse_any(cursor, decode_error, associative)
        return data, cursor.remainder()

    def _parse_any(self, cursor: _Cursor, decode_error, associative):
        """Determine which parser to use based on the first character."""
        if not cursor:
            raise decode_error
        parser = self.parsers.get(cursor.peek())
        if parser is None:
            raise decode_error
        return parser(cursor, decode_error, associative)

    def _parse_space(self, cursor, decode_error, associative):
        """Strip surrounding whitespace and parse again."""
        cursor.strip()
        return self._parse_any(cursor, decode_error, associative)

    def _parse_array(self, cursor, decode_error, associative):
        """Parse a JSON array, stopping early if the input runs out."""
        # Skip the '['
        cursor.advance()
        array_values = []
        cursor.strip()
        while cursor:
            if cursor.peek() == "]":
                # Skip the ']'
                cursor.advance()
                break
            array_values.append(self._parse_any(cursor, decode_error, associative))
            cursor.strip()
            if cursor.startswith(","):
                # Skip the ','
                cursor.advance()
                cursor.strip()
        return array_values

    def _parse_object(self, cursor, decode_error, associative):
        """Parse a JSON object. A key whose value never arrived maps to None and ends the object."""
        # Skip the '{'
        cursor.advance()
        obj = {}
        cursor.strip()
        while cursor:
            if cursor.peek() == "}":
                # Skip the '}'
                cursor.advance()
                break
            key = self._parse_any(cursor, decode_error, associative)
            cursor.strip()

            if not cursor or cursor.peek() == "}":
                self._set_member(obj, key, None, decode_error)
                break
            if cursor.peek() != ":":
                raise decode_error

            # Skip ':'
            cursor.advance()
            cursor.strip()
            if not cursor or cursor.peek() in ",}":
                self._set_member(obj, key, None, decode_error)
                if cursor.startswith(","):
                    cursor.advance()
                break

            value = self._parse_any(cursor, decode_error, associative)
            self._set_member(obj, key, value, decode_error)
            cursor.strip()
            if cursor.startswith(","):
                # Skip the ','
                cursor.advance()
                cursor.strip()
        return obj if associative else to_record(obj)

    @staticmethod
    def _set_member(obj: dict, key, value, decode_error) -> None:
        try:
            obj[key] = value
        except TypeError:
            # arrays and objects can't be used as keys
            raise decode_error from None

    def _parse_string(self, cursor, decode_error, associative):
        """Parse a JSON string, respecting escaped quotes if present."""
        end = cursor.find('"', cursor.pos + 1)
        while end != -1 and cursor.text[end - 1] == "\\":
            end = cursor.find('"', end + 1)

        if end == -1:
            # Incomplete string
            if self.strict:
                raise decode_error
            # Return the raw text after the opening quote, it is not a valid literal so it stays escaped
            return cursor.take_rest()[1:]

        str_val = cursor.take(end + 1)
        try:
            return json.loads(str_val)
        except json.JSONDecodeError:
            if self.strict:
                raise decode_error from None
            # Closed but undecodable (raw control characters, bad escapes), the string becomes null
            return None

    def _parse_number(self, cursor, decode_error, associative):
        """
        Parse a number (int or float). Only digits, '.' and '-' are scanned,
        so an exponent ends the number at the 'e'.
        """
        idx = cursor.pos
        while idx < cursor.end and cursor.text[idx] in NUMBER_CHARS:
            idx += 1

        num_str = cursor.take(idx)

        if not num_str or num_str[-1] in ".-":
            if self.strict:
                raise decode_error
            # Incomplete number, return it as-is and give up on the rest of the input
            cursor.take_rest()
            return num_str

        is_float = any(c in num_str for c in FLOAT_MARKERS)
        try:
            return float(num_str) if is_float else int(num_str)
        except ValueError:
            if self.strict:
                raise decode_error from None
        return _leading_number(num_str, is_float)

    def _parse_true(self, cursor, decode_error, associative):
        return self._parse_literal(cursor, decode_error, TRUE_LITERAL, True)

    def _parse_false(self, cursor, decode_error, associative):
        return self._parse_literal(cursor, decode_error, FALSE_LITERAL, False)

    def _parse_null(self, cursor, decode_error, associative):
        return self._parse_literal(cursor, decode_error, NULL_LITERAL, None)

    @staticmethod
    def _parse_literal(cursor, decode_error, literal, value):
        """Literals have no partial form, anything but the full spelling is an error."""
        if cursor.startswith(literal):
            cursor.advance(len(literal))
            return value
        raise decode_error


def get_json_parser(backend: Optional[ParserBackend] = None, strict: Optional[bool] = None) -> JSONParser:
    """Build a parser for `backend`, falling back to the configured defaults."""
    backend = backend or settings.backend
    strict = settings.strict if strict is None else strict
    if backend == ParserBackend.pydantic:
        return PydanticJSONParser(strict=strict)
    return OptimisticJSONParser(strict=strict)


def _leading_number(num_str: str, is_float: bool):
    """Read the longest valid number at the start of `num_str`, 0 when there is none ("1.2.3" -> 1.2, "1-2" -> 1)."""
    leading = (LEADING_FLOAT if is_float else LEADING_INT).match(num_str).group()
    if not any(c.isdigit() for c in leading):
        return 0.0 if is_float else 0
    return float(leading) if is_float else int(leading)
