from collections.abc import Iterable, Iterator
from typing import Any, Optional

from optimistic_json.json_parser import JSONParser, OptimisticJSONParser
from optimistic_json.log import get_logger

logger = get_logger(__name__)


class JSONStreamAccumulator:
    """
    Collects JSON text as it is streamed in (e.g. tool call arguments
    arriving token by token) and keeps the best-effort parse of
    everything received so far.

    Every chunk re-parses the whole buffer from the start, nothing is
    carried between parses except the text itself.
    """

    def __init__(self, parser: Optional[JSONParser] = None, associative: bool = True):
        self.parser: JSONParser = parser or OptimisticJSONParser()
        self.associative: bool = associative

        self.buffer: list[str] = []
        self.current_parsed_result: Any = None
        self._last_field_values: dict[str, str] = {}

    @property
    def text(self) -> str:
        return "".join(self.buffer)

    def feed(self, chunk: str) -> Any:
        """Append `chunk` and return the latest parsed value."""
        self.buffer.append(chunk)
        try:
            self.current_parsed_result = self.parser.parse(self.text, associative=self.associative)
        except ValueError as e:
            # Typically a literal cut mid-token ("tru"), the next chunk usually completes it
            logger.debug(f"Keeping previous parse, buffer not recoverable yet: {e}")
        return self.current_parsed_result

    def iter_parsed(self, chunks: Iterable[str]) -> Iterator[Any]:
        for chunk in chunks:
            yield self.feed(chunk)

    def field_delta(self, key: str) -> Optional[str]:
        """
        Returns the part of the string field `key` that arrived since the
        last call, or None when the field is missing, not a string, or unchanged.

        Joining every returned delta always gives a prefix of the field's
        final value. While the buffer ends inside a string, that string is
        still raw text with its escapes unresolved, so everything from the
        first backslash on is held back until the string closes.
        """
        if isinstance(self.current_parsed_result, dict):
            new = self.current_parsed_result.get(key)
        else:
            new = getattr(self.current_parsed_result, key, None)
        if not isinstance(new, str):
            return None

        if "\\" in new and _ends_inside_string(self.text):
            new = new[: new.index("\\")]

        emitted = self._last_field_values.get(key, "")
        if new == emitted or not new.startswith(emitted):
            return None
        self._last_field_values[key] = new

        # Compute the new content by slicing off what was already emitted
        return new[len(emitted) :]

    def finish(self) -> Any:
        """Parse the complete buffer one last time, letting any decode error propagate."""
        self.current_parsed_result = self.parser.parse(self.text, associative=self.associative)
        return self.current_parsed_result


def _ends_inside_string(text: str) -> bool:
    """Whether `text` stops inside a string, using the parser's rule that a quote after a backslash never closes one."""
    inside = False
    for idx, char in enumerate(text):
        if char == '"' and not (inside and text[idx - 1] == "\\"):
            inside = not inside
    return inside
