"""Delimiter-driven text acquisition.

The parser consumes its input one "chunk" at a time: the text up to and
including the next tag delimiter (``>``). ``DelimitedTextSource`` owns buffer
growth over strings, text files and iterables of lines, and counts newlines so
callers can report 1-based line numbers.
"""

from dataclasses import dataclass
from typing import Generator, Iterable, Optional, TextIO, Union

from simple_xml_parser.shared.errors import XMLIOError

# Type definitions for input data
InputType = Union[str, TextIO, Iterable[str]]

DEFAULT_BUFFER_SIZE = 8192


@dataclass
class TextChunk:
    """Text read up to (and including) the delimiter.

    Attributes:
        text: Chunk content; lacks the delimiter only at end of input
        newlines: Number of line breaks inside ``text``
    """
    text: str
    newlines: int

    @property
    def is_blank(self) -> bool:
        """True when the chunk holds only whitespace."""
        return not self.text.strip()


class DelimitedTextSource:
    """Pull successive delimiter-terminated chunks from an input."""

    def __init__(
        self,
        input_data: InputType,
        delimiter: str = ">",
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        filename: Optional[str] = None,
    ) -> None:
        if len(delimiter) != 1:
            raise ValueError("delimiter must be a single character")
        if buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")

        self.delimiter = delimiter
        self.buffer_size = buffer_size
        self.filename = filename
        self.characters_read = 0

        self._blocks = self._block_generator(input_data)
        self._buffer = ""
        self._position = 0
        self._input_exhausted = False

    @property
    def exhausted(self) -> bool:
        """True once every character has been handed out."""
        return self._input_exhausted and self._position >= len(self._buffer)

    def read_chunk(self) -> Optional[TextChunk]:
        """Return the next chunk, or None when the input is exhausted."""
        search_from = self._position
        while True:
            end = self._buffer.find(self.delimiter, search_from)
            if end >= 0:
                return self._take(end + 1)
            search_from = len(self._buffer)
            if not self._fill():
                break

        if self._position >= len(self._buffer):
            return None
        return self._take(len(self._buffer))

    def _take(self, end: int) -> TextChunk:
        text = self._buffer[self._position:end]
        self._position = end
        # Drop consumed text so the buffer does not grow with the document
        if self._position >= self.buffer_size:
            self._buffer = self._buffer[self._position:]
            self._position = 0
        return TextChunk(text=text, newlines=text.count("\n"))

    def _fill(self) -> bool:
        if self._input_exhausted:
            return False
        try:
            block = next(self._blocks)
        except StopIteration:
            self._input_exhausted = True
            return False
        except (OSError, UnicodeDecodeError) as e:
            self._input_exhausted = True
            raise XMLIOError(f"Cannot read input: {e}", filename=self.filename) from e

        self.characters_read += len(block)
        self._buffer += block
        return True

    def _block_generator(self, input_data: InputType) -> Generator[str, None, None]:
        if isinstance(input_data, str):
            for start in range(0, len(input_data), self.buffer_size):
                yield input_data[start:start + self.buffer_size]
        elif hasattr(input_data, "read"):
            while True:
                block = input_data.read(self.buffer_size)
                if not block:
                    break
                if isinstance(block, bytes):
                    raise XMLIOError(
                        "Binary streams are not supported; open the file in text mode",
                        filename=self.filename,
                    )
                yield block
        else:
            for line in input_data:
                if line:
                    yield line
