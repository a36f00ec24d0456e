"""
Chunk stream accumulation for streamed digests and signatures.

Digest and signature primitives need the whole message, so streamed input
is first collected by a :class:`StreamAccumulator`, a small single-use state
machine::

    EMPTY --feed(chunk)--> COLLECTING(kind of chunk)
    COLLECTING(k) --feed(chunk of kind k)--> COLLECTING(k)
    COLLECTING(k) --feed(chunk of another kind)--> FAILED  (InconsistentChunkTypeError)
    EMPTY --finish()--> FAILED                             (EmptyStreamError)
    COLLECTING(k) --finish()--> COMPLETE                   (payload bytes)

A stream is either all text (``str``) or all binary (bytes-like). Mixing
the two within one message is rejected rather than coerced. Text payloads
are joined and then encoded with the caller's input encoding; binary
payloads are joined as raw bytes, so non-UTF-8 data survives intact.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
from enum import Enum

from easycrypto.core.crypto.encoding import to_bytes
from easycrypto.core.crypto.errors import EmptyStreamError, InconsistentChunkTypeError
from easycrypto.core.logging import get_logger

logger = get_logger(__name__)

Chunk = str | bytes | bytearray | memoryview


class ChunkKind(str, Enum):
    """Type of data a stream carries, fixed by its first chunk."""

    TEXT = "text"
    BINARY = "binary"


class AccumulatorState(str, Enum):
    """Lifecycle of a :class:`StreamAccumulator`; COMPLETE and FAILED are final."""

    EMPTY = "empty"
    COLLECTING = "collecting"
    COMPLETE = "complete"
    FAILED = "failed"


def kind_of(chunk: Chunk) -> ChunkKind:
    """Classify a chunk as text or binary.

    Raises
    ------
    TypeError
        If the chunk is neither ``str`` nor bytes-like.
    """
    if isinstance(chunk, str):
        return ChunkKind.TEXT
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return ChunkKind.BINARY
    raise TypeError(f"Stream chunks must be str or bytes-like, got {type(chunk).__name__}")


class StreamAccumulator:
    """Collects the chunks of one stream into a single payload.

    Chunks are appended in the order they are fed. The accumulator is
    single-use: once it has completed or failed, further calls raise
    ``RuntimeError``.
    """

    def __init__(self, input_encoding: str | None = None) -> None:
        self._input_encoding = input_encoding
        self._state = AccumulatorState.EMPTY
        self._kind: ChunkKind | None = None
        self._text_parts: list[str] = []
        self._binary_parts: list[bytes] = []

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def kind(self) -> ChunkKind | None:
        """Chunk kind fixed by the first chunk, or ``None`` before any chunk."""
        return self._kind

    def _ensure_open(self) -> None:
        if self._state in (AccumulatorState.COMPLETE, AccumulatorState.FAILED):
            raise RuntimeError(f"StreamAccumulator is {self._state.value} and cannot be reused")

    def _fail(self) -> None:
        self._state = AccumulatorState.FAILED
        self._text_parts.clear()
        self._binary_parts.clear()

    def feed(self, chunk: Chunk) -> None:
        """Append one chunk.

        Raises
        ------
        InconsistentChunkTypeError
            If the chunk's kind differs from the stream's established kind.
            The partial payload is discarded.
        TypeError
            If the chunk is neither text nor bytes-like.
        """
        self._ensure_open()
        try:
            kind = kind_of(chunk)
        except TypeError:
            self._fail()
            raise

        if self._kind is None:
            self._kind = kind
            self._state = AccumulatorState.COLLECTING
        elif kind is not self._kind:
            expected = self._kind.value
            self._fail()
            logger.warning("stream_inconsistent_chunk", expected=expected, received=kind.value)
            raise InconsistentChunkTypeError(
                f"Inconsistent data: stream started with {expected} chunks, "
                f"received a {kind.value} chunk"
            )

        if isinstance(chunk, str):
            self._text_parts.append(chunk)
        else:
            self._binary_parts.append(bytes(chunk))

    def finish(self) -> bytes:
        """Signal end of stream and return the accumulated payload.

        Raises
        ------
        EmptyStreamError
            If no chunk was ever fed.
        ValueError
            If a text payload is not valid in the input encoding.
        """
        self._ensure_open()
        if self._kind is None:
            self._fail()
            logger.debug("stream_empty")
            raise EmptyStreamError("No data to hash or sign.")

        try:
            if self._kind is ChunkKind.BINARY:
                payload = b"".join(self._binary_parts)
            else:
                payload = to_bytes("".join(self._text_parts), self._input_encoding)
        except ValueError:
            self._fail()
            raise

        self._state = AccumulatorState.COMPLETE
        self._text_parts.clear()
        self._binary_parts.clear()
        return payload


def accumulate(chunks: Iterable[Chunk], input_encoding: str | None = None) -> bytes:
    """Collect a synchronous iterable of chunks into one payload."""
    accumulator = StreamAccumulator(input_encoding)
    iterator = iter(chunks)
    try:
        for chunk in iterator:
            accumulator.feed(chunk)
    except (InconsistentChunkTypeError, TypeError):
        close = getattr(iterator, "close", None)
        if close is not None:
            close()
        raise
    return accumulator.finish()


async def accumulate_stream(
    source: AsyncIterable[Chunk] | Iterable[Chunk],
    input_encoding: str | None = None,
) -> bytes:
    """Collect a chunk stream into one payload.

    Chunks are pulled in delivery order. An error raised by the source
    propagates immediately and the partial payload is dropped. When a chunk
    is rejected the source is closed and no further chunks are consumed.
    """
    if not isinstance(source, AsyncIterable):
        return accumulate(source, input_encoding)

    accumulator = StreamAccumulator(input_encoding)
    try:
        async for chunk in source:
            accumulator.feed(chunk)
    except (InconsistentChunkTypeError, TypeError):
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
        raise
    return accumulator.finish()
