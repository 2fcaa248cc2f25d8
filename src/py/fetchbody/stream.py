import asyncio
import inspect
from collections import deque
from typing import (
	Any,
	AsyncIterable,
	AsyncIterator,
	Awaitable,
	Callable,
	Iterable,
	Iterator,
	Protocol,
	TypeAlias,
	Union,
)

from .utils.io import asBytes

TChunk: TypeAlias = bytes | bytearray | memoryview | str
TErrorListener: TypeAlias = Callable[[BaseException], None]
TPuller: TypeAlias = Callable[["ByteStream"], Awaitable[None]]
TStreamSource: TypeAlias = Union[AsyncIterable[TChunk], Iterable[TChunk]]

# -----------------------------------------------------------------------------
#
# SINK
#
# -----------------------------------------------------------------------------


class Sink(Protocol):
	"""What a stream can be piped into. `asyncio.StreamWriter` qualifies,
	an optional `drain()` coroutine is awaited after each write."""

	def write(self, data: bytes) -> Any: ...

	def close(self) -> Any: ...


async def drainSink(sink: Sink) -> None:
	drain = getattr(sink, "drain", None)
	if drain is not None:
		res = drain()
		if inspect.isawaitable(res):
			await res


async def closeSink(sink: Sink) -> None:
	res = sink.close()
	if inspect.isawaitable(res):
		await res


# -----------------------------------------------------------------------------
#
# BYTE STREAM
#
# -----------------------------------------------------------------------------


class ByteStream:
	"""A single-pass stream of bytes. Producers either `push()` chunks and
	then `end()` or `fail()` the stream, or the stream is created from an
	(async) iterable that is pulled lazily as the stream is read."""

	__slots__ = [
		"chunks",
		"ended",
		"error",
		"cancelled",
		"listeners",
		"_iterator",
		"_puller",
		"_readable",
	]

	def __init__(self, source: TStreamSource | None = None) -> None:
		self.chunks: deque[bytes] = deque()
		self.ended: bool = False
		self.error: BaseException | None = None
		# A cancelled stream discards what it is given
		self.cancelled: bool = False
		self.listeners: list[TErrorListener] = []
		self._iterator: AsyncIterator[TChunk] | Iterator[TChunk] | None = (
			None
			if source is None
			else (
				source.__aiter__()
				if isinstance(source, AsyncIterable)
				else iter(source)
			)
		)
		self._puller: TPuller | None = None
		self._readable: asyncio.Event | None = None

	@property
	def isDone(self) -> bool:
		return self.ended or self.error is not None

	# =========================================================================
	# PRODUCER API
	# =========================================================================

	def push(self, chunk: TChunk) -> "ByteStream":
		if self.cancelled:
			return self
		elif self.isDone:
			raise RuntimeError("Can't write to a stream that has ended")
		data = asBytes(chunk)
		if data:
			self.chunks.append(data)
			self._wake()
		return self

	def end(self) -> "ByteStream":
		if not self.ended:
			self.ended = True
			self._wake()
		return self

	def fail(self, error: BaseException) -> "ByteStream":
		"""Fails the stream, notifying the error listeners. Failing a stream
		that is already done has no effect."""
		if self.isDone:
			return self
		self.error = error
		for listener in self.listeners:
			listener(error)
		self._wake()
		return self

	def cancel(self) -> "ByteStream":
		"""Cancels the stream once its reader has given up on it: buffered
		chunks are dropped, the source iterator is released and any
		further `push()` is discarded."""
		self.cancelled = True
		self.ended = True
		self.chunks.clear()
		self._iterator = None
		self._puller = None
		self._wake()
		return self

	def onError(self, listener: TErrorListener) -> "ByteStream":
		"""Registers a listener called when the stream fails. The listener is
		called right away if the stream has already failed."""
		self.listeners.append(listener)
		if self.error is not None:
			listener(self.error)
		return self

	def _wake(self) -> None:
		if self._readable is not None:
			self._readable.set()

	# =========================================================================
	# CONSUMER API
	# =========================================================================

	async def read(self) -> bytes | None:
		"""Reads the next chunk, returning `None` once the stream has ended
		and raising the stream's error if it failed."""
		while True:
			if self.error is not None:
				raise self.error
			elif self.chunks:
				return self.chunks.popleft()
			elif self.ended:
				return None
			elif self._iterator is not None:
				await self._pullIterator()
			elif self._puller is not None:
				await self._puller(self)
			else:
				if self._readable is None:
					self._readable = asyncio.Event()
				self._readable.clear()
				await self._readable.wait()

	async def _pullIterator(self) -> None:
		it = self._iterator
		try:
			if isinstance(it, AsyncIterator):
				chunk = await it.__anext__()
			else:
				chunk = next(it)  # type: ignore[arg-type]
			data = asBytes(chunk)
		except (StopAsyncIteration, StopIteration):
			self._iterator = None
			self.end()
		except Exception as e:
			self._iterator = None
			self.fail(e)
		else:
			if data:
				self.chunks.append(data)

	async def __aiter__(self) -> AsyncIterator[bytes]:
		while (chunk := await self.read()) is not None:
			yield chunk

	async def pipe(self, sink: Sink) -> int:
		"""Writes the whole stream into the sink and closes it, returning
		the number of bytes written. The sink is left open if the stream
		fails."""
		count: int = 0
		while (chunk := await self.read()) is not None:
			sink.write(chunk)
			count += len(chunk)
			await drainSink(sink)
		await closeSink(sink)
		return count

	def tee(self) -> tuple["ByteStream", "ByteStream"]:
		"""Splits this stream in two streams that each yield all the bytes of
		this one. Reading either branch pulls from this stream and feeds
		both branches, so this stream must not be read directly anymore."""
		branches: tuple[ByteStream, ByteStream] = (ByteStream(), ByteStream())
		lock = asyncio.Lock()

		def onError(error: BaseException) -> None:
			for branch in branches:
				branch.fail(error)

		async def pull(branch: ByteStream) -> None:
			async with lock:
				# The other branch may have pulled for us in the meantime
				if branch.chunks or branch.isDone:
					return
				try:
					chunk = await self.read()
				except Exception as e:
					onError(e)
					return
				for b in branches:
					if b.isDone:
						continue
					elif chunk is None:
						b.end()
					else:
						b.chunks.append(chunk)
						b._wake()

		for branch in branches:
			branch._puller = pull
		self.onError(onError)
		return branches

	def __repr__(self) -> str:
		state = "failed" if self.error else "ended" if self.ended else "open"
		return f"ByteStream({state}, buffered={len(self.chunks)})"


# EOF
