import asyncio
from typing import Any, AsyncIterable, Iterator, Mapping, Protocol, TypeAlias

from . import config
from .encoding import DEFAULT_TRANSCODER, Transcoder, convertBody, headerValue
from .errors import AbortError, BodyError, BodyErrorKind
from .model import (
	Blob,
	BlobLike,
	BodyBlob,
	BodyBytes,
	BodySized,
	BodyStream,
	BytesOrigin,
	QueryString,
	SizedProducer,
	TBodySource,
)
from .stream import ByteStream, Sink, closeSink, drainSink
from .utils.io import DEFAULT_ENCODING
from .utils.json import TJSON, unjson
from .utils.logging import debug, error, warning

# -----------------------------------------------------------------------------
#
# CLASSIFICATION
#
# -----------------------------------------------------------------------------

CONTENT_TYPE_TEXT: str = "text/plain;charset=UTF-8"
CONTENT_TYPE_FORM: str = "application/x-www-form-urlencoded;charset=UTF-8"


def classify(value: Any) -> TBodySource:
	"""Normalizes any value given as a body into one of the body source
	kinds. Sources that are already classified are returned as is."""
	if value is None:
		return None
	elif isinstance(value, (BodyBytes, BodyBlob, BodyStream, BodySized)):
		return value
	elif isinstance(value, QueryString):
		return BodyBytes(str(value).encode(DEFAULT_ENCODING), BytesOrigin.Query)
	elif isinstance(value, BlobLike):
		return BodyBlob(value)
	elif isinstance(value, bytes):
		return BodyBytes(value)
	elif isinstance(value, (bytearray, memoryview)):
		# NOTE: The memoryview's own window is what gets copied
		return BodyBytes(bytes(value))
	elif isinstance(value, SizedProducer):
		return BodySized(value)
	elif isinstance(value, ByteStream):
		return BodyStream(value)
	elif isinstance(value, (AsyncIterable, Iterator)):
		return BodyStream(ByteStream(value))
	else:
		return BodyBytes(str(value).encode(DEFAULT_ENCODING), BytesOrigin.Text)


def extractContentType(value: Any) -> str | None:
	"""Returns the content type implied by the given body, which can be
	a raw value or a classified source."""
	source = classify(value)
	if source is None:
		return None
	elif isinstance(source, BodyBytes):
		return (
			CONTENT_TYPE_TEXT
			if source.origin is BytesOrigin.Text
			else CONTENT_TYPE_FORM
			if source.origin is BytesOrigin.Query
			else None
		)
	elif isinstance(source, BodyBlob):
		return source.blob.type or None
	elif isinstance(source, BodySized):
		boundary = source.producer.boundary
		return f"multipart/form-data;boundary={boundary}" if boundary else None
	else:
		# A stream can't be introspected without consuming it
		return None


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class Body:
	"""Holds the source of a request/response body along with its
	consumption state. A body can be consumed at most once, by any of
	`buffer()`, `arrayBuffer()`, `blob()`, `json()`, `text()` or
	`textConverted()`."""

	__slots__ = [
		"source",
		"disturbed",
		"error",
		"size",
		"timeout",
		"url",
		"headers",
		"transcoder",
	]

	def __init__(
		self,
		value: Any = None,
		*,
		size: int | None = None,
		timeout: float | None = None,
		url: str | None = None,
		headers: Mapping[str, str] | None = None,
		transcoder: Transcoder | None = DEFAULT_TRANSCODER,
	):
		self.source: TBodySource = classify(value)
		self.disturbed: bool = False
		self.error: BaseException | None = None
		self.size: int = config.MAX_SIZE if size is None else size
		self.timeout: float = config.TIMEOUT if timeout is None else timeout
		self.url: str | None = url
		# NOTE: Headers are shared with the owner, and read when consuming
		self.headers: Mapping[str, str] | None = headers
		self.transcoder: Transcoder | None = transcoder
		if self.size < 0 or self.timeout < 0:
			raise ValueError(
				f"Body size and timeout must be positive, got: {self.size}, {self.timeout}"
			)
		if isinstance(self.source, BodyStream):
			self.source.stream.onError(self._onStreamError)

	@property
	def bodyUsed(self) -> bool:
		return self.disturbed

	@property
	def contentType(self) -> str | None:
		return headerValue(self.headers, "Content-Type")

	def _onStreamError(self, err: BaseException) -> None:
		self.error = (
			err
			if isinstance(err, AbortError)
			else BodyError(
				f"Invalid response body while trying to fetch {self.url}: {err}",
				BodyErrorKind.System,
				err,
				url=self.url,
			)
		)

	# =========================================================================
	# CONSUMPTION
	# =========================================================================

	async def _consume(self) -> bytes:
		"""Consumes the whole body into a single bytes buffer."""
		if self.disturbed:
			raise BodyError(
				f"body used already for: {self.url}",
				BodyErrorKind.AlreadyUsed,
				url=self.url,
			)
		self.disturbed = True
		if self.error is not None:
			raise self.error
		source = self.source
		stream: ByteStream
		if source is None:
			return b""
		elif isinstance(source, BodyBytes):
			return source.payload
		elif isinstance(source, BodyBlob):
			stream = source.blob.stream()
		elif isinstance(source, BodyStream):
			stream = source.stream
		elif isinstance(source, BodySized):
			stream = ByteStream(source.producer)
		else:
			raise ValueError(f"Unsupported body source: {source}")
		if not self.timeout:
			return await self._accumulate(stream)
		try:
			return await asyncio.wait_for(self._accumulate(stream), self.timeout)
		except asyncio.TimeoutError:
			stream.cancel()
			warning(
				"Body loading timed out",
				Url=self.url,
				Limit=self.timeout,
			)
			raise BodyError(
				f"Response timeout while trying to fetch {self.url} (over {self.timeout}s)",
				BodyErrorKind.Timeout,
				url=self.url,
			) from None

	async def _accumulate(self, stream: ByteStream) -> bytes:
		accum: list[bytes] = []
		read: int = 0
		while True:
			try:
				chunk = await stream.read()
			except AbortError:
				raise
			except Exception as e:
				error(
					"Body stream failed",
					BodyErrorKind.System.value,
					Url=self.url,
					Read=read,
				)
				raise BodyError(
					f"Invalid response body while trying to fetch {self.url}: {e}",
					BodyErrorKind.System,
					e,
					url=self.url,
				) from e
			if chunk is None:
				break
			# The limit is checked before accepting the chunk, so that the
			# accumulated data never exceeds it.
			if self.size and read + len(chunk) > self.size:
				stream.cancel()
				warning(
					"Body over size limit",
					Url=self.url,
					Limit=self.size,
					Read=read,
				)
				raise BodyError(
					f"content size at {self.url} over limit: {self.size}",
					BodyErrorKind.MaxSize,
					url=self.url,
				)
			read += len(chunk)
			accum.append(chunk)
		try:
			return b"".join(accum)
		except (MemoryError, OverflowError) as e:
			raise BodyError(
				f"Could not create buffer from response body for {self.url}: {e}",
				BodyErrorKind.System,
				e,
				url=self.url,
			) from e

	# =========================================================================
	# REPRESENTATIONS
	# =========================================================================

	async def buffer(self) -> bytes:
		"""Returns the raw bytes of the body."""
		return await self._consume()

	async def arrayBuffer(self) -> memoryview:
		"""Returns a view over the bytes of the body, without copying."""
		data = await self._consume()
		return memoryview(data)[0 : len(data)]

	async def blob(self) -> Blob:
		content_type: str = self.contentType or ""
		return Blob.Wrap(await self._consume(), content_type.lower())

	async def json(self) -> TJSON:
		data = await self._consume()
		try:
			return unjson(data.decode(DEFAULT_ENCODING, errors="replace"))
		except ValueError as e:
			raise BodyError(
				f"invalid json response body at {self.url} reason: {e}",
				BodyErrorKind.InvalidBody,
				e,
				url=self.url,
			) from e

	async def text(self) -> str:
		return (await self._consume()).decode(DEFAULT_ENCODING, errors="replace")

	async def textConverted(self) -> str:
		"""Returns the body as text, detecting its charset from the headers
		or from its content."""
		if self.transcoder is None:
			raise BodyError(
				"A transcoder must be configured to convert the body text",
				BodyErrorKind.MissingCapability,
				url=self.url,
			)
		return convertBody(
			await self._consume(), self.headers, self.transcoder, url=self.url
		)

	def __repr__(self) -> str:
		return f"Body({self.source!r}, used={self.disturbed})"


# -----------------------------------------------------------------------------
#
# COLLABORATORS
#
# -----------------------------------------------------------------------------
# These are used by the owners of a body (requests and responses) and by
# the transport layer.


class HasBody(Protocol):
	content: Body


TBodyHolder: TypeAlias = Body | HasBody


def bodyOf(instance: TBodyHolder) -> Body:
	return instance if isinstance(instance, Body) else instance.content


def clone(instance: TBodyHolder) -> TBodySource:
	"""Returns a source for a copy of the given body. Streams are split in
	two, the given body keeping one branch and the other being returned."""
	body = bodyOf(instance)
	if body.bodyUsed:
		raise RuntimeError("cannot clone body after it is used")
	source = body.source
	# NOTE: Sized producers are not teed, we can't duplicate their framing.
	if isinstance(source, BodyStream):
		ours, theirs = source.stream.tee()
		debug("Teed body stream", Url=body.url)
		body.source = BodyStream(ours)
		return BodyStream(theirs)
	else:
		return source


def getTotalBytes(instance: TBodyHolder) -> int | None:
	"""Returns the length of the body when it can be known without reading
	it, `None` otherwise."""
	source = bodyOf(instance).source
	if source is None:
		return 0
	elif isinstance(source, BodyBlob):
		return source.blob.size
	elif isinstance(source, BodyBytes):
		return len(source.payload)
	elif isinstance(source, BodySized):
		producer = source.producer
		return producer.getLengthSync() if producer.hasKnownLength() else None
	else:
		return None


async def writeToStream(sink: Sink, instance: TBodyHolder) -> None:
	"""Writes the body to the given sink, closing it once done."""
	source = bodyOf(instance).source
	if source is None:
		await closeSink(sink)
	elif isinstance(source, BodyBlob):
		await source.blob.stream().pipe(sink)
	elif isinstance(source, BodyBytes):
		sink.write(source.payload)
		await drainSink(sink)
		await closeSink(sink)
	elif isinstance(source, BodyStream):
		await source.stream.pipe(sink)
	elif isinstance(source, BodySized):
		await ByteStream(source.producer).pipe(sink)
	else:
		raise ValueError(f"Unsupported body source: {source}")


# EOF
