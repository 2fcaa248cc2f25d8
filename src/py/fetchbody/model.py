from abc import ABC, abstractmethod
from enum import Enum
from typing import AsyncIterator, Iterable, Mapping, NamedTuple, TypeAlias, Union
from urllib.parse import urlencode

from mypy_extensions import mypyc_attr

from .stream import ByteStream
from .utils.io import DEFAULT_ENCODING, asBytes

# -----------------------------------------------------------------------------
#
# CAPABILITIES
#
# -----------------------------------------------------------------------------
# Values that are not plain bytes or streams are recognized by the
# capability they declare, by subclassing one of these.


@mypyc_attr(allow_interpreted_subclasses=True)
class BlobLike(ABC):
	"""A binary container with a known size and MIME type, that can produce
	a fresh stream of its bytes any number of times."""

	@property
	@abstractmethod
	def size(self) -> int: ...

	@property
	@abstractmethod
	def type(self) -> str: ...

	@abstractmethod
	def stream(self) -> ByteStream: ...


@mypyc_attr(allow_interpreted_subclasses=True)
class SizedProducer(ABC):
	"""A third-party producer of bytes (typically a multipart form encoder)
	that may know its length ahead of time. A producer is iterated once."""

	@property
	def boundary(self) -> str | None:
		return None

	def hasKnownLength(self) -> bool:
		return False

	def getLengthSync(self) -> int:
		raise NotImplementedError

	@abstractmethod
	def __aiter__(self) -> AsyncIterator[bytes]: ...


# -----------------------------------------------------------------------------
#
# BLOB
#
# -----------------------------------------------------------------------------


class Blob(BlobLike):
	"""An immutable in-memory blob."""

	__slots__ = ["payload", "_type"]

	@staticmethod
	def Wrap(payload: bytes, type: str = "") -> "Blob":
		"""Creates a blob that shares the given bytes, without copying."""
		blob = Blob(type=type)
		blob.payload = payload
		return blob

	def __init__(
		self, parts: Iterable[Union[bytes, bytearray, memoryview, str, "Blob"]] = (), type: str = ""
	):
		self.payload: bytes = b"".join(
			_.payload if isinstance(_, Blob) else asBytes(_) for _ in parts
		)
		# NOTE: Only printable ASCII types are kept, as in the File API
		self._type: str = (
			type.lower() if all(0x20 <= ord(c) <= 0x7E for c in type) else ""
		)

	@property
	def size(self) -> int:
		return len(self.payload)

	@property
	def type(self) -> str:
		return self._type

	def stream(self) -> ByteStream:
		return ByteStream().push(self.payload).end()

	async def arrayBuffer(self) -> bytes:
		return self.payload

	async def text(self) -> str:
		return self.payload.decode(DEFAULT_ENCODING)

	def slice(
		self, start: int = 0, end: int | None = None, type: str = ""
	) -> "Blob":
		return Blob.Wrap(self.payload[start:end], type)

	def __repr__(self) -> str:
		return f"Blob(size={self.size}, type={self.type!r})"


# -----------------------------------------------------------------------------
#
# QUERY STRING
#
# -----------------------------------------------------------------------------


class QueryString:
	"""URL-encoded parameters, used as a form body."""

	__slots__ = ["params"]

	def __init__(
		self,
		params: Mapping[str, str | list[str]] | Iterable[tuple[str, str]] | None = None,
	):
		self.params: list[tuple[str, str]] = []
		if isinstance(params, Mapping):
			for k, v in params.items():
				for value in v if isinstance(v, list) else [v]:
					self.params.append((k, value))
		elif params:
			self.params.extend(params)

	def append(self, name: str, value: str) -> "QueryString":
		self.params.append((name, value))
		return self

	def get(self, name: str) -> str | None:
		for k, v in self.params:
			if k == name:
				return v
		return None

	def __str__(self) -> str:
		return urlencode(self.params)


# -----------------------------------------------------------------------------
#
# BODY SOURCES
#
# -----------------------------------------------------------------------------


class BytesOrigin(Enum):
	"""What an in-memory body was created from, which tells its content type."""

	Text = 0
	Query = 1
	Binary = 2


class BodyBytes(NamedTuple):
	"""A body held in memory."""

	payload: bytes
	origin: BytesOrigin = BytesOrigin.Binary

	@property
	def length(self) -> int:
		return len(self.payload)


class BodyBlob(NamedTuple):
	"""A body backed by a blob."""

	blob: BlobLike


class BodyStream(NamedTuple):
	"""A body backed by a live, single-pass stream."""

	stream: ByteStream


class BodySized(NamedTuple):
	"""A body produced by an opaque sized producer."""

	producer: SizedProducer


# The different kinds of sources, `None` being the absent body
TBodySource: TypeAlias = BodyBytes | BodyBlob | BodyStream | BodySized | None


# EOF
