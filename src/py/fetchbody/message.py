from typing import Any

from .body import Body, clone, extractContentType
from .encoding import DEFAULT_TRANSCODER, Transcoder
from .model import Blob, TBodySource
from .utils.json import TJSON

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# MESSAGE
#
# -----------------------------------------------------------------------------


class Message:
	"""Common base for requests and responses, which own a body."""

	__slots__ = ["url", "headers", "content"]

	def __init__(
		self,
		body: Any = None,
		*,
		url: str = "",
		headers: dict[str, str] | None = None,
		size: int | None = None,
		timeout: float | None = None,
		transcoder: Transcoder | None = DEFAULT_TRANSCODER,
	):
		self.url: str = url
		self.headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		self.content: Body = Body(
			body,
			size=size,
			timeout=timeout,
			url=url,
			headers=self.headers,
			transcoder=transcoder,
		)
		if "Content-Type" not in self.headers:
			content_type = extractContentType(self.content.source)
			if content_type is not None:
				self.headers["Content-Type"] = content_type

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "Message":
		if value is None:
			self.headers.pop(headername(name), None)
		else:
			self.headers[headername(name)] = str(value)
		return self

	@property
	def body(self) -> TBodySource:
		return self.content.source

	@property
	def bodyUsed(self) -> bool:
		return self.content.bodyUsed

	@property
	def size(self) -> int:
		return self.content.size

	@property
	def timeout(self) -> float:
		return self.content.timeout

	async def buffer(self) -> bytes:
		return await self.content.buffer()

	async def arrayBuffer(self) -> memoryview:
		return await self.content.arrayBuffer()

	async def blob(self) -> Blob:
		return await self.content.blob()

	async def json(self) -> TJSON:
		return await self.content.json()

	async def text(self) -> str:
		return await self.content.text()

	async def textConverted(self) -> str:
		return await self.content.textConverted()


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class Request(Message):
	"""An outgoing request with its body."""

	__slots__ = ["method"]

	def __init__(
		self,
		url: str,
		method: str = "GET",
		body: Any = None,
		*,
		headers: dict[str, str] | None = None,
		size: int | None = None,
		timeout: float | None = None,
		transcoder: Transcoder | None = DEFAULT_TRANSCODER,
	):
		self.method: str = method.upper()
		if body is not None and self.method in ("GET", "HEAD"):
			raise ValueError(f"Request with {self.method} method cannot have body")
		super().__init__(
			body,
			url=url,
			headers=headers,
			size=size,
			timeout=timeout,
			transcoder=transcoder,
		)

	def clone(self) -> "Request":
		return Request(
			self.url,
			self.method,
			clone(self),
			headers=dict(self.headers),
			size=self.size,
			timeout=self.timeout,
			transcoder=self.content.transcoder,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.url} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class Response(Message):
	"""An incoming response with its body."""

	__slots__ = ["status"]

	def __init__(
		self,
		body: Any = None,
		*,
		url: str = "",
		status: int = 200,
		headers: dict[str, str] | None = None,
		size: int | None = None,
		timeout: float | None = None,
		transcoder: Transcoder | None = DEFAULT_TRANSCODER,
	):
		self.status: int = status
		super().__init__(
			body,
			url=url,
			headers=headers,
			size=size,
			timeout=timeout,
			transcoder=transcoder,
		)

	@property
	def ok(self) -> bool:
		return 200 <= self.status < 300

	def clone(self) -> "Response":
		return Response(
			clone(self),
			url=self.url,
			status=self.status,
			headers=dict(self.headers),
			size=self.size,
			timeout=self.timeout,
			transcoder=self.content.transcoder,
		)

	def __str__(self) -> str:
		return f"Response({self.status} {self.url} {self.headers})"


# EOF
