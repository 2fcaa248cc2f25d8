from typing import AsyncIterator

from fetchbody import SizedProducer


class FormData(SizedProducer):
	"""A minimal multipart encoder, for testing."""

	def __init__(self, fields: dict[str, str], boundary: str = "----fetchbody"):
		self.fields = fields
		self._boundary = boundary

	@property
	def boundary(self) -> str:
		return self._boundary

	def encode(self) -> bytes:
		parts = [
			f'--{self._boundary}\r\nContent-Disposition: form-data; name="{k}"\r\n\r\n{v}\r\n'
			for k, v in self.fields.items()
		]
		return ("".join(parts) + f"--{self._boundary}--\r\n").encode("utf8")

	def hasKnownLength(self) -> bool:
		return True

	def getLengthSync(self) -> int:
		return len(self.encode())

	async def __aiter__(self) -> AsyncIterator[bytes]:
		yield self.encode()


class Sink:
	"""Collects what is written to it."""

	def __init__(self) -> None:
		self.data = bytearray()
		self.closed = False
		self.drained = 0

	def write(self, data: bytes) -> None:
		assert not self.closed
		self.data += data

	async def drain(self) -> None:
		self.drained += 1

	def close(self) -> None:
		self.closed = True


# EOF
