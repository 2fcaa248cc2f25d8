from enum import Enum

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class BodyErrorKind(Enum):
	"""Tags the different ways consuming a body can fail."""

	AlreadyUsed = "already-used"
	Aborted = "aborted"
	System = "system"
	InvalidBody = "invalid-structured-body"
	MaxSize = "max-size"
	Timeout = "body-timeout"
	MissingCapability = "missing-capability"


class BodyError(Exception):
	"""Raised when a body can't be consumed, the `kind` tells why."""

	def __init__(
		self,
		message: str,
		kind: BodyErrorKind = BodyErrorKind.System,
		cause: BaseException | None = None,
		url: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.kind: BodyErrorKind = kind
		self.cause: BaseException | None = cause
		self.url: str | None = url
		if cause is not None:
			self.__cause__ = cause

	@property
	def type(self) -> str:
		return self.kind.value

	def __repr__(self) -> str:
		return f"{self.__class__.__name__}({self.kind.value}: {self.message!r})"


class AbortError(BodyError):
	"""Signals that the producer of a body was cancelled. Abort errors are
	always propagated as they are."""

	def __init__(self, message: str = "The operation was aborted."):
		super().__init__(message, BodyErrorKind.Aborted)


# EOF
