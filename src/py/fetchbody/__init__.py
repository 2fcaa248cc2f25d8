from .body import (
	Body,
	classify,
	clone,
	extractContentType,
	getTotalBytes,
	writeToStream,
)  # NOQA: F401
from .errors import AbortError, BodyError, BodyErrorKind  # NOQA: F401
from .message import Request, Response  # NOQA: F401
from .model import Blob, BlobLike, QueryString, SizedProducer  # NOQA: F401
from .stream import ByteStream  # NOQA: F401

__version__ = "1.0.0"

# EOF
