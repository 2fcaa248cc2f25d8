import re
from typing import Callable, Mapping, TypeAlias

from . import config
from .errors import BodyError, BodyErrorKind
from .utils.logging import error

# --
# Detects the charset of a body and transcodes it to text.
# SEE: http://www.w3.org/TR/2011/WD-html5-20110113/parsing.html#determining-the-character-encoding

# A transcoder decodes bytes in the given charset into text
Transcoder: TypeAlias = Callable[[bytes, str], str]

DEFAULT_CHARSET: str = "utf-8"

RE_HEADER_CHARSET = re.compile(r"charset=([^;]*)", re.IGNORECASE)
RE_HTML5_META = re.compile(r"<meta.+?charset=(['\"])(.+?)\1", re.IGNORECASE)
RE_HTML4_META = re.compile(
	r"<meta[\s]+?http-equiv=(['\"])content-type\1[\s]+?content=(['\"])(.+?)\2",
	re.IGNORECASE,
)
RE_CHARSET = re.compile(r"charset=(.*)", re.IGNORECASE)
RE_XML_DECL = re.compile(r"<\?xml.+?encoding=(['\"])(.+?)\1", re.IGNORECASE)

# Sites declaring these usually mean their superset
# SEE: https://hsivonen.fi/encoding-menu/
CHARSET_ALIASES: dict[str, str] = {
	"gb2312": "gb18030",
	"gbk": "gb18030",
}


def codecsTranscoder(data: bytes, charset: str) -> str:
	"""Decodes using Python's codec registry."""
	return data.decode(charset)


DEFAULT_TRANSCODER: Transcoder = codecsTranscoder


def headerValue(headers: Mapping[str, str] | None, name: str) -> str | None:
	if not headers:
		return None
	key = name.lower()
	for k, v in headers.items():
		if k.lower() == key:
			return v
	return None


def normalizeCharset(charset: str) -> str:
	charset = charset.strip().strip("\"'").strip()
	return CHARSET_ALIASES.get(charset.lower(), charset)


def detectCharset(
	data: bytes,
	contentType: str | None = None,
	*,
	sniff: int | None = None,
) -> str:
	"""Returns the charset of the given body, looking first at the content
	type, then at the first bytes of the body for HTML meta tags and XML
	declarations, defaulting to UTF-8."""
	if contentType and (m := RE_HEADER_CHARSET.search(contentType)):
		return normalizeCharset(m.group(1))
	text = data[: config.SNIFF_SIZE if sniff is None else sniff].decode(
		"utf8", errors="replace"
	)
	if not text:
		return DEFAULT_CHARSET
	elif m := RE_HTML5_META.search(text):
		return normalizeCharset(m.group(2))
	elif (m := RE_HTML4_META.search(text)) and (c := RE_CHARSET.search(m.group(3))):
		return normalizeCharset(c.group(1))
	elif m := RE_XML_DECL.search(text):
		return normalizeCharset(m.group(2))
	else:
		return DEFAULT_CHARSET


def convertBody(
	data: bytes,
	headers: Mapping[str, str] | None,
	transcoder: Transcoder | None = DEFAULT_TRANSCODER,
	*,
	url: str | None = None,
) -> str:
	"""Detects the charset of the body and decodes it to text."""
	if transcoder is None:
		raise BodyError(
			"A transcoder must be configured to convert the body text",
			BodyErrorKind.MissingCapability,
			url=url,
		)
	charset = detectCharset(data, headerValue(headers, "Content-Type"))
	try:
		return transcoder(data, charset)
	except Exception as e:
		error("Could not convert body", BodyErrorKind.System.value, Url=url, Charset=charset)
		raise BodyError(
			f"Could not convert body of {url} from {charset}: {e}",
			BodyErrorKind.System,
			e,
			url=url,
		) from e


# EOF
