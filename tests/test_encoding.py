import asyncio

import pytest

from fetchbody import Body, BodyError, BodyErrorKind, Response
from fetchbody.encoding import convertBody, detectCharset


def run(coro):
	return asyncio.run(coro)


def test_header_wins():
	html = b'<html><head><meta charset="iso-8859-1"></head></html>'
	assert detectCharset(html, "text/html; charset=utf-8") == "utf-8"
	assert detectCharset(html, "text/html") == "iso-8859-1"


def test_sniffing():
	assert detectCharset(b"") == "utf-8"
	assert detectCharset(b"plain text") == "utf-8"
	assert (
		detectCharset(
			b'<meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">'
		)
		== "Shift_JIS"
	)
	assert (
		detectCharset(b'<?xml version="1.0" encoding="windows-1251"?><a/>')
		== "windows-1251"
	)


def test_sniffing_window():
	html = b" " * 2000 + b'<meta charset="iso-8859-1">'
	assert detectCharset(html) == "utf-8"
	assert detectCharset(html, sniff=4096) == "iso-8859-1"


def test_gb_aliases():
	assert detectCharset(b"", "text/html; charset=gb2312") == "gb18030"
	assert detectCharset(b'<meta charset="GBK">') == "gb18030"
	text = "中文"
	res = Response(text.encode("gb18030"), headers={"Content-Type": "text/plain; charset=gbk"})
	assert run(res.textConverted()) == text


def test_converted_text():
	html = '<html><head><meta charset="iso-8859-1"></head><body>café</body></html>'
	res = Response(html.encode("iso-8859-1"), headers={"Content-Type": "text/html"})
	assert "café" in run(res.textConverted())


def test_missing_transcoder():
	body = Body(b"abc", transcoder=None)
	with pytest.raises(BodyError) as e:
		run(body.textConverted())
	assert e.value.kind is BodyErrorKind.MissingCapability
	assert not body.bodyUsed


def test_unknown_charset():
	with pytest.raises(BodyError) as e:
		convertBody(b"abc", {"Content-Type": "text/plain; charset=not-a-charset"})
	assert e.value.kind is BodyErrorKind.System


def test_custom_transcoder():
	calls: list[str] = []

	def transcode(data: bytes, charset: str) -> str:
		calls.append(charset)
		return data.decode("latin-1").upper()

	body = Body(b"abc", headers={"Content-Type": "text/plain;charset=latin-1"}, transcoder=transcode)
	assert run(body.textConverted()) == "ABC"
	assert calls == ["latin-1"]



def test_failing_transcoder():
	def transcode(data: bytes, charset: str) -> str:
		raise ValueError("unsupported")

	body = Body(b"abc", url="http://example.com", transcoder=transcode)
	with pytest.raises(BodyError) as e:
		run(body.textConverted())
	assert e.value.kind is BodyErrorKind.System
	assert isinstance(e.value.cause, ValueError)


# EOF
