import asyncio

import pytest

from fetchbody import (
	Blob,
	Body,
	ByteStream,
	QueryString,
	Request,
	Response,
	clone,
	extractContentType,
	getTotalBytes,
	writeToStream,
)
from helpers import FormData, Sink


def run(coro):
	return asyncio.run(coro)


def test_content_type():
	assert extractContentType(None) is None
	assert extractContentType("text") == "text/plain;charset=UTF-8"
	assert extractContentType(12) == "text/plain;charset=UTF-8"
	assert (
		extractContentType(QueryString([("a", "b")]))
		== "application/x-www-form-urlencoded;charset=UTF-8"
	)
	assert extractContentType(Blob([b"x"], type="image/png")) == "image/png"
	assert extractContentType(Blob([b"x"])) is None
	assert extractContentType(b"x") is None
	assert extractContentType(bytearray(b"x")) is None
	assert extractContentType(memoryview(b"x")) is None
	assert (
		extractContentType(FormData({}, boundary="xyz"))
		== "multipart/form-data;boundary=xyz"
	)
	assert extractContentType(ByteStream()) is None


def test_message_headers():
	res = Response("hello", headers={"x-custom": "1"})
	assert res.header("X-Custom") == "1"
	assert res.header("content-type") == "text/plain;charset=UTF-8"
	res = Response("hello", headers={"content-type": "text/html"})
	assert res.headers["Content-Type"] == "text/html"
	assert Response(b"raw").header("Content-Type") is None
	assert Response(status=404).ok is False


def test_query_string_body():
	query = QueryString({"q": "a b"}).append("page", "2")
	assert query.get("page") == "2"
	assert query.get("missing") is None
	req = Request("http://example.com/search", "POST", query)
	assert req.header("Content-Type") == "application/x-www-form-urlencoded;charset=UTF-8"
	assert run(req.text()) == "q=a+b&page=2"


def test_set_header():
	req = Request("http://example.com", "POST", b"{}")
	assert req.setHeader("content-type", "application/json") is req
	assert req.headers["Content-Type"] == "application/json"
	# The body reads the headers of its owner
	assert req.content.contentType == "application/json"
	req.setHeader("Content-Length", 2)
	assert req.header("content-length") == "2"
	req.setHeader("Content-Length", None)
	assert "Content-Length" not in req.headers


def test_total_bytes():
	assert getTotalBytes(Body(None)) == 0
	assert getTotalBytes(Body(b"abcd")) == 4
	assert getTotalBytes(Body("é")) == 2
	assert getTotalBytes(Body(Blob([b"abc"]))) == 3
	form = FormData({"a": "1"})
	assert getTotalBytes(Body(form)) == len(form.encode())
	assert getTotalBytes(Body(ByteStream().push(b"abc"))) is None
	assert getTotalBytes(Response(b"abc")) == 3

	class Unknown(FormData):
		def hasKnownLength(self) -> bool:
			return False

	assert getTotalBytes(Body(Unknown({}))) is None


def test_clone_stream():
	async def produce():
		for chunk in (b"a", b"b", b"c"):
			await asyncio.sleep(0)
			yield chunk

	res = Response(produce(), url="http://example.com", status=201)
	copy = res.clone()
	assert copy.status == 201 and copy.url == res.url
	assert res.body is not copy.body

	async def main():
		return await asyncio.gather(res.buffer(), copy.text())

	assert run(main()) == [b"abc", "abc"]


def test_clone_shares_static_sources():
	body = Body(b"abc")
	assert clone(body) is body.source
	form = FormData({"a": "1"})
	body = Body(form)
	assert clone(body) is body.source
	assert clone(Body(None)) is None
	req = Request("http://example.com", "POST", "payload")
	copy = req.clone()
	assert run(req.text()) == run(copy.text()) == "payload"


def test_clone_after_use():
	res = Response(ByteStream().push(b"a").end())
	run(res.buffer())
	with pytest.raises(RuntimeError):
		res.clone()


def test_clone_propagates_errors():
	stream = ByteStream()
	res = Response(stream)
	copy = res.clone()
	stream.fail(ValueError("reset"))
	for message in (res, copy):
		with pytest.raises(Exception) as e:
			run(message.buffer())
		assert "reset" in str(e.value)


def test_request_body_with_get():
	with pytest.raises(ValueError):
		Request("http://example.com", "GET", "body")


def test_write_to_stream():
	sink = Sink()
	run(writeToStream(sink, Body(None)))
	assert sink.closed and not sink.data

	sink = Sink()
	run(writeToStream(sink, Request("http://example.com", "POST", b"abc")))
	assert sink.closed and bytes(sink.data) == b"abc"

	sink = Sink()
	run(writeToStream(sink, Body(Blob([b"blob"]))))
	assert sink.closed and bytes(sink.data) == b"blob"

	sink = Sink()
	run(writeToStream(sink, Body(iter([b"str", b"eam"]))))
	assert sink.closed and bytes(sink.data) == b"stream"

	form = FormData({"a": "1"})
	sink = Sink()
	run(writeToStream(sink, Body(form)))
	assert sink.closed and bytes(sink.data) == form.encode()


# EOF
