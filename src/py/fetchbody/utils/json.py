from typing import Any, TypeAlias, cast
import json as basejson

# TODO: We do want to use ORJSON when available: https://github.com/tktech/json_benchmark

TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def unjson(value: bytes | str) -> TJSON:
	"""Parses JSON-encoded text or UTF-8 bytes."""
	return cast(TJSON, basejson.loads(value))


# EOF
