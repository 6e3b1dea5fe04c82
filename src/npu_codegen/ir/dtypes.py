from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DType:
	"""Scalar dtype of a source IR tensor.

	Only the integer encodings produced by quantization are modelled, plus
	float32 so that unsupported graphs can still be expressed and rejected.
	"""

	name: str
	itemsize: int

	def __str__(self) -> str:  # pragma: no cover
		return self.name


uint8 = DType("uint8", 1)
int8 = DType("int8", 1)
int32 = DType("int32", 4)
float32 = DType("float32", 4)

_BY_NAME = {d.name: d for d in (uint8, int8, int32, float32)}


def as_dtype(value: DType | str) -> DType:
	if isinstance(value, DType):
		return value
	try:
		return _BY_NAME[str(value)]
	except KeyError:
		raise ValueError(f"Unknown dtype {value!r}") from None
