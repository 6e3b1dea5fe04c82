from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from .dtypes import DType, as_dtype

Shape = tuple[int, ...]


def as_shape(dims: Iterable[int]) -> Shape:
	return tuple(int(d) for d in dims)


@dataclass(frozen=True, slots=True)
class TensorType:
	"""Static type of a single tensor value."""

	shape: Shape
	dtype: DType

	@classmethod
	def of(cls, shape: Iterable[int], dtype: DType | str) -> TensorType:
		return cls(as_shape(shape), as_dtype(dtype))

	@property
	def rank(self) -> int:
		return len(self.shape)

	def __str__(self) -> str:  # pragma: no cover
		return f"Tensor[{self.shape}, {self.dtype}]"


@dataclass(frozen=True, slots=True)
class TupleType:
	"""Static type of a tuple value; fields may themselves be tuples."""

	fields: tuple[Type, ...]

	def __len__(self) -> int:
		return len(self.fields)

	def __str__(self) -> str:  # pragma: no cover
		return "(" + ", ".join(str(f) for f in self.fields) + ")"


Type = Union[TensorType, TupleType]


def num_values(ty: Type) -> int:
	"""Number of values a node of type `ty` produces at the top level."""

	if isinstance(ty, TupleType):
		return len(ty.fields)
	return 1


@dataclass(frozen=True, slots=True)
class FuncType:
	params: tuple[Type, ...]
	ret: Type
