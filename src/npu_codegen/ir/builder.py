"""Typed constructors for IR nodes.

Every node built here carries a resolved static type, which is the
precondition the lowering passes start from. Operator builders compute the
result type of the call the way the frontend's type relations would.
"""

from __future__ import annotations

from numbers import Integral
from typing import Any, Iterable, Sequence

import numpy as np

from .dtypes import DType, uint8
from .expr import Call, Constant, Expr, Function, IRValidationError, Tuple, TupleGetItem, Var
from .types import TensorType, TupleType, Type


def var(name: str, shape: Iterable[int] | None = None, dtype: DType | str = uint8, *, ty: Type | None = None) -> Var:
	if ty is None:
		if shape is None:
			raise IRValidationError("var() needs either a shape or an explicit type")
		ty = TensorType.of(shape, dtype)
	return Var(name, ty)


def const(value: Any, dtype: str | None = None) -> Constant:
	return Constant(np.asarray(value, dtype=dtype))


def tuple_(*fields: Expr) -> Tuple:
	return Tuple(tuple(fields))


def get_item(value: Expr, index: int) -> TupleGetItem:
	return TupleGetItem(value, index)


def function(params: Sequence[Var], body: Expr, *, name: str | None = None, **attrs: Any) -> Function:
	if name is not None:
		attrs["global_symbol"] = name
	return Function(tuple(params), body, attrs)


def call(op: str, args: Sequence[Expr], result_type: Type, **attrs: Any) -> Call:
	"""Build a call to an arbitrary operator with an explicitly given type."""
	return Call(op, tuple(args), attrs, result_type)


def _normalize_axis(axis: int, rank: int) -> int:
	if not -rank <= axis < rank:
		raise IRValidationError(f"axis {axis} out of range for rank {rank}")
	return axis % rank


def _tensor_type(e: Expr) -> TensorType:
	ty = e.checked_type
	if not isinstance(ty, TensorType):
		raise IRValidationError(f"Expected a tensor-typed value, got {ty}")
	return ty


def concatenate(
	data: Sequence[Expr] | Expr,
	input_scales: Sequence[float],
	input_zero_points: Sequence[int],
	output_scale: float,
	output_zero_point: int,
	*,
	axis: int = 0,
) -> Call:
	"""Quantized concatenation (`qnn.concatenate`).

	`data` is either an existing tuple-typed node or a sequence of tensors,
	which is wrapped in a Tuple node.
	"""

	if not isinstance(data, Expr):
		data = tuple_(*data)
	ty = data.checked_type
	if not isinstance(ty, TupleType) or not ty.fields:
		raise IRValidationError("concatenate expects a non-empty tuple of tensors")
	fields = []
	for f in ty.fields:
		if not isinstance(f, TensorType):
			raise IRValidationError("concatenate fields must be tensors")
		fields.append(f)
	first = fields[0]
	rank = first.rank
	ax = _normalize_axis(axis, rank)
	for f in fields[1:]:
		if f.rank != rank or f.dtype != first.dtype:
			raise IRValidationError("concatenate fields must agree in rank and dtype")
		if any(a != b for i, (a, b) in enumerate(zip(f.shape, first.shape)) if i != ax):
			raise IRValidationError(f"concatenate shape mismatch outside axis {ax}: {f.shape} vs {first.shape}")
	out_shape = list(first.shape)
	out_shape[ax] = sum(f.shape[ax] for f in fields)

	args = (
		data,
		tuple_(*(const(s, "float32") for s in input_scales)),
		tuple_(*(const(z, "int32") for z in input_zero_points)),
		const(output_scale, "float32"),
		const(output_zero_point, "int32"),
	)
	return Call("qnn.concatenate", args, {"axis": axis}, TensorType.of(out_shape, first.dtype))


def split_sizes(axis_size: int, indices_or_sections: int | Sequence[int]) -> list[int]:
	"""Sizes of the pieces produced by splitting an axis of `axis_size`."""

	if isinstance(indices_or_sections, Integral):
		sections = int(indices_or_sections)
		if sections <= 0 or axis_size % sections != 0:
			raise IRValidationError(f"cannot split axis of size {axis_size} into {sections} equal sections")
		return [axis_size // sections] * sections
	sizes = []
	last = 0
	for index in indices_or_sections:
		index = int(index)
		if index < last or index > axis_size:
			raise IRValidationError(f"split indices must be increasing and within {axis_size}, got {list(indices_or_sections)}")
		sizes.append(index - last)
		last = index
	sizes.append(axis_size - last)
	return sizes


def split(data: Expr, indices_or_sections: int | Sequence[int], *, axis: int = 0) -> Call:
	ty = _tensor_type(data)
	ax = _normalize_axis(axis, ty.rank)
	if not isinstance(indices_or_sections, Integral):
		indices_or_sections = tuple(int(i) for i in indices_or_sections)
	fields = []
	for size in split_sizes(ty.shape[ax], indices_or_sections):
		shape = list(ty.shape)
		shape[ax] = size
		fields.append(TensorType.of(shape, ty.dtype))
	attrs = {"indices_or_sections": indices_or_sections, "axis": axis}
	return Call("split", (data,), attrs, TupleType(tuple(fields)))
