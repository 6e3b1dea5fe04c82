"""Conversions from source IR types and constants to accelerator descriptors."""

from __future__ import annotations

from typing import Sequence

from npu_codegen.errors import InvalidAttributeError
from npu_codegen.ir import Constant, Expr, TensorType, Tuple
from npu_codegen.ir.dtypes import DType
from npu_codegen.support import DataType, TensorShape

MAX_RANK = 4

_DTYPES = {
    "uint8": DataType.UINT8_QUANTIZED,
    "int8": DataType.INT8_QUANTIZED,
    "int32": DataType.INT32_QUANTIZED,
}


def to_npu_shape(shape: Sequence[int]) -> TensorShape:
    """Map a source shape onto NHWC, padding missing trailing dims with 1."""

    if len(shape) > MAX_RANK:
        raise InvalidAttributeError(f"array size={len(shape)}, array size must be <= {MAX_RANK}")
    dims = [1] * MAX_RANK
    for i, d in enumerate(shape):
        dims[i] = int(d)
    if dims[0] != 1:
        raise InvalidAttributeError(f"batch size={dims[0]}, batch size must = 1")
    return tuple(dims)  # type: ignore[return-value]


def to_npu_dtype(dtype: DType) -> DataType:
    try:
        return _DTYPES[dtype.name]
    except KeyError:
        raise InvalidAttributeError(f"dtype={dtype.name}, dtype must be either uint8, int8 or int32") from None


def tensor_type(e: Expr) -> TensorType:
    ty = e.checked_type
    if not isinstance(ty, TensorType):
        raise InvalidAttributeError(f"expected a tensor-typed argument, got {ty}")
    return ty


def as_constant(e: Expr, kind: type[int] | type[float]) -> int | float:
    """Extract a scalar from a constant node."""

    if not isinstance(e, Constant):
        raise InvalidAttributeError(f"expected a constant, got {e!r}")
    if e.data.size != 1:
        raise InvalidAttributeError(f"expected a scalar constant, got shape {e.data.shape}")
    return kind(e.data.item())


def tuple_fields(e: Expr, what: str) -> tuple[Expr, ...]:
    if not isinstance(e, Tuple):
        raise InvalidAttributeError(f"{what} must be a tuple, got {e!r}")
    return e.fields


def normalize_axis(axis: int, rank: int) -> int:
    if not -rank <= axis < rank:
        raise InvalidAttributeError(f"axis={axis}, axis must be in [{-rank}, {rank})")
    return axis % rank
