from .dtypes import DType, float32, int8, int32, uint8
from .expr import Call, Constant, Expr, Function, IRValidationError, Tuple, TupleGetItem, Var, walk
from .types import FuncType, TensorType, TupleType, Type, num_values

__all__ = [
    "DType",
    "uint8",
    "int8",
    "int32",
    "float32",
    "Expr",
    "Var",
    "Constant",
    "Call",
    "Tuple",
    "TupleGetItem",
    "Function",
    "IRValidationError",
    "walk",
    "TensorType",
    "TupleType",
    "FuncType",
    "Type",
    "num_values",
]
