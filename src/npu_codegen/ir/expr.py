from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

import numpy as np

from .dtypes import as_dtype
from .types import FuncType, TensorType, TupleType, Type


class IRValidationError(ValueError):
	pass


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Expr:
	"""Base class for IR nodes.

	Nodes are immutable and compared/hashed by identity: the same node may be
	referenced from several consumers (the graph is a DAG, not a tree), and
	passes attach derived state through dicts keyed by node rather than by
	mutating it.
	"""

	@property
	def kind(self) -> str:
		return self.__class__.__name__

	@property
	def checked_type(self) -> Type:
		raise NotImplementedError

	def children(self) -> tuple[Expr, ...]:
		"""Nodes this one consumes, in argument order."""
		return ()

	def __repr__(self) -> str:  # pragma: no cover
		return f"{self.kind}(#{id(self) & 0xFFFF:04x})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Var(Expr):
	name: str
	type_annotation: Type

	@property
	def checked_type(self) -> Type:
		return self.type_annotation

	def __repr__(self) -> str:  # pragma: no cover
		return f"Var({self.name})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Constant(Expr):
	data: np.ndarray

	@property
	def checked_type(self) -> Type:
		return TensorType.of(self.data.shape, as_dtype(self.data.dtype.name))

	def __repr__(self) -> str:  # pragma: no cover
		return f"Constant({self.data.tolist()!r})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Call(Expr):
	"""Application of a named operator.

	The result type is supplied by whoever builds the call (see `builder`),
	which is where per-operator type relations live.
	"""

	op: str
	args: tuple[Expr, ...]
	attrs: Mapping[str, Any] = field(default_factory=dict)
	result_type: Type | None = None

	@property
	def checked_type(self) -> Type:
		if self.result_type is None:
			raise IRValidationError(f"Call to {self.op!r} has no checked type")
		return self.result_type

	def children(self) -> tuple[Expr, ...]:
		return self.args

	def __repr__(self) -> str:  # pragma: no cover
		return f"Call({self.op})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Tuple(Expr):
	fields: tuple[Expr, ...]

	@property
	def checked_type(self) -> Type:
		return TupleType(tuple(f.checked_type for f in self.fields))

	def children(self) -> tuple[Expr, ...]:
		return self.fields

	def __repr__(self) -> str:  # pragma: no cover
		return f"Tuple(arity={len(self.fields)})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class TupleGetItem(Expr):
	tuple_value: Expr
	index: int

	def __post_init__(self) -> None:
		ty = self.tuple_value.checked_type
		if not isinstance(ty, TupleType):
			raise IRValidationError(f"TupleGetItem source must be tuple-typed, got {ty}")
		if not 0 <= self.index < len(ty.fields):
			raise IRValidationError(f"TupleGetItem index {self.index} out of range for arity {len(ty.fields)}")

	@property
	def checked_type(self) -> Type:
		ty = self.tuple_value.checked_type
		assert isinstance(ty, TupleType)
		return ty.fields[self.index]

	def children(self) -> tuple[Expr, ...]:
		return (self.tuple_value,)

	def __repr__(self) -> str:  # pragma: no cover
		return f"TupleGetItem({self.index})"


@dataclass(frozen=True, eq=False, slots=True, repr=False)
class Function(Expr):
	params: tuple[Var, ...]
	body: Expr
	attrs: Mapping[str, Any] = field(default_factory=dict)

	@property
	def checked_type(self) -> Type:
		return FuncType(tuple(p.checked_type for p in self.params), self.body.checked_type)

	@property
	def name(self) -> str | None:
		symbol = self.attrs.get("global_symbol")
		return None if symbol is None else str(symbol)

	def __repr__(self) -> str:  # pragma: no cover
		return f"Function({self.name or 'anonymous'})"


def walk(root: Expr) -> Iterator[Expr]:
	"""Yield every node reachable from `root` once, in pre-order.

	Nested functions are yielded but not entered.
	"""

	seen: set[int] = set()
	stack = [root]
	while stack:
		node = stack.pop()
		if id(node) in seen:
			continue
		seen.add(id(node))
		yield node
		stack.extend(reversed(node.children()))
