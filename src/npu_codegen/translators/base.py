"""Operator translator interface and registry.

A translator is a pair of pure functions for one source operator:

- ``infer(call, descriptors)`` derives descriptors for the call's arguments
  from what is already known (descriptors flow from consumers back to
  producers) and returns them keyed by argument index.
- ``construct(call, ctx)`` adds the operator to the accelerator network using
  the operands already built for its arguments and returns what it produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, NamedTuple

from npu_codegen.errors import CodegenError, UnsupportedOperatorError
from npu_codegen.ir import Call, Expr
from npu_codegen.support import Network, Operand, TensorInfo, TensorsAndId

DescriptorLookup = Callable[[Expr], "list[TensorInfo]"]


@dataclass(slots=True)
class ConstructContext:
    """What a construct rule may consult while building its operation."""

    network: Network
    descriptor_table: Mapping[Expr, list[TensorInfo]]
    operand_table: Mapping[Expr, list[Operand | None]]

    def descriptors(self, node: Expr) -> list[TensorInfo]:
        return list(self.descriptor_table.get(node, ()))

    def operands(self, node: Expr) -> list[Operand | None]:
        try:
            return list(self.operand_table[node])
        except KeyError:
            raise CodegenError("no operands have been built for this value", node) from None


class OperatorTranslator(NamedTuple):
    infer: Callable[[Call, DescriptorLookup], dict[int, list[TensorInfo]]]
    construct: Callable[[Call, ConstructContext], TensorsAndId]


_REGISTRY: dict[str, OperatorTranslator] = {}


def register_translator(op_name: str, translator: OperatorTranslator) -> OperatorTranslator:
    if op_name in _REGISTRY:
        raise ValueError(f"A translator for {op_name!r} is already registered")
    _REGISTRY[op_name] = translator
    return translator


def is_supported(op_name: str) -> bool:
    return op_name in _REGISTRY


def supported_operators() -> list[str]:
    return sorted(_REGISTRY)


def get_translator(call: Call) -> OperatorTranslator:
    try:
        return _REGISTRY[call.op]
    except KeyError:
        raise UnsupportedOperatorError(f"unknown operator {call.op!r}", call) from None
