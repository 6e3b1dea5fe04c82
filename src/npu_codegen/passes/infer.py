"""Tensor inference pass.

Computes, for every node reachable from an expression, the accelerator
descriptor of each value the node produces. Descriptors flow against the
data flow: the expression's own outputs are seeded first and each operator
translator derives the descriptors of its arguments from what is known
about the call.

Tuples make the order of visits matter. A tuple-typed producer (for example
a split) is only fully described once every projection out of it has
reported its field, so a node is visited only when all of its descriptors
are resolved; until then it is skipped and picked up again from whichever
path completes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from npu_codegen.errors import CodegenError
from npu_codegen.ir import Call, Expr, Tuple, TupleGetItem, TupleType, num_values
from npu_codegen.support import UNRESOLVED, TensorInfo, is_resolved
from npu_codegen.translators import get_translator

logger = logging.getLogger(__name__)

DescriptorTable = dict[Expr, list[TensorInfo]]


@dataclass(slots=True)
class InferTensorsPass:
    """Builds a descriptor table for one expression.

    The table is keyed by node identity; shared nodes get a single entry no
    matter how many consumers reference them. Each node is visited at most
    once, which also bounds the walk on graphs with shared substructure.
    """

    def run(self, expr: Expr) -> DescriptorTable:
        table: DescriptorTable = {
            expr: [TensorInfo.placeholder() for _ in range(num_values(expr.checked_type))]
        }
        visited: set[Expr] = set()

        # Explicit stack; children are pushed in reverse so they are
        # visited in argument order, as a recursive pre-order walk would.
        stack = [expr]
        while stack:
            node = stack.pop()
            if node in visited or not self._inferred(table, node):
                continue
            visited.add(node)
            logger.debug("infer %r: %s", node, table[node])
            stack.extend(reversed(self._visit(node, table)))

        logger.debug("Inferred descriptors for %d nodes", len(table))
        return table

    @staticmethod
    def _inferred(table: DescriptorTable, node: Expr) -> bool:
        infos = table.get(node)
        return infos is not None and is_resolved(infos)

    def _visit(self, node: Expr, table: DescriptorTable) -> tuple[Expr, ...]:
        if isinstance(node, Call):
            return self._visit_call(node, table)
        if isinstance(node, Tuple):
            for field, info in zip(node.fields, table[node]):
                table[field] = [info]
            return node.fields
        if isinstance(node, TupleGetItem):
            return self._visit_get_item(node, table)
        # Vars, constants and nested functions only carry their own entry.
        return ()

    def _visit_call(self, call: Call, table: DescriptorTable) -> tuple[Expr, ...]:
        try:
            translator = get_translator(call)
            derived = translator.infer(call, lambda e: list(table.get(e, ())))
        except CodegenError as err:
            if err.node is None:
                err.node = call
            logger.error("Tensor inference failed: %s", err)
            raise
        for index, infos in derived.items():
            table[call.args[index]] = list(infos)
        return call.args

    def _visit_get_item(self, node: TupleGetItem, table: DescriptorTable) -> tuple[Expr, ...]:
        # The source is not necessarily a Tuple node; any tuple-typed value
        # (a variable, a multi-output call) can be projected from.
        source = node.tuple_value
        if source not in table:
            ty = source.checked_type
            assert isinstance(ty, TupleType)
            table[source] = [UNRESOLVED] * len(ty.fields)
        table[source][node.index] = table[node][0]
        return (source,)


def infer_tensors(expr: Expr) -> DescriptorTable:
    """Return the descriptor table for everything reachable from `expr`."""
    return InferTensorsPass().run(expr)
