"""Network construction pass.

Walks a function forward through the data flow and builds the equivalent
accelerator network. Alongside the network it records, for every node, the
operands it produced and the (operation id, output index) of each, and it
numbers the network's inputs and outputs in the order the caller passes
parameters and receives results. Those numbers are what later reconciles
the compiled network's own buffer order with the caller's.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from typing import Iterator

from npu_codegen.errors import AcceleratorRejectedError, CodegenError
from npu_codegen.ir import Call, Expr, Function, Tuple, TupleGetItem
from npu_codegen.support import Network, NotSupportedError, Operand, TensorInfo, create_network, is_resolved
from npu_codegen.translators import ConstructContext, get_translator

from .infer import DescriptorTable, infer_tensors

logger = logging.getLogger(__name__)

OperationKey = tuple[int, int]


@dataclass
class NetworkWithIds:
    """A constructed network plus the caller-order numbering of its I/O.

    Attributes:
        network: The accelerator network.
        input_ids: Input operation id -> caller input position.
        output_ids: (operation id, output index) -> caller output position.
        inputs: Input operands in caller order.
        outputs: Output operands in caller order.
    """

    network: Network
    input_ids: dict[int, int] = field(default_factory=dict)
    output_ids: dict[OperationKey, int] = field(default_factory=dict)
    inputs: list[Operand] = field(default_factory=list)
    outputs: list[Operand] = field(default_factory=list)


@contextlib.contextmanager
def _reported(node: Expr) -> Iterator[None]:
    """Turn builder rejections and translator errors into node-attributed errors."""
    try:
        yield
    except NotSupportedError as exc:
        err = AcceleratorRejectedError(str(exc), node)
        logger.error("Network construction failed: %s", err)
        raise err from exc
    except CodegenError as err:
        if err.node is None:
            err.node = node
        logger.error("Network construction failed: %s", err)
        raise


@dataclass
class ConstructNetworkPass:
    """Builds a fresh network for one function.

    State lives on the instance only for the duration of `run`; every call
    starts from empty tables and a new network.
    """

    descriptors: DescriptorTable = field(default_factory=dict)
    operands: dict[Expr, list[Operand | None]] = field(default_factory=dict)
    ids: dict[Expr, list[OperationKey | None]] = field(default_factory=dict)
    network: Network | None = None

    def run(self, func: Function, descriptors: DescriptorTable | None = None) -> NetworkWithIds:
        # Inference runs to completion before anything is built.
        self.descriptors = infer_tensors(func.body) if descriptors is None else descriptors
        self.operands = {}
        self.ids = {}
        self.network = create_network()
        result = NetworkWithIds(self.network)

        for param in func.params:
            self._add_inputs(param, result)

        self._visit_body(func.body)

        body_operands = self.operands.get(func.body, [])
        body_ids = self.ids.get(func.body, [])
        for position, (operand, key) in enumerate(zip(body_operands, body_ids)):
            if operand is None or key is None:
                raise CodegenError("function results must be single tensors", func.body)
            if key in result.output_ids:
                raise CodegenError(f"operation output {key} is returned more than once", func.body)
            with _reported(func.body):
                self.network.add_output(operand)
            result.output_ids[key] = position
            result.outputs.append(operand)

        logger.info(
            "Constructed network: %d operations, %d inputs, %d outputs",
            len(self.network.operations),
            len(result.inputs),
            len(result.outputs),
        )
        return result

    def _resolved_descriptors(self, node: Expr) -> list[TensorInfo]:
        infos = self.descriptors.get(node)
        if infos is None or not infos or not is_resolved(infos):
            raise CodegenError("tensor information has not been inferred for this value", node)
        return infos

    def _add_inputs(self, param: Expr, result: NetworkWithIds) -> None:
        assert self.network is not None
        # A tuple-typed parameter becomes one network input per field; a
        # parameter the body never reads has no entry and adds no inputs.
        if param not in self.descriptors:
            logger.debug("parameter %r is unused", param)
            return
        for info in self._resolved_descriptors(param):
            with _reported(param):
                tensor, operation_id = self.network.add_input(info)
            self.operands.setdefault(param, []).append(tensor)
            self.ids.setdefault(param, []).append((operation_id, 0))
            result.input_ids[operation_id] = len(result.inputs)
            result.inputs.append(tensor)

    def _visit_body(self, body: Expr) -> None:
        """Visit every node after all of the nodes it consumes."""
        done: set[Expr] = set()
        stack: list[tuple[Expr, bool]] = [(body, False)]
        while stack:
            node, expanded = stack.pop()
            if node in done:
                continue
            # Nested functions are leaves: never entered, never built.
            if expanded or isinstance(node, Function) or not node.children():
                self._visit(node)
                done.add(node)
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children()) if child not in done)

    def _visit(self, node: Expr) -> None:
        if isinstance(node, Call):
            self._visit_call(node)
        elif isinstance(node, Tuple):
            self._visit_tuple(node)
        elif isinstance(node, TupleGetItem):
            self._visit_get_item(node)

    def _visit_call(self, call: Call) -> None:
        assert self.network is not None
        with _reported(call):
            infos = self._resolved_descriptors(call)
            translator = get_translator(call)
            ctx = ConstructContext(self.network, self.descriptors, self.operands)
            tensors, operation_id = translator.construct(call, ctx)
            if len(tensors) != len(infos):
                raise CodegenError(f"built {len(tensors)} outputs but {len(infos)} were inferred")
        logger.debug("construct %r -> operation %d (%d outputs)", call, operation_id, len(tensors))
        self.operands[call] = list(tensors)
        self.ids[call] = [(operation_id, i) for i in range(len(tensors))]

    def _visit_tuple(self, node: Tuple) -> None:
        # Pure relabelling; no operations are added. Fields that are not a
        # single tensor (nested tuples) get a placeholder.
        operands: list[Operand | None] = []
        ids: list[OperationKey | None] = []
        for f in node.fields:
            field_operands = self.operands.get(f, [])
            if len(field_operands) == 1:
                operands.append(field_operands[0])
                ids.append(self.ids[f][0])
            else:
                operands.append(None)
                ids.append(None)
        self.operands[node] = operands
        self.ids[node] = ids

    def _visit_get_item(self, node: TupleGetItem) -> None:
        source = node.tuple_value
        if source not in self.operands:
            raise CodegenError("tuple value has no operands", node)
        self.operands[node] = [self.operands[source][node.index]]
        self.ids[node] = [self.ids[source][node.index]]


def construct_network(func: Function, descriptors: DescriptorTable | None = None) -> NetworkWithIds:
    """Build the accelerator network for `func`."""
    return ConstructNetworkPass().run(func, descriptors)
