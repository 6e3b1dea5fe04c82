"""Compilation driver: IR function -> ordered compiled network."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from npu_codegen import support
from npu_codegen.config import CompilerConfig, current_config
from npu_codegen.errors import CodegenError, CompilationError, ReconciliationError
from npu_codegen.ir import Expr, Function
from npu_codegen.passes import NetworkWithIds, construct_network
from npu_codegen.support import CompilationOptions, CompiledNetwork, Network

logger = logging.getLogger(__name__)

CompileFn = Callable[[Network, CompilationOptions], "list[CompiledNetwork]"]


@dataclass(slots=True)
class OrderedCompiledNetwork:
    """A compiled network with the mapping back to caller I/O order.

    Attributes:
        name: Symbol the network is exported under.
        compiled_network: The compiler's artifact.
        inputs: For each compiled input buffer, the caller's input position.
        outputs: For each compiled output buffer, the caller's output position.
    """

    name: str
    compiled_network: CompiledNetwork
    inputs: list[int] = field(default_factory=list)
    outputs: list[int] = field(default_factory=list)


def get_input_output_order(
    network: NetworkWithIds, compiled_network: CompiledNetwork
) -> tuple[list[int], list[int]]:
    """Match compiled buffers to caller positions via their source operations.

    Raises:
        ReconciliationError: If a buffer refers to an operation that was not
            recorded as a network input/output during construction.
    """

    input_order: list[int] = []
    for info in compiled_network.input_buffer_infos():
        try:
            input_order.append(network.input_ids[info.source_operation_id])
        except KeyError:
            raise ReconciliationError(
                f"compiled input buffer refers to unknown operation {info.source_operation_id}"
            ) from None

    output_order: list[int] = []
    for info in compiled_network.output_buffer_infos():
        key = (info.source_operation_id, info.source_operation_output_index)
        try:
            output_order.append(network.output_ids[key])
        except KeyError:
            raise ReconciliationError(f"compiled output buffer refers to unknown operation output {key}") from None

    return input_order, output_order


@dataclass
class NPUCompiler:
    """Drives lowering and compilation of IR functions.

    `compile_fn` is the accelerator compiler; `config` overrides the flags
    from the active `config_context` when given.
    """

    compile_fn: CompileFn = support.compile
    config: CompilerConfig | None = None

    def create_options(self) -> CompilationOptions:
        config = self.config if self.config is not None else current_config()
        options = config.to_options()
        logger.debug("Compilation options: %s", options)
        return options

    def compile_function(self, func: Function, name: str | None = None) -> OrderedCompiledNetwork:
        name = name or func.name
        if not name:
            raise CodegenError("function has no name to export", func)

        logger.info("Compiling %s", name)
        network_with_ids = construct_network(func)
        options = self.create_options()

        candidates = self.compile_fn(network_with_ids.network, options)
        if not candidates:
            err = CompilationError(f"accelerator compiler produced no candidates for {name}", func)
            logger.error("%s", err)
            raise err
        # The first candidate is used; the rest are not inspected.
        compiled_network = candidates[0]

        inputs, outputs = get_input_output_order(network_with_ids, compiled_network)
        logger.info("Compiled %s: input order %s, output order %s", name, inputs, outputs)
        return OrderedCompiledNetwork(name, compiled_network, inputs, outputs)

    def compile_external(self, ref: Expr) -> list[OrderedCompiledNetwork]:
        """Compile a function handed over for external code generation.

        The function must carry a `global_symbol` attribute; the compiled
        network is exported under that name.
        """

        if not isinstance(ref, Function):
            raise CodegenError("expected an IR function for external compilation", ref)
        if ref.name is None:
            raise CodegenError("failed to retrieve the external symbol of the function", ref)
        return [self.compile_function(ref, ref.name)]


def compile_function(func: Function, name: str | None = None, **kwargs) -> OrderedCompiledNetwork:
    return NPUCompiler(**kwargs).compile_function(func, name)
