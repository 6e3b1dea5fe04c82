"""Reference accelerator compiler.

`compile` takes a finished `Network` and returns a list of candidate
`CompiledNetwork`s. Like the real thing, it is free to lay out input and
output buffers in whatever order suits it: buffers are placed largest
first, so the buffer order generally differs from the order in which the
inputs and outputs were added. Callers must use the operation ids carried by
each buffer info to map buffers back to their own numbering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from .network import Network, NotSupportedError
from .tensor_info import TensorInfo

logger = logging.getLogger(__name__)

VARIANTS = ("N77", "N57", "N37")


@dataclass(frozen=True, slots=True)
class DebugInfo:
    dump_ram: bool = False
    initial_sram_dump: bool = False
    dump_debug_files: bool = False
    debug_dir: str = "."


@dataclass(frozen=True, slots=True)
class CompilationOptions:
    """Flags understood by `compile`.

    Attributes:
        variant: Hardware variant name, one of `VARIANTS`.
        strategies: Enabled scheduling strategy numbers.
        block_configs: Enabled (width, height) block configurations.
    """

    variant: str = VARIANTS[0]
    strategies: frozenset[int] = frozenset({0, 1, 3, 4, 6, 7})
    block_configs: frozenset[tuple[int, int]] = frozenset({(16, 16), (32, 8), (8, 32), (8, 8)})
    enable_intermediate_compression: bool = True
    disable_winograd: bool = False
    enable_cascading: bool = False
    debug_info: DebugInfo = field(default_factory=DebugInfo)

    def __post_init__(self) -> None:
        if self.variant not in VARIANTS:
            raise ValueError(f"Unknown variant {self.variant!r}; expected one of {VARIANTS}")


class InputBufferInfo(NamedTuple):
    source_operation_id: int
    size: int
    tensor_info: TensorInfo


class OutputBufferInfo(NamedTuple):
    source_operation_id: int
    source_operation_output_index: int
    size: int
    tensor_info: TensorInfo


@dataclass(slots=True)
class CompiledNetwork:
    """A compiled command stream plus the layout of its I/O buffers."""

    variant: str
    input_buffers: list[InputBufferInfo]
    output_buffers: list[OutputBufferInfo]
    operation_count: int = 0

    def input_buffer_infos(self) -> list[InputBufferInfo]:
        return list(self.input_buffers)

    def output_buffer_infos(self) -> list[OutputBufferInfo]:
        return list(self.output_buffers)


def compile(network: Network, options: CompilationOptions) -> list[CompiledNetwork]:
    """Compile `network`, returning candidate compiled networks.

    An empty list means no candidate could be produced (e.g. the network has
    no outputs, or no strategy is enabled).
    """

    outputs = network.outputs
    if not outputs or not options.strategies or not options.block_configs:
        logger.warning(
            "No compilation candidates (outputs=%d, strategies=%d, block_configs=%d)",
            len(outputs),
            len(options.strategies),
            len(options.block_configs),
        )
        return []

    input_buffers = []
    for op in network.inputs:
        (tensor,) = op.outputs
        info = tensor.tensor_info
        input_buffers.append(InputBufferInfo(op.operation_id, info.nbytes, info))

    output_buffers = []
    for op in outputs:
        (source,) = op.inputs
        info = source.tensor_info
        if not info.resolved:
            raise NotSupportedError(f"Output from operation {source.operation_id} has no tensor info")
        output_buffers.append(OutputBufferInfo(source.operation_id, source.output_index, info.nbytes, info))

    # Largest buffers first; ties broken by latest producer first.
    input_buffers.sort(key=lambda b: (b.size, b.source_operation_id), reverse=True)
    output_buffers.sort(
        key=lambda b: (b.size, b.source_operation_id, b.source_operation_output_index),
        reverse=True,
    )

    logger.debug(
        "Compiled %d operations for %s: %d input buffers, %d output buffers",
        len(network.operations),
        options.variant,
        len(input_buffers),
        len(output_buffers),
    )
    return [CompiledNetwork(options.variant, input_buffers, output_buffers, len(network.operations))]
