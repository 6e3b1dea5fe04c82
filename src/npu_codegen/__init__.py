"""npu-codegen: lower graph IR functions onto an accelerator network.

Two passes over the function graph (tensor inference, then network
construction) produce the accelerator network; the compiled result is then
paired with the permutations that map its buffers back to the caller's
parameter and result order.
"""

from .codegen import NPUCompiler, OrderedCompiledNetwork, compile_function, get_input_output_order
from .config import CompilerConfig, config_context, current_config
from .errors import (
    AcceleratorRejectedError,
    CodegenError,
    CompilationError,
    InvalidAttributeError,
    ReconciliationError,
    UnsupportedOperatorError,
)
from .passes import NetworkWithIds, construct_network, infer_tensors

__all__ = [
    "NPUCompiler",
    "OrderedCompiledNetwork",
    "compile_function",
    "get_input_output_order",
    "CompilerConfig",
    "config_context",
    "current_config",
    "CodegenError",
    "UnsupportedOperatorError",
    "InvalidAttributeError",
    "AcceleratorRejectedError",
    "CompilationError",
    "ReconciliationError",
    "NetworkWithIds",
    "construct_network",
    "infer_tensors",
]
