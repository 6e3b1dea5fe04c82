"""Reference accelerator support library: graph builder and compiler."""

from .compiler import (
    VARIANTS,
    CompilationOptions,
    CompiledNetwork,
    DebugInfo,
    InputBufferInfo,
    OutputBufferInfo,
    compile,
)
from .network import (
    ConcatenationInfo,
    Network,
    NotSupportedError,
    Operand,
    Operation,
    SplitInfo,
    TensorAndId,
    TensorsAndId,
    create_network,
)
from .tensor_info import UNRESOLVED, DataFormat, DataType, QuantizationInfo, TensorInfo, TensorShape, is_resolved

__all__ = [
    # tensor_info.py
    "DataType",
    "DataFormat",
    "QuantizationInfo",
    "TensorInfo",
    "TensorShape",
    "UNRESOLVED",
    "is_resolved",
    # network.py
    "Network",
    "Operand",
    "Operation",
    "TensorAndId",
    "TensorsAndId",
    "ConcatenationInfo",
    "SplitInfo",
    "NotSupportedError",
    "create_network",
    # compiler.py
    "VARIANTS",
    "CompilationOptions",
    "DebugInfo",
    "CompiledNetwork",
    "InputBufferInfo",
    "OutputBufferInfo",
    "compile",
]
