"""Reference accelerator graph builder.

The network is built one operation at a time. Each construction call returns
the produced operand(s) together with the operation id it was assigned;
compiled buffers later refer back to their producers by that id (and, for
multi-output operations, by output index).

The builder rejects configurations the hardware cannot run by raising
`NotSupportedError`. Callers are expected to translate that into their own
error type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Sequence

from .tensor_info import DataFormat, QuantizationInfo, TensorInfo

# Channel-axis concatenation and split operate on whole 16-channel bricks.
CHANNEL_BRICK = 16


class NotSupportedError(Exception):
    """Raised by the builder for a configuration it cannot represent."""

    pass


# =============================================================================
# Graph Objects
# =============================================================================


@dataclass(eq=False, slots=True)
class Operand:
    """Handle to a value produced inside a `Network`."""

    network: Network
    tensor_info: TensorInfo
    operation_id: int
    output_index: int = 0

    def __repr__(self) -> str:  # pragma: no cover
        return f"Operand(op={self.operation_id}, out={self.output_index}, dims={self.tensor_info.dimensions})"


@dataclass(slots=True)
class Operation:
    operation_id: int
    kind: str
    inputs: list[Operand]
    outputs: list[Operand] = field(default_factory=list)
    params: dict[str, object] = field(default_factory=dict)


class TensorAndId(NamedTuple):
    tensor: Operand
    operation_id: int


class TensorsAndId(NamedTuple):
    tensors: list[Operand]
    operation_id: int


@dataclass(frozen=True, slots=True)
class ConcatenationInfo:
    axis: int
    output_quantization_info: QuantizationInfo = QuantizationInfo()


@dataclass(frozen=True, slots=True)
class SplitInfo:
    axis: int
    sizes: tuple[int, ...]


# =============================================================================
# Network
# =============================================================================


@dataclass(eq=False)
class Network:
    """An accelerator graph under construction.

    Operations are appended in creation order; operation ids are their
    positions in that order.
    """

    operations: list[Operation] = field(default_factory=list)

    def _new_operation(self, kind: str, inputs: Sequence[Operand], **params: object) -> Operation:
        for operand in inputs:
            if operand.network is not self:
                raise NotSupportedError(f"{kind}: operand belongs to a different network")
        op = Operation(operation_id=len(self.operations), kind=kind, inputs=list(inputs), params=params)
        self.operations.append(op)
        return op

    def _add_outputs(self, op: Operation, infos: Sequence[TensorInfo]) -> list[Operand]:
        op.outputs = [Operand(self, info, op.operation_id, i) for i, info in enumerate(infos)]
        return op.outputs

    @property
    def inputs(self) -> list[Operation]:
        return [op for op in self.operations if op.kind == "Input"]

    @property
    def outputs(self) -> list[Operation]:
        return [op for op in self.operations if op.kind == "Output"]

    def add_input(self, info: TensorInfo) -> TensorAndId:
        _check_tensor_info("Input", info)
        op = self._new_operation("Input", [], tensor_info=info)
        (tensor,) = self._add_outputs(op, [info])
        return TensorAndId(tensor, op.operation_id)

    def add_output(self, operand: Operand) -> int:
        op = self._new_operation("Output", [operand])
        return op.operation_id

    def add_concatenation(self, inputs: Sequence[Operand], info: ConcatenationInfo) -> TensorAndId:
        if not inputs:
            raise NotSupportedError("Concatenation requires at least one input")
        if any(operand is None for operand in inputs):
            raise NotSupportedError("Concatenation inputs must be single tensors")
        first = inputs[0].tensor_info
        _check_axis("Concatenation", info.axis)
        for operand in inputs:
            ti = operand.tensor_info
            if ti.data_type != first.data_type:
                raise NotSupportedError("Concatenation inputs must share a data type")
            for i, (a, b) in enumerate(zip(ti.dimensions, first.dimensions)):
                if i != info.axis and a != b:
                    raise NotSupportedError(
                        f"Concatenation input dimensions must match outside axis {info.axis}: "
                        f"{ti.dimensions} vs {first.dimensions}"
                    )
            if info.axis == 3 and ti.dimensions[3] % CHANNEL_BRICK != 0:
                raise NotSupportedError(
                    f"Concatenation along channels requires multiples of {CHANNEL_BRICK}, "
                    f"got {ti.dimensions[3]}"
                )
        dims = list(first.dimensions)
        dims[info.axis] = sum(operand.tensor_info.dimensions[info.axis] for operand in inputs)
        out_info = TensorInfo(tuple(dims), first.data_type, DataFormat.NHWC, info.output_quantization_info)
        op = self._new_operation("Concatenation", inputs, axis=info.axis)
        (tensor,) = self._add_outputs(op, [out_info])
        return TensorAndId(tensor, op.operation_id)

    def add_split(self, operand: Operand, info: SplitInfo) -> TensorsAndId:
        ti = operand.tensor_info
        _check_axis("Split", info.axis)
        if not info.sizes or any(s <= 0 for s in info.sizes):
            raise NotSupportedError(f"Split sizes must be positive, got {list(info.sizes)}")
        if sum(info.sizes) != ti.dimensions[info.axis]:
            raise NotSupportedError(
                f"Split sizes {list(info.sizes)} do not add up to dimension {ti.dimensions[info.axis]}"
            )
        if info.axis == 3 and any(s % CHANNEL_BRICK != 0 for s in info.sizes):
            raise NotSupportedError(f"Split along channels requires multiples of {CHANNEL_BRICK}")
        infos = []
        for size in info.sizes:
            dims = list(ti.dimensions)
            dims[info.axis] = size
            infos.append(ti.replace(dimensions=tuple(dims), data_format=DataFormat.NHWC))
        op = self._new_operation("Split", [operand], axis=info.axis, sizes=info.sizes)
        return TensorsAndId(self._add_outputs(op, infos), op.operation_id)

    def summary(self) -> str:
        lines: list[str] = [f"Network(operations={len(self.operations)})"]
        for op in self.operations:
            ins = ", ".join(f"{o.operation_id}:{o.output_index}" for o in op.inputs)
            outs = ", ".join(str(o.tensor_info.dimensions) for o in op.outputs)
            lines.append(f"- #{op.operation_id} {op.kind}({ins}) -> [{outs}]")
        return "\n".join(lines)


def create_network() -> Network:
    return Network()


def _check_axis(kind: str, axis: int) -> None:
    if not 0 <= axis < 4:
        raise NotSupportedError(f"{kind} axis must be in [0, 4), got {axis}")


def _check_tensor_info(kind: str, info: TensorInfo) -> None:
    if len(info.dimensions) != 4:
        raise NotSupportedError(f"{kind} tensors must be 4D, got {info.dimensions}")
    if info.data_format not in (DataFormat.NHWC, DataFormat.NHWCB):
        raise NotSupportedError(f"{kind} tensors must be NHWC or NHWCB, got {info.data_format.name}")
