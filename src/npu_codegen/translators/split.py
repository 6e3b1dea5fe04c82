"""split(data, indices_or_sections, axis)"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from npu_codegen.errors import InvalidAttributeError
from npu_codegen.ir import Call, IRValidationError
from npu_codegen.ir.builder import split_sizes
from npu_codegen.support import UNRESOLVED, SplitInfo, TensorInfo, TensorsAndId

from .base import ConstructContext, DescriptorLookup, OperatorTranslator
from .common import normalize_axis, tensor_type, to_npu_dtype, to_npu_shape

OP_NAME = "split"


@dataclass(frozen=True, slots=True)
class SplitParams:
    input_info: TensorInfo
    split_info: SplitInfo


def _sizes(axis_size: int, indices_or_sections: int | Sequence[int]) -> list[int]:
    try:
        return split_sizes(axis_size, indices_or_sections)
    except IRValidationError as exc:
        raise InvalidAttributeError(str(exc)) from exc


def split_params(call: Call, output_info: TensorInfo) -> SplitParams:
    """Derive split parameters.

    Format and quantization of the input are those already known for the
    split's output; dimensions and data type come from the input's type.
    """

    if len(call.args) != 1:
        raise InvalidAttributeError(f"{OP_NAME} expects 1 argument, got {len(call.args)}")
    input_type = tensor_type(call.args[0])
    shape = to_npu_shape(input_type.shape)
    axis = normalize_axis(int(call.attrs.get("axis", 0)), input_type.rank)
    if "indices_or_sections" not in call.attrs:
        raise InvalidAttributeError(f"{OP_NAME} requires indices_or_sections")
    sizes = _sizes(shape[axis], call.attrs["indices_or_sections"])

    base = TensorInfo.placeholder() if output_info == UNRESOLVED else output_info
    input_info = base.replace(dimensions=shape, data_type=to_npu_dtype(input_type.dtype))
    return SplitParams(input_info, SplitInfo(axis, tuple(sizes)))


def _output_info(infos: list[TensorInfo]) -> TensorInfo:
    return infos[0] if infos else UNRESOLVED


def infer(call: Call, descriptors: DescriptorLookup) -> dict[int, list[TensorInfo]]:
    params = split_params(call, _output_info(descriptors(call)))
    return {0: [params.input_info]}


def construct(call: Call, ctx: ConstructContext) -> TensorsAndId:
    params = split_params(call, _output_info(ctx.descriptors(call)))
    operands = ctx.operands(call.args[0])
    if len(operands) != 1 or operands[0] is None:
        raise InvalidAttributeError(f"{OP_NAME} input must be a single tensor")
    return ctx.network.add_split(operands[0], params.split_info)


TRANSLATOR = OperatorTranslator(infer, construct)
