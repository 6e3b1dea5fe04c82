"""qnn.concatenate(data, input_scales, input_zero_points, output_scale, output_zero_point)"""

from __future__ import annotations

from dataclasses import dataclass

from npu_codegen.errors import InvalidAttributeError
from npu_codegen.ir import Call, TupleType
from npu_codegen.support import ConcatenationInfo, DataFormat, QuantizationInfo, TensorInfo, TensorsAndId

from .base import ConstructContext, DescriptorLookup, OperatorTranslator
from .common import as_constant, normalize_axis, to_npu_dtype, to_npu_shape, tuple_fields

OP_NAME = "qnn.concatenate"


@dataclass(frozen=True, slots=True)
class ConcatenateParams:
    input_infos: tuple[TensorInfo, ...]
    concat_info: ConcatenationInfo


def concatenate_params(call: Call) -> ConcatenateParams:
    if len(call.args) != 5:
        raise InvalidAttributeError(f"{OP_NAME} expects 5 arguments, got {len(call.args)}")
    data, scales, zero_points, output_scale, output_zero_point = call.args

    data_type = data.checked_type
    if not isinstance(data_type, TupleType):
        raise InvalidAttributeError(f"{OP_NAME} data must be tuple-typed, got {data_type}")
    scale_fields = tuple_fields(scales, "input_scales")
    zero_point_fields = tuple_fields(zero_points, "input_zero_points")
    if not len(data_type.fields) == len(scale_fields) == len(zero_point_fields):
        raise InvalidAttributeError(
            f"{OP_NAME} has {len(data_type.fields)} inputs but {len(scale_fields)} scales "
            f"and {len(zero_point_fields)} zero points"
        )

    input_infos = []
    for field_type, scale, zero_point in zip(data_type.fields, scale_fields, zero_point_fields):
        if isinstance(field_type, TupleType):
            raise InvalidAttributeError(f"{OP_NAME} inputs must be tensors, not tuples")
        input_infos.append(
            TensorInfo(
                to_npu_shape(field_type.shape),
                to_npu_dtype(field_type.dtype),
                DataFormat.NHWC,
                QuantizationInfo(int(as_constant(zero_point, int)), float(as_constant(scale, float))),
            )
        )

    rank = data_type.fields[0].rank if data_type.fields else 0
    axis = normalize_axis(int(call.attrs.get("axis", 0)), rank)
    output_quantization = QuantizationInfo(
        int(as_constant(output_zero_point, int)), float(as_constant(output_scale, float))
    )
    return ConcatenateParams(tuple(input_infos), ConcatenationInfo(axis, output_quantization))


def infer(call: Call, descriptors: DescriptorLookup) -> dict[int, list[TensorInfo]]:
    params = concatenate_params(call)
    return {0: list(params.input_infos)}


def construct(call: Call, ctx: ConstructContext) -> TensorsAndId:
    params = concatenate_params(call)
    layers = ctx.operands(call.args[0])
    tensor, operation_id = ctx.network.add_concatenation(layers, params.concat_info)
    return TensorsAndId([tensor], operation_id)


TRANSLATOR = OperatorTranslator(infer, construct)
