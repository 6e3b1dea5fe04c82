import pytest

from npu_codegen.errors import InvalidAttributeError, UnsupportedOperatorError
from npu_codegen.ir import TensorType, TupleType, builder as ir, walk
from npu_codegen.passes import infer_tensors
from npu_codegen.support import UNRESOLVED, DataFormat, DataType, QuantizationInfo, TensorInfo


def _assert_fully_resolved(table) -> None:
    for node, infos in table.items():
        assert infos, node
        assert UNRESOLVED not in infos, node


def test_concatenate_assigns_input_descriptors() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    y = ir.var("y", (1, 4, 4, 16))
    body = ir.concatenate([x, y], [0.5, 0.25], [10, 20], 0.125, 3, axis=0)

    table = infer_tensors(body)

    assert table[x] == [TensorInfo((1, 4, 4, 16), DataType.UINT8_QUANTIZED, DataFormat.NHWC, QuantizationInfo(10, 0.5))]
    assert table[y] == [TensorInfo((1, 4, 4, 16), DataType.UINT8_QUANTIZED, DataFormat.NHWC, QuantizationInfo(20, 0.25))]
    # Body is seeded, data tuple carries one descriptor per field.
    assert table[body] == [TensorInfo.placeholder()]
    assert len(table[body.args[0]]) == 2
    _assert_fully_resolved(table)


def test_split_pushes_output_descriptor_backward() -> None:
    x = ir.var("x", (1, 4, 4, 48), "int8")
    body = ir.split(x, 3, axis=3)

    table = infer_tensors(body)

    assert len(table[body]) == 3
    (info,) = table[x]
    assert info.dimensions == (1, 4, 4, 48)
    assert info.data_type == DataType.INT8_QUANTIZED
    # Format and quantization come from the split's own output descriptor.
    assert info.data_format == table[body][0].data_format
    assert info.quantization_info == table[body][0].quantization_info
    _assert_fully_resolved(table)


def test_lower_rank_shapes_are_padded() -> None:
    x = ir.var("x", (1, 8))
    body = ir.split(x, 2, axis=1)
    table = infer_tensors(body)
    assert table[x][0].dimensions == (1, 8, 1, 1)


def test_tuple_round_trip() -> None:
    a = ir.var("a", (1, 2, 2, 16))
    b = ir.var("b", (1, 2, 2, 16))
    t = ir.tuple_(a, b)
    first, second = ir.get_item(t, 0), ir.get_item(t, 1)
    body = ir.concatenate([first, second], [1.0, 2.0], [0, 7], 1.0, 0, axis=1)

    table = infer_tensors(body)

    assert table[second] == table[b]
    assert table[first] == table[a]
    assert table[b][0].quantization_info == QuantizationInfo(7, 2.0)
    assert len(table[t]) == 2
    _assert_fully_resolved(table)


def test_split_waits_for_every_projection() -> None:
    x = ir.var("x", (1, 6, 4, 16))
    s = ir.split(x, 3, axis=1)
    body = ir.tuple_(ir.get_item(s, 2), ir.get_item(s, 0), ir.get_item(s, 1))

    table = infer_tensors(body)

    assert len(table[s]) == 3
    assert x in table
    _assert_fully_resolved(table)


def test_partially_projected_tuple_is_not_visited() -> None:
    x = ir.var("x", (1, 6, 4, 16))
    s = ir.split(x, 3, axis=1)
    body = ir.get_item(s, 0)

    table = infer_tensors(body)

    assert table[s][0] == TensorInfo.placeholder()
    assert table[s][1:] == [UNRESOLVED, UNRESOLVED]
    assert x not in table


def test_shared_nodes_get_one_entry() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    s = ir.split(x, 2, axis=1)
    g0, g1 = ir.get_item(s, 0), ir.get_item(s, 1)
    c = ir.concatenate([g0, g1], [0.5, 0.5], [4, 4], 0.5, 4, axis=1)
    body = ir.tuple_(c, g0)

    table = infer_tensors(body)

    assert table[x][0].quantization_info == QuantizationInfo(4, 0.5)
    reachable = list(walk(body))
    assert len(reachable) == len(set(reachable))
    for node in (x, s, g0, g1, c, body):
        assert node in table
    _assert_fully_resolved(table)


def test_unknown_operator_is_fatal() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    body = ir.call("nn.relu", [x], TensorType.of((1, 4, 4, 16), "uint8"))

    with pytest.raises(UnsupportedOperatorError) as exc_info:
        infer_tensors(body)
    assert exc_info.value.node is body
    assert "nn.relu" in str(exc_info.value)


@pytest.mark.parametrize(
    "shape, dtype, message",
    [
        ((1, 4, 4, 16), "float32", "dtype=float32"),
        ((2, 4, 4, 16), "uint8", "batch size=2"),
        ((1, 1, 4, 4, 16), "uint8", "array size=5"),
    ],
)
def test_invalid_concatenate_inputs(shape, dtype, message) -> None:
    x = ir.var("x", shape, dtype)
    y = ir.var("y", shape, dtype)
    body = ir.concatenate([x, y], [1.0, 1.0], [0, 0], 1.0, 0, axis=1)

    with pytest.raises(InvalidAttributeError, match=message) as exc_info:
        infer_tensors(body)
    assert exc_info.value.node is body


def test_nested_function_is_not_entered() -> None:
    inner_x = ir.var("ix", (1, 4, 4, 16))
    inner = ir.function([inner_x], ir.call("nn.relu", [inner_x], inner_x.checked_type))
    x = ir.var("x", (1, 4, 4, 16))
    s = ir.split(x, 2, axis=1)
    body = ir.tuple_(ir.get_item(s, 0), ir.get_item(s, 1), inner)

    table = infer_tensors(body)

    assert inner in table
    assert inner.body not in table
    assert x in table


@pytest.mark.parametrize(
    "attrs, message",
    [
        ({"indices_or_sections": (4, 1), "axis": 1}, "increasing"),
        ({"indices_or_sections": (2, 9), "axis": 1}, "within 6"),
        ({"indices_or_sections": 4, "axis": 1}, "4 equal sections"),
        ({"axis": 1}, "requires indices_or_sections"),
    ],
)
def test_invalid_split_attributes(attrs, message) -> None:
    x = ir.var("x", (1, 6, 4, 16))
    ty = TupleType((TensorType.of((1, 3, 4, 16), "uint8"),) * 2)
    body = ir.call("split", [x], ty, **attrs)

    with pytest.raises(InvalidAttributeError, match=message) as exc_info:
        infer_tensors(body)
    assert exc_info.value.node is body
