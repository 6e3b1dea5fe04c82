import pytest

from npu_codegen.errors import AcceleratorRejectedError, CodegenError, UnsupportedOperatorError
from npu_codegen.ir import TensorType, TupleType, builder as ir
from npu_codegen.passes import ConstructNetworkPass, construct_network
from npu_codegen.support import NotSupportedError


def _kinds(network) -> list[str]:
    return [op.kind for op in network.operations]


class TestConcatenate:
    def test_two_inputs_one_output(self) -> None:
        x = ir.var("x", (1, 4, 4, 16))
        y = ir.var("y", (1, 4, 4, 16))
        body = ir.concatenate([x, y], [0.5, 0.5], [0, 0], 0.5, 0, axis=0)
        func = ir.function([x, y], body, name="concat")

        result = construct_network(func)

        assert _kinds(result.network) == ["Input", "Input", "Concatenation", "Output"]
        concat = result.network.operations[2]
        assert len(concat.inputs) == 2
        assert concat.outputs[0].tensor_info.dimensions == (2, 4, 4, 16)
        assert result.input_ids == {0: 0, 1: 1}
        assert result.output_ids == {(2, 0): 0}
        assert [t.operation_id for t in result.inputs] == [0, 1]

    def test_output_quantization(self) -> None:
        x = ir.var("x", (1, 4, 4, 16))
        y = ir.var("y", (1, 4, 4, 16))
        body = ir.concatenate([x, y], [0.5, 0.5], [0, 0], 0.75, 9, axis=2)

        result = construct_network(ir.function([x, y], body))

        (out,) = result.outputs
        assert out.tensor_info.dimensions == (1, 4, 8, 16)
        assert out.tensor_info.quantization_info.zero_point == 9
        assert out.tensor_info.quantization_info.scale == 0.75

    def test_tuple_typed_parameter_adds_one_input_per_field(self) -> None:
        field = TensorType.of((1, 2, 2, 16), "uint8")
        p = ir.var("p", ty=TupleType((field, field, field)))
        body = ir.concatenate(p, [1.0] * 3, [0] * 3, 1.0, 0, axis=1)

        result = construct_network(ir.function([p], body))

        assert len(result.inputs) == 3
        assert sorted(result.input_ids.values()) == [0, 1, 2]
        assert _kinds(result.network).count("Input") == 3

    def test_rejected_by_network(self) -> None:
        x = ir.var("x", (1, 4, 4, 8))
        y = ir.var("y", (1, 4, 4, 8))
        body = ir.concatenate([x, y], [1.0, 1.0], [0, 0], 1.0, 0, axis=3)

        with pytest.raises(AcceleratorRejectedError, match="multiples of 16") as exc_info:
            construct_network(ir.function([x, y], body))
        assert exc_info.value.node is body
        assert isinstance(exc_info.value.__cause__, NotSupportedError)


class TestSplit:
    def test_three_outputs(self) -> None:
        x = ir.var("x", (1, 4, 4, 48))
        body = ir.split(x, 3, axis=3)

        result = construct_network(ir.function([x], body))

        assert _kinds(result.network) == ["Input", "Split", "Output", "Output", "Output"]
        assert result.input_ids == {0: 0}
        assert result.output_ids == {(1, 0): 0, (1, 1): 1, (1, 2): 2}
        assert [t.tensor_info.dimensions for t in result.outputs] == [(1, 4, 4, 16)] * 3

    def test_projections_copy_operands(self) -> None:
        x = ir.var("x", (1, 6, 4, 16))
        s = ir.split(x, [1, 4], axis=1)
        body = ir.tuple_(ir.get_item(s, 2), ir.get_item(s, 0), ir.get_item(s, 1))

        result = construct_network(ir.function([x], body))

        assert _kinds(result.network).count("Split") == 1
        assert result.output_ids == {(1, 2): 0, (1, 0): 1, (1, 1): 2}
        assert [t.tensor_info.dimensions[1] for t in result.outputs] == [2, 1, 3]

    def test_rejected_by_network(self) -> None:
        x = ir.var("x", (1, 4, 4, 24))
        body = ir.split(x, 3, axis=3)

        with pytest.raises(AcceleratorRejectedError) as exc_info:
            construct_network(ir.function([x], body))
        assert exc_info.value.node is body


def test_shared_split_is_built_once() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    s = ir.split(x, 2, axis=1)
    g0, g1 = ir.get_item(s, 0), ir.get_item(s, 1)
    c = ir.concatenate([g0, g1], [0.5, 0.5], [4, 4], 0.5, 4, axis=1)
    body = ir.tuple_(c, g0)

    result = construct_network(ir.function([x], body))

    assert _kinds(result.network) == ["Input", "Split", "Concatenation", "Output", "Output"]
    assert result.output_ids == {(2, 0): 0, (1, 0): 1}


def test_identity_function() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    result = construct_network(ir.function([x], x))
    assert _kinds(result.network) == ["Input", "Output"]
    assert result.output_ids == {(0, 0): 0}


def test_unknown_operator_creates_no_network() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    body = ir.call("nn.relu", [x], x.checked_type)
    construct = ConstructNetworkPass()

    with pytest.raises(UnsupportedOperatorError):
        construct.run(ir.function([x], body))
    assert construct.network is None


def test_partially_projected_split_is_fatal() -> None:
    x = ir.var("x", (1, 6, 4, 16))
    s = ir.split(x, 3, axis=1)

    with pytest.raises(CodegenError, match="not been inferred") as exc_info:
        construct_network(ir.function([x], ir.get_item(s, 0)))
    assert exc_info.value.node is s


def test_unused_parameter_adds_no_input() -> None:
    x = ir.var("x", (1, 4, 4, 48))
    unused = ir.var("unused", (1, 4, 4, 16))

    result = construct_network(ir.function([x, unused], ir.split(x, 3, axis=3)))

    assert len(result.inputs) == 1
    assert result.input_ids == {0: 0}
    assert result.output_ids == {(1, 0): 0, (1, 1): 1, (1, 2): 2}


def test_value_returned_twice_is_rejected() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    s = ir.split(x, 2, axis=1)
    g0, g1 = ir.get_item(s, 0), ir.get_item(s, 1)

    with pytest.raises(CodegenError, match="more than once"):
        construct_network(ir.function([x], ir.tuple_(g0, g1, g0)))


def test_nested_tuple_results_are_rejected() -> None:
    x = ir.var("x", (1, 4, 4, 16))
    s = ir.split(x, 2, axis=1)
    g0, g1 = ir.get_item(s, 0), ir.get_item(s, 1)
    body = ir.tuple_(g0, g1, ir.tuple_(g0, g1))

    with pytest.raises(CodegenError, match="single tensors"):
        construct_network(ir.function([x], body))
