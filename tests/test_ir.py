import pytest

from npu_codegen.ir import IRValidationError, TensorType, TupleType, builder as ir


def test_concatenate_type() -> None:
	x = ir.var("x", (1, 4, 4, 16))
	y = ir.var("y", (1, 2, 4, 16))
	c = ir.concatenate([x, y], [0.5, 0.25], [0, 3], 0.5, 1, axis=1)
	assert c.checked_type == TensorType.of((1, 6, 4, 16), "uint8")
	assert c.op == "qnn.concatenate"
	assert len(c.args) == 5


def test_concatenate_rejects_mismatched_shapes() -> None:
	x = ir.var("x", (1, 4, 4, 16))
	y = ir.var("y", (1, 4, 5, 16))
	with pytest.raises(IRValidationError):
		ir.concatenate([x, y], [1.0, 1.0], [0, 0], 1.0, 0, axis=1)


def test_split_sections_and_indices() -> None:
	x = ir.var("x", (1, 4, 6, 16))
	s = ir.split(x, 3, axis=2)
	assert s.checked_type == TupleType(tuple(TensorType.of((1, 4, 2, 16), "uint8") for _ in range(3)))

	s = ir.split(x, [2, 5], axis=-2)
	assert [f.shape[2] for f in s.checked_type.fields] == [2, 3, 1]


def test_get_item_requires_tuple() -> None:
	x = ir.var("x", (1, 4, 4, 16))
	with pytest.raises(IRValidationError):
		ir.get_item(x, 0)
	s = ir.split(x, 2, axis=1)
	with pytest.raises(IRValidationError):
		ir.get_item(s, 2)
	assert ir.get_item(s, 1).checked_type == TensorType.of((1, 2, 4, 16), "uint8")


def test_nodes_hash_by_identity() -> None:
	a = ir.var("x", (1, 1, 1, 1))
	b = ir.var("x", (1, 1, 1, 1))
	assert a != b
	assert len({a: 0, b: 1}) == 2


def test_function_name_from_global_symbol() -> None:
	x = ir.var("x", (1, 2, 2, 16))
	f = ir.function([x], x, name="ext_0")
	assert f.name == "ext_0"
	assert ir.function([x], x).name is None
