#!/usr/bin/env python3
"""Demo: lower a split/concatenate function and compile it.

Run with:
    python -m examples.concat_split
"""

from __future__ import annotations

# Allow running via: `python -m examples.concat_split` from repo root
# without requiring an editable install.
import logging
import sys
from pathlib import Path

repo_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(repo_root / "src"))

from npu_codegen import NPUCompiler, config_context, construct_network, infer_tensors  # noqa: E402
from npu_codegen.ir import Function  # noqa: E402
from npu_codegen.ir import builder as ir  # noqa: E402


def build_function() -> Function:
    """x, y -> concat(W) -> split(2, C); return both halves and y."""

    x = ir.var("x", (1, 8, 8, 32))
    y = ir.var("y", (1, 8, 4, 32))
    merged = ir.concatenate([x, y], [0.25, 0.5], [0, 0], 0.5, 0, axis=2)
    halves = ir.split(merged, 2, axis=3)
    body = ir.tuple_(ir.get_item(halves, 0), ir.get_item(halves, 1), y)
    return ir.function([x, y], body, name="ext_concat_split")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    func = build_function()

    print("=" * 70)
    print("[1] Tensor inference")
    print("=" * 70)
    table = infer_tensors(func.body)
    for param in func.params:
        for info in table[param]:
            print(f"- {param.name}: {info.dimensions} {info.data_type.name} q={info.quantization_info}")

    print("\n[2] Network construction")
    print(construct_network(func).network.summary())

    print("\n[3] Compile + reconcile")
    with config_context({"variant": "N57", "enable_cascading": True}):
        (ordered,) = NPUCompiler().compile_external(func)
    for j, buf in enumerate(ordered.compiled_network.input_buffer_infos()):
        print(f"- input buffer {j} (op {buf.source_operation_id}) <- parameter {ordered.inputs[j]}")
    for j, buf in enumerate(ordered.compiled_network.output_buffer_infos()):
        print(
            f"- output buffer {j} (op {buf.source_operation_id}:{buf.source_operation_output_index})"
            f" -> result {ordered.outputs[j]}"
        )


if __name__ == "__main__":
    main()
