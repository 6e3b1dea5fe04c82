"""Tensor descriptors understood by the accelerator graph builder.

A `TensorInfo` is the accelerator's view of one value: NHWC dimensions,
quantized element type, memory format and quantization parameters. It is a
plain immutable value, so tables of descriptors can be compared directly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

import numpy as np


# =============================================================================
# Enumerations
# =============================================================================


class DataType(Enum):
    UINT8_QUANTIZED = "uint8_quantized"
    INT8_QUANTIZED = "int8_quantized"
    INT32_QUANTIZED = "int32_quantized"

    @property
    def itemsize(self) -> int:
        return 4 if self is DataType.INT32_QUANTIZED else 1


class DataFormat(Enum):
    NHWC = "nhwc"
    NCHW = "nchw"
    NHWCB = "nhwcb"


# =============================================================================
# Descriptors
# =============================================================================


@dataclass(frozen=True, slots=True)
class QuantizationInfo:
    """Affine quantization parameters.

    Attributes:
        zero_point: Zero point applied to the whole tensor.
        scale: Scale applied to the whole tensor.
        scales: Optional per-channel scales; when set, `scale` is ignored.
        quantization_dim: Axis the per-channel scales run along.
    """

    zero_point: int = 0
    scale: float = 1.0
    scales: tuple[float, ...] = ()
    quantization_dim: int | None = None

    @property
    def per_channel(self) -> bool:
        return bool(self.scales)


TensorShape = tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class TensorInfo:
    """Descriptor for a single accelerator tensor.

    The default-constructed value (empty dimensions) is the "not yet inferred"
    sentinel, exported as `UNRESOLVED`.
    """

    dimensions: tuple[int, ...] = ()
    data_type: DataType = DataType.UINT8_QUANTIZED
    data_format: DataFormat = DataFormat.NHWC
    quantization_info: QuantizationInfo = QuantizationInfo()

    @classmethod
    def placeholder(cls) -> TensorInfo:
        """Initial descriptor for values whose details are filled in later."""
        return cls((1, 1, 1, 1))

    @property
    def resolved(self) -> bool:
        return self != UNRESOLVED

    @property
    def num_elements(self) -> int:
        return int(np.prod(self.dimensions, dtype=np.int64)) if self.dimensions else 0

    @property
    def nbytes(self) -> int:
        return self.num_elements * self.data_type.itemsize

    def replace(self, **changes: object) -> TensorInfo:
        return replace(self, **changes)


UNRESOLVED = TensorInfo()


def is_resolved(infos: Iterable[TensorInfo]) -> bool:
    """True when none of `infos` is the sentinel."""
    return all(info.resolved for info in infos)
