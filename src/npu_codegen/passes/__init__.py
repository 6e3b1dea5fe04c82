from .construct import ConstructNetworkPass, NetworkWithIds, construct_network
from .infer import DescriptorTable, InferTensorsPass, infer_tensors

__all__ = [
    "InferTensorsPass",
    "DescriptorTable",
    "infer_tensors",
    "ConstructNetworkPass",
    "NetworkWithIds",
    "construct_network",
]
