"""Compilation flags.

Flags are a flat set of named values with defaults. The active set is scoped
with `config_context` and read once per compiled function through
`current_config`.
"""

from __future__ import annotations

import contextlib
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any, Iterator, Mapping

from npu_codegen.support.compiler import VARIANTS, CompilationOptions, DebugInfo

_STRATEGIES = (0, 1, 3, 4, 6, 7)
_BLOCK_CONFIGS = ((16, 16), (32, 8), (8, 32), (8, 8))


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Flat compilation flags.

    Attributes:
        variant: Target hardware variant.
        strategyN: Enable scheduling strategy N.
        block_config_WxH: Enable the WxH block configuration.
        dump_ram / initial_sram_dump / dump_debug_files: Debug dump toggles.
        debug_dir: Directory for debug dumps.
    """

    variant: str = VARIANTS[0]
    strategy0: bool = True
    strategy1: bool = True
    strategy3: bool = True
    strategy4: bool = True
    strategy6: bool = True
    strategy7: bool = True
    dump_ram: bool = False
    initial_sram_dump: bool = False
    block_config_16x16: bool = True
    block_config_32x8: bool = True
    block_config_8x32: bool = True
    block_config_8x8: bool = True
    enable_intermediate_compression: bool = True
    disable_winograd: bool = False
    dump_debug_files: bool = False
    debug_dir: str = "."
    enable_cascading: bool = False

    def __post_init__(self) -> None:
        if self.variant not in VARIANTS:
            raise ValueError(f"variant must be one of {VARIANTS}, got {self.variant!r}")

    @classmethod
    def from_mapping(cls, flags: Mapping[str, Any]) -> CompilerConfig:
        """Build a config from named flags; absent flags keep their defaults."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(flags) - known)
        if unknown:
            raise ValueError(f"Unknown compiler flags: {', '.join(unknown)}")
        return cls(**flags)

    def to_options(self) -> CompilationOptions:
        strategies = frozenset(s for s in _STRATEGIES if getattr(self, f"strategy{s}"))
        block_configs = frozenset(
            (w, h) for w, h in _BLOCK_CONFIGS if getattr(self, f"block_config_{w}x{h}")
        )
        return CompilationOptions(
            variant=self.variant,
            strategies=strategies,
            block_configs=block_configs,
            enable_intermediate_compression=self.enable_intermediate_compression,
            disable_winograd=self.disable_winograd,
            enable_cascading=self.enable_cascading,
            debug_info=DebugInfo(
                dump_ram=self.dump_ram,
                initial_sram_dump=self.initial_sram_dump,
                dump_debug_files=self.dump_debug_files,
                debug_dir=self.debug_dir,
            ),
        )


_ACTIVE: ContextVar[CompilerConfig | None] = ContextVar("npu_codegen_config", default=None)


def current_config() -> CompilerConfig:
    """The config set by the innermost `config_context`, or the defaults."""
    config = _ACTIVE.get()
    return CompilerConfig() if config is None else config


@contextlib.contextmanager
def config_context(config: CompilerConfig | Mapping[str, Any]) -> Iterator[CompilerConfig]:
    if not isinstance(config, CompilerConfig):
        config = CompilerConfig.from_mapping(config)
    token = _ACTIVE.set(config)
    try:
        yield config
    finally:
        _ACTIVE.reset(token)
