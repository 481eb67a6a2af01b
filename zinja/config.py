from __future__ import annotations
import os
from dataclasses import dataclass


_TRUTHY = ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class TemplateOptions:
    """Whitespace handling applied before tokenization."""
    trim_blocks: bool = False
    lstrip_blocks: bool = False


def flag_from_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def get_trim_blocks() -> bool:
    return flag_from_env('ZINJA_TRIM_BLOCKS', False)


def get_lstrip_blocks() -> bool:
    return flag_from_env('ZINJA_LSTRIP_BLOCKS', False)


def resolve_options(trim_blocks: bool | None = None, lstrip_blocks: bool | None = None) -> TemplateOptions:
    # explicit arguments win over the environment
    return TemplateOptions(
        trim_blocks=get_trim_blocks() if trim_blocks is None else trim_blocks,
        lstrip_blocks=get_lstrip_blocks() if lstrip_blocks is None else lstrip_blocks,
    )
