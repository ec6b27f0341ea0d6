"""Process-wide default solver options."""

from __future__ import annotations

import copy
from dataclasses import fields, replace
from typing import Any, Mapping, Optional, Union

from ..validate import ValidationError, validate_options
from .model import LayoutOptions

_LAYOUT_OPTIONS = LayoutOptions()

_OPTION_NAMES = frozenset(f.name for f in fields(LayoutOptions))


def get_layout_options() -> LayoutOptions:
    return copy.deepcopy(_LAYOUT_OPTIONS)


def set_layout_options(options: LayoutOptions) -> None:
    global _LAYOUT_OPTIONS
    validate_options(options)
    _LAYOUT_OPTIONS = copy.deepcopy(options)


def resolve_options(
    options: Optional[Union[LayoutOptions, Mapping[str, Any]]] = None,
) -> LayoutOptions:
    """Return validated options, merging a mapping of overrides over the defaults."""

    if options is None:
        resolved = get_layout_options()
    elif isinstance(options, LayoutOptions):
        resolved = copy.deepcopy(options)
    else:
        unknown = sorted(set(options) - _OPTION_NAMES)
        if unknown:
            raise ValidationError(f"unknown layout option(s): {', '.join(unknown)}")
        resolved = replace(get_layout_options(), **dict(options))
    validate_options(resolved)
    return resolved
