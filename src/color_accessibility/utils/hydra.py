"""Hydra ConfigStore nodes built from constructor signatures."""

from __future__ import annotations

import inspect
from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger

_PRIMITIVES = (bool, int, float, str, type(None))


def _config_value(value: Any) -> Any:
    """Convert a default into something OmegaConf can hold, or ``inspect._empty``."""
    if isinstance(value, _PRIMITIVES):
        return value
    if isinstance(value, (tuple, list)) and all(
        isinstance(v, _PRIMITIVES) for v in value
    ):
        return list(value)
    return inspect.Parameter.empty


def constructor_defaults(cls: type[Any]) -> dict[str, Any]:
    """Keyword defaults of ``cls.__init__`` that can live in a YAML/OmegaConf node.

    Tuples become lists; parameters without a default, ``*args``/``**kwargs``
    and non-primitive defaults are left out.
    """
    defaults: dict[str, Any] = {}
    for param in inspect.signature(cls.__init__).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            continue
        value = _config_value(param.default)
        if value is not inspect.Parameter.empty:
            defaults[param.name] = value
    return defaults


def register(
    cls: type[Any] | None = None,
    *,
    group: str,
    name: str,
    **overrides: Any,
) -> type[Any] | Any:
    """Store ``cls`` in Hydra's ConfigStore as ``group/name``.

    The node holds ``_target_`` plus every constructor default, so a primary
    config can pick it from its defaults list (``- model: network``) and
    override single fields. ``overrides`` replace individual defaults.
    """

    def _process_class(target_cls: type[Any]) -> type[Any]:
        node: dict[str, Any] = {
            "_target_": f"{target_cls.__module__}.{target_cls.__name__}"
        }
        node.update(constructor_defaults(target_cls))
        node.update(overrides)
        logger.debug(f"Registering {target_cls.__name__} as '{group}/{name}': {node}")
        ConfigStore.instance().store(group=group, name=name, node=node)
        return target_cls

    if cls is None:
        return _process_class
    return _process_class(cls)
