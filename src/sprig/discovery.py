"""Finding component classes by scanning a package.

Discovery imports the base package and every module beneath it, then collects the
concrete classes marked with a stereotype (``@component``, ``@service``,
``@repository`` or ``@configuration``) that are defined inside that package, including
classes nested in the body of another class. Classes only imported into a module, or
created inside functions, are not collected.
"""

import importlib
import inspect
import logging
import pkgutil
import sys
from types import ModuleType
from typing import Iterator

from sprig.descriptors import CandidateSet, describe
from sprig.errors import DiscoveryError
from sprig.markers import is_concrete_component

__all__ = ["scan"]

logger = logging.getLogger(__name__)


def scan(base_package: str) -> CandidateSet:
    """Discover the components defined in ``base_package`` and its sub-modules.

    Modules are visited in sorted name order and classes in definition order, so the
    resulting candidate order is stable between runs.

    Args:
        base_package: Dotted name of a package (or a single module) to scan.

    Returns:
        The discovered components as a :class:`CandidateSet`.

    Raises:
        DiscoveryError: If the package or one of its modules cannot be imported.
        DependencyError: If a discovered class has an uninjectable constructor.
    """
    candidates = CandidateSet()

    for module in _modules_under(base_package):
        for cls in _classes_defined_in(module):
            if is_concrete_component(cls):
                logger.debug("Discovered %s in %s", cls.__qualname__, module.__name__)
                candidates.register(describe(cls))

    logger.info("Discovered %d components in %s", len(candidates), base_package)
    return candidates


def _modules_under(base_package: str) -> Iterator[ModuleType]:
    root = _import(base_package)
    yield root

    search_path = getattr(root, "__path__", None)
    if search_path is None:
        return

    names = sorted(
        info.name
        for info in pkgutil.walk_packages(
            search_path, prefix=f"{root.__name__}.", onerror=_walk_failed
        )
    )
    for name in names:
        yield _import(name)


def _import(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except Exception as e:
        raise DiscoveryError(f"Cannot import '{name}' for component scanning") from e


def _walk_failed(name: str) -> None:
    # called by pkgutil from inside the handler of the failed import
    raise DiscoveryError(f"Cannot import '{name}' for component scanning") from sys.exc_info()[1]


def _classes_defined_in(module: ModuleType) -> list[type]:
    return list(_classes_in_namespace(vars(module), "", module.__name__))


def _classes_in_namespace(namespace, qualname_prefix: str, module_name: str) -> Iterator[type]:
    for value in list(namespace.values()):
        if (
            inspect.isclass(value)
            and value.__module__ == module_name
            and value.__qualname__ == qualname_prefix + value.__name__
        ):
            yield value
            yield from _classes_in_namespace(vars(value), f"{value.__qualname__}.", module_name)
