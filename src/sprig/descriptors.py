"""Introspection of component classes and the ordered set of candidates to resolve."""

import inspect
import types
from typing import (
    Annotated,
    Any,
    Iterator,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from sprig.domain import ComponentDescriptor, ConstructorSignature, Dependency
from sprig.errors import DependencyError
from sprig.markers import declared_capabilities, is_concrete, is_constructor

__all__ = ["CandidateSet", "describe"]

_UNION_TYPES = tuple(t for t in (Union, getattr(types, "UnionType", None)) if t is not None)
_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class _Uninjectable:
    """Stands in for a defaulted parameter whose annotation names no component type."""

    def __init__(self, parameter_name: str):
        self.parameter_name = parameter_name


def describe(cls: type) -> ComponentDescriptor:
    """Build the :class:`ComponentDescriptor` for a concrete class.

    Constructors are gathered from ``__init__`` and from classmethods marked with
    ``@constructor``. Defaulted keyword-only parameters and the trailing defaulted
    positional parameters of any constructor produce additional, shorter signatures,
    so ``__init__(self, repo: Repo, cache: Cache = None)`` can be satisfied with or
    without a ``Cache``.

    Args:
        cls: The class to describe.

    Returns:
        A descriptor whose constructors are ordered from most to fewest parameters.

    Raises:
        DependencyError: If ``cls`` is not concrete, or a required parameter is
            unannotated or annotated with something that cannot be injected.

    Example:
        >>> class Service:
        ...     def __init__(self, repo: Repo, retries: int = 3): ...
        >>> [s.parameter_types for s in describe(Service).constructors]
        [(Repo, int), (Repo,)]
    """
    if not is_concrete(cls):
        raise DependencyError(f"{cls!r} is not a concrete class")

    signatures = _signatures_of(cls, cls.__init__, None)
    for attr_name, attr in cls.__dict__.items():
        if isinstance(attr, classmethod) and is_constructor(attr.__func__):
            signatures.extend(_signatures_of(cls, attr.__func__, attr_name))

    ordered = sorted(signatures, key=lambda s: s.arity, reverse=True)
    capabilities = [k for k in cls.__mro__ if k is not object] + declared_capabilities(cls)

    return ComponentDescriptor(cls, tuple(ordered), frozenset(capabilities))


def _signatures_of(
    cls: type, func: Any, factory_name: Optional[str]
) -> list[ConstructorSignature]:
    if func is object.__init__:
        return [ConstructorSignature((), factory_name)]

    # the first parameter is self for __init__ and cls for factory classmethods
    parameters = [
        p
        for p in list(inspect.signature(func).parameters.values())[1:]
        if p.kind not in _SKIPPED_KINDS
    ]

    try:
        hints = get_type_hints(func, include_extras=True)
    except NameError as e:
        raise DependencyError(
            f"Cannot resolve annotations of {cls.__qualname__}.{func.__name__}: {e}"
        ) from e

    dependencies = [_make_dependency(cls, p, hints.get(p.name)) for p in parameters]

    # defaulted keyword-only parameters can be left out one by one, then the trailing
    # run of defaulted positional parameters; required keyword-only ones always stay
    positional = [
        i for i, p in enumerate(parameters) if p.kind is not inspect.Parameter.KEYWORD_ONLY
    ]
    trailing = []
    for i in reversed(positional):
        if parameters[i].default is inspect.Parameter.empty:
            break
        trailing.append(i)
    keyword_defaults = [
        i
        for i, p in reversed(list(enumerate(parameters)))
        if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is not inspect.Parameter.empty
    ]

    signatures = []
    omitted: set[int] = set()
    for i in [None] + keyword_defaults + trailing:
        if i is not None:
            omitted.add(i)
        kept = [d for j, d in enumerate(dependencies) if j not in omitted]
        if not any(isinstance(d, _Uninjectable) for d in kept):
            signatures.append(ConstructorSignature(tuple(kept), factory_name))
    return signatures


def _make_dependency(cls: type, parameter: inspect.Parameter, annotation: Any) -> Any:
    has_default = parameter.default is not inspect.Parameter.empty

    if annotation is None:
        if has_default:
            return _Uninjectable(parameter.name)
        raise DependencyError(
            f"Dependency <{parameter.name}> of component <{cls.__qualname__}> is not annotated"
        )

    qualifier = None
    if get_origin(annotation) is Annotated:
        annotation, *metadata = get_args(annotation)
        qualifier = next((m for m in metadata if isinstance(m, str)), None)

    annotation = _unwrap_optional(annotation)

    # parameterised generics such as list[Repo] pass isclass on older interpreters
    if not inspect.isclass(annotation) or get_origin(annotation) is not None:
        if has_default:
            return _Uninjectable(parameter.name)
        raise DependencyError(
            f"Dependency <{parameter.name}> of component <{cls.__qualname__}> "
            f"has annotation {annotation!r}, which is not an injectable type"
        )

    return Dependency(
        parameter.name,
        annotation,
        qualifier,
        parameter.kind is inspect.Parameter.KEYWORD_ONLY,
    )


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_TYPES:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


class CandidateSet:
    """Ordered collection of component descriptors awaiting resolution.

    Insertion order is discovery order, and it is the order in which the resolver
    visits pending components. Registering the same class twice keeps the first entry.
    """

    def __init__(self, descriptors: Optional[list[ComponentDescriptor]] = None):
        self._descriptors: dict[type, ComponentDescriptor] = {}
        for descriptor in descriptors or []:
            self.register(descriptor)

    def register(self, descriptor: ComponentDescriptor) -> None:
        """Register a descriptor explicitly.

        Args:
            descriptor: The descriptor to add; ignored if its class is already present.
        """
        self._descriptors.setdefault(descriptor.identity, descriptor)

    def add(self, cls: type) -> type:
        """Describe and register a class. Returns the class, so it works as a decorator."""
        self.register(describe(cls))
        return cls

    def descriptors(self) -> list[ComponentDescriptor]:
        return list(self._descriptors.values())

    def __iter__(self) -> Iterator[ComponentDescriptor]:
        return iter(list(self._descriptors.values()))

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, cls: type) -> bool:
        return cls in self._descriptors
