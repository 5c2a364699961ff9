"""The construction boundary: turning a descriptor and arguments into an instance."""

from typing import Any, Protocol, Sequence

from sprig.domain import ComponentDescriptor, ConstructorSignature

__all__ = ["Instantiator", "DefaultInstantiator"]


class Instantiator(Protocol):
    """Creates one instance of a component from already-resolved arguments.

    Any exception raised is treated by the resolver as a fatal construction fault.
    """

    def instantiate(
        self,
        descriptor: ComponentDescriptor,
        signature: ConstructorSignature,
        args: Sequence[Any],
    ) -> Any: ...


class DefaultInstantiator:
    """Calls the class, or the signature's factory classmethod, with the resolved arguments."""

    def instantiate(
        self,
        descriptor: ComponentDescriptor,
        signature: ConstructorSignature,
        args: Sequence[Any],
    ) -> Any:
        """Invoke the constructor described by ``signature``.

        Args:
            descriptor: The component being built.
            signature: The constructor chosen by the resolver.
            args: One argument per dependency of ``signature``, in order.

        Returns:
            The new instance.
        """
        target = (
            descriptor.identity
            if signature.factory_name is None
            else getattr(descriptor.identity, signature.factory_name)
        )
        positional = [
            arg for dep, arg in zip(signature.dependencies, args) if not dep.keyword_only
        ]
        keywords = {
            dep.parameter_name: arg
            for dep, arg in zip(signature.dependencies, args)
            if dep.keyword_only
        }
        return target(*positional, **keywords)
