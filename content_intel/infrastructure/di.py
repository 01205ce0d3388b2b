"""
Dependency Injection Container

Provides a small dependency injection system. Plugin factories and services
declare their collaborators as annotated constructor parameters and the
container supplies them, so nothing reaches for ambient global state.
"""

from abc import ABC
from typing import Any, Dict, Type, TypeVar, Callable, Optional, Union, get_args, get_origin, get_type_hints
import inspect

T = TypeVar('T')


class Injectable(ABC):
    """
    Base class for injectable services.
    Services that extend this class can be automatically registered and resolved.
    """
    pass


def _unwrap_optional(annotation: Any) -> Any:
    """Return X for Optional[X], otherwise the annotation unchanged."""
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class DIContainer:
    """
    Dependency Injection Container for Content Intel.

    Supports:
    - Singleton and transient lifetimes
    - Factory functions
    - Interface to implementation mapping
    - Automatic constructor injection, including Optional[...] parameters
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable] = {}
        self._singletons: Dict[Type, Any] = {}
        self._transients: set = set()

    def register_singleton(self, interface: Type[T], implementation: Union[Type[T], T]) -> 'DIContainer':
        """Register a service as singleton (one instance for the entire application)."""
        if inspect.isclass(implementation):
            self._services[interface] = implementation
        else:
            # Already instantiated object
            self._singletons[interface] = implementation
        return self

    def register_transient(self, interface: Type[T], implementation: Type[T]) -> 'DIContainer':
        """Register a service as transient (new instance every time)."""
        self._services[interface] = implementation
        self._transients.add(interface)
        return self

    def register_factory(self, interface: Type[T], factory: Callable[[], T]) -> 'DIContainer':
        """Register a factory function for creating instances."""
        self._factories[interface] = factory
        return self

    def has(self, interface: Type) -> bool:
        """Check whether a service can be resolved without raising."""
        return interface in self._singletons or interface in self._factories or interface in self._services

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        if interface in self._singletons:
            return self._singletons[interface]

        if interface in self._factories:
            instance = self._factories[interface]()
            if interface not in self._transients:
                self._singletons[interface] = instance
            return instance

        if interface not in self._services:
            name = getattr(interface, '__name__', repr(interface))
            raise ValueError(f"Service {name} is not registered")

        implementation = self._services[interface]
        instance = self.create_instance(implementation)

        if interface not in self._transients:
            self._singletons[interface] = instance

        return instance

    def create_instance(self, implementation: Callable[..., T], **overrides: Any) -> T:
        """
        Call a class or factory, injecting its annotated parameters.

        Keyword overrides are passed through as is. Parameters whose service
        is not registered fall back to their default value; a parameter with
        no default that cannot be resolved is an error.
        """
        signature = inspect.signature(implementation)
        try:
            target = implementation.__init__ if inspect.isclass(implementation) else implementation
            hints = get_type_hints(target)
        except Exception:
            hints = {}

        kwargs = {}
        for param_name, param in signature.parameters.items():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            if param_name in overrides:
                kwargs[param_name] = overrides[param_name]
                continue

            annotation = hints.get(param_name, param.annotation)
            if annotation is inspect.Parameter.empty:
                if param.default is inspect.Parameter.empty:
                    raise ValueError(
                        f"Cannot resolve untyped parameter {param_name} "
                        f"for {getattr(implementation, '__name__', implementation)}"
                    )
                continue

            try:
                kwargs[param_name] = self.resolve(_unwrap_optional(annotation))
            except ValueError:
                if param.default is inspect.Parameter.empty:
                    raise ValueError(
                        f"Cannot resolve dependency {getattr(annotation, '__name__', annotation)} "
                        f"for {getattr(implementation, '__name__', implementation)}"
                    )

        return implementation(**kwargs)

    def clear(self):
        """Clear all registrations (useful for testing)."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()
        self._transients.clear()
