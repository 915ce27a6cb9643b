from collections.abc import Awaitable, Callable
from typing import Any, Generic, Protocol, TypeVar

from vocab_jobs.v1.core.exceptions import DuplicateHandlerError, NoHandlerError

# Base registry implementation
T = TypeVar("T")


class Registry(Generic[T]):
    """Generic registry for pluggable implementations."""

    def __init__(self, name: str, allow_overwrite: bool = True):
        self.name = name
        self.allow_overwrite = allow_overwrite
        self._implementations: dict[str, T] = {}
        self._frozen = False

    def register(self, name: str, implementation: T, replace: bool = False) -> None:
        """
        Register an implementation with a given name.

        When the registry does not allow overwrites, registering a taken name
        fails unless ``replace`` is passed.
        """
        if self._frozen:
            raise RuntimeError(
                f"Cannot register '{name}' in {self.name.lower()} registry: "
                "registry is frozen in production mode"
            )
        if name in self._implementations and not (self.allow_overwrite or replace):
            raise self._duplicate_error(name)
        self._implementations[name] = implementation

    def unregister(self, name: str) -> bool:
        """Remove an implementation. Returns False if nothing was registered."""
        if self._frozen:
            raise RuntimeError(
                f"Cannot unregister '{name}' in {self.name.lower()} registry: "
                "registry is frozen in production mode"
            )
        return self._implementations.pop(name, None) is not None

    def get(self, name: str) -> T:
        """Get an implementation by name."""
        if name not in self._implementations:
            raise self._missing_error(name)
        return self._implementations[name]

    def list(self) -> list[str]:
        """List all registered implementation names."""
        return list(self._implementations.keys())

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications."""
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if the registry is frozen."""
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._implementations

    def _duplicate_error(self, name: str) -> Exception:
        return KeyError(
            f"{self.name} implementation already registered with name: {name}"
        )

    def _missing_error(self, name: str) -> Exception:
        return KeyError(
            f"No {self.name.lower()} implementation registered with name: {name}"
        )


# Job Registry - background processing handlers
class JobHandler(Protocol):
    """Protocol for job handlers that process background tasks."""

    async def handle(self, payload: Any) -> Any:
        """
        Handle a background job.

        Args:
            payload: Job-specific data, interpreted by the handler

        Returns:
            Result stored on the completed job
        """
        ...


# A handler may also be a bare function of the payload, sync or async
HandlerFunc = Callable[[Any], Any | Awaitable[Any]]


class JobRegistry(Registry[JobHandler | HandlerFunc]):
    """
    Registry for background job handlers, keyed by job type.

    One handler per type: a second registration for the same type is an
    error unless the caller explicitly asks to replace the first.
    """

    def __init__(self):
        super().__init__("Job", allow_overwrite=False)

    def _duplicate_error(self, name: str) -> Exception:
        return DuplicateHandlerError(name)

    def _missing_error(self, name: str) -> Exception:
        return NoHandlerError(name)
