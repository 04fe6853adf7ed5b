from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel

# Base registry implementation
T = TypeVar("T")


class Registry(Generic[T]):
    """Generic registry for pluggable implementations."""

    def __init__(self, name: str):
        self.name = name
        self._implementations: dict[str, T] = {}
        self._frozen = False

    def register(self, name: str, implementation: T) -> None:
        """Register an implementation with a given name."""
        if self._frozen:
            raise RuntimeError(
                f"Cannot register '{name}' in {self.name.lower()} registry: "
                "registry is frozen in production mode"
            )
        self._implementations[name] = implementation

    def get(self, name: str) -> T:
        """Get an implementation by name."""
        if name not in self._implementations:
            raise KeyError(
                f"No {self.name.lower()} implementation registered with name: {name}"
            )
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


# Job Registry - background processing handlers keyed by job kind
class JobHandler(Protocol):
    """Protocol for job handlers that run the domain logic of one job kind."""

    kind: str

    async def handle(self, payload: Any) -> BaseModel:
        """
        Handle a background job.

        Args:
            payload: The typed payload captured when the job was enqueued

        Returns:
            Result model stored on the completed job

        Raises:
            Any exception; the processor records it as the job's failure.
        """
        ...


class JobHandlerRegistry(Registry[JobHandler]):
    """Registry for background job handlers (onboarding, agent-request)."""

    def __init__(self):
        super().__init__("Job")
