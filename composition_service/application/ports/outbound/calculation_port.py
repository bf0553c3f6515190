# composition_service/application/ports/outbound/calculation_port.py

from abc import ABC, abstractmethod


class ICalculationDispatcher(ABC):
    """Hands completed compositions to the external calculator without blocking the caller."""

    @abstractmethod
    def submit(self, composition_id: int) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass
