"""
The Abstract Base Class for all serializable elements in bitverify
"""
import json
from abc import ABC, abstractmethod
from io import BytesIO

__all__ = ["Serializable"]


class Serializable(ABC):
    """
    A base class that defines serialization and deserialization interfaces
    for Bitcoin protocol objects.
    """

    @classmethod
    @abstractmethod
    def from_bytes(cls, byte_stream: bytes | BytesIO):
        """
        Deserialize an instance from its byte representation.
        """
        raise NotImplementedError(f"{cls.__name__} must implement from_bytes()")

    @property
    def length(self) -> int:
        """Return the length in bytes of the serialized form."""
        return len(self.to_bytes())

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize the object to bytes according to the Bitcoin protocol."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement to_bytes()")

    @abstractmethod
    def to_dict(self) -> dict:
        """Return a dictionary representation of the object."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement to_dict()")

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __eq__(self, other) -> bool:
        """Two elements are equal when they serialize to the same bytes."""
        if not isinstance(other, Serializable):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_bytes().hex()})"
