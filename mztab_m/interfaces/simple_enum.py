import logging
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class SimpleEnum(str, Enum):
    def __str__(self):
        return self.value

    def __add__(self, other: str):
        return str.__add__(self.value, other)

    @classmethod
    def parse(cls, input_value: Union[str, Enum]):
        if isinstance(input_value, Enum):
            return input_value
        for member in cls:
            if member.value.lower() == input_value.lower():
                return member
            if member.name.lower() == input_value.lower():
                return member
        logger.debug(f"couldn't parse this value: {input_value}")
        return None


class OrderedEnum(SimpleEnum):
    """A ``SimpleEnum`` whose members compare by declaration order."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):
        if isinstance(other, type(self)):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, type(self)):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, type(self)):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, type(self)):
            return self.rank >= other.rank
        return NotImplemented

    @classmethod
    def find(cls, input_value: Optional[str]):
        if input_value is None:
            return None
        return cls.parse(input_value)
