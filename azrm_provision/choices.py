"""Fixed choice sets accepted from config files and the command line"""

from enum import Enum
from typing import Type, TypeVar, Union

from .exceptions import ValidationError

E = TypeVar('E', bound=Enum)


def parse_choice(enum_cls: Type[E], value: Union[str, E], label: str) -> E:
    """Case-insensitive lookup of value among enum_cls member values"""
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if member.value.lower() == str(value).lower():
            return member
    choices = ', '.join(m.value for m in enum_cls)
    raise ValidationError(f"Invalid {label} '{value}'. Valid choices: {choices}")
