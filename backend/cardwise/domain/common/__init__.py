"""Shared domain building blocks."""

from .entity import Entity, EntityId
from .exceptions import DomainError, InvariantViolationError
from .value_object import ValueObject

__all__ = [
    "DomainError",
    "Entity",
    "EntityId",
    "InvariantViolationError",
    "ValueObject",
]
