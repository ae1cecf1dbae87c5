"""Core domain layer - entities, interfaces, services and exceptions."""

from fulfillment.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
