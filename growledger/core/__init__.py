"""Core domain layer - entities, interfaces, services and exceptions."""

from growledger.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
