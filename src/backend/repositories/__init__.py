"""Repository modules for governance storage."""

from repositories.memory import InMemoryStore, InMemoryUnitOfWork
from repositories.provider import UnitOfWork, build_unit_of_work_factory
from repositories.sql import SqlUnitOfWork

__all__ = [
    "InMemoryStore",
    "InMemoryUnitOfWork",
    "SqlUnitOfWork",
    "UnitOfWork",
    "build_unit_of_work_factory",
]
