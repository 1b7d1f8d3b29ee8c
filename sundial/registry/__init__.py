"""Curated skill registry."""

from sundial.registry.client import RegistryClient, RegistrySkill

__all__ = ["RegistryClient", "RegistrySkill"]
