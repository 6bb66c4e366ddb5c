"""Utility helpers for the maintenance planning application."""

from .scheduling import EquipmentDefinition, InvalidDefinition, ScheduledOccurrence, generate_occurrences

__all__ = ["EquipmentDefinition", "InvalidDefinition", "ScheduledOccurrence", "generate_occurrences"]
