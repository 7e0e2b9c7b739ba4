"""Horizon Generators — Snapshot and regeneration-script rendering."""

from horizon.generators.serializer import DocumentSerializer, SerializedDocument  # noqa: F401

__all__ = ["DocumentSerializer", "SerializedDocument"]
