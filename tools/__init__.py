"""Tool base classes, descriptor registry and executor."""
