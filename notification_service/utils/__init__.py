"""Framework-agnostic utility helpers."""
