"""Data sources feeding the type inference engine."""
