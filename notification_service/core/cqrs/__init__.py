"""Command Query Responsibility Segregation building blocks."""
