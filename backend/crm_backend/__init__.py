"""CRM priority backend: scoring, recalculation, and ranking of tasks and projects."""
