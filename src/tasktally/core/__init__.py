"""Core task store and configuration for tasktally."""
