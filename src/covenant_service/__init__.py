"""
covenant-service — реестр агентов и делегирование задач по capability.
"""

__version__ = "1.0.0"
