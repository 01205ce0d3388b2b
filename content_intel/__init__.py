"""
Content Intel - content intelligence aggregation

Gathers a field snapshot and plugin-contributed intelligence for content
entities and merges them into one JSON-shaped report.
"""

__version__ = "1.0.0"
