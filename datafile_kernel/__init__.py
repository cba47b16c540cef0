"""
Data File Kernel

Entity-side collaborators for tabular data import:
- Attribute type tags and entity metadata
- Binding path parsing
- Problem reporting (warnings / errors with row and column locations)
- SQLAlchemy-backed schema provider and persistence
"""

__version__ = "0.1.0"
