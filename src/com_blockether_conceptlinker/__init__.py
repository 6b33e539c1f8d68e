"""
Concept Linker - turns notes into an interlinked knowledge base using a language model.
"""

__version__ = "0.1.0"
