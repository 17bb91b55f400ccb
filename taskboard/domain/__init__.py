"""Domain layer: entities, schemas, query AST, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""
