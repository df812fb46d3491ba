"""
Domain layer.

Pure study-engine logic: entities, value objects and domain services.
Nothing in here performs I/O or reads the clock on its own.
"""
