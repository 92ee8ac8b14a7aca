"""Data access managers for the background engine.

Each module wraps the storage gateway with the semantics of one persisted
aggregate.  Managers raise domain exceptions (``LookupError``,
``ValueError``, ``StorageError``) and never degrade on their own -- deciding
what a failure means for the Model is the engine's responsibility.
"""
