"""Core encoding modules.

WHY: The core package holds the stage logic that every output shape shares:
the data model, key derivation, batch encoding and the default optimiser.

HOW: models.py defines the dataclasses, names.py the name transformers,
encoder.py the per-file encoding and batch fold, optimizer.py the glob
matching and lossless image optimisation.

RULES:
- Nothing in core/ knows which output shape is active
- The encoder is the only code that mutates an aggregate buffer
"""
