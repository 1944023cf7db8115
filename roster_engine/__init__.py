"""Roster-to-flashcard engine.

This package turns a scanned class roster PDF into photo flashcards:
- one (name, cropped photo) pair per student, in roster order
- merged into a per-user deck by deck name
- drilled with reveal / self-grade practice, exportable to CSV or Anki

Face detection, OCR and arbitrary roster layouts are out of scope; photo
positions come from a fixed, swappable template.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
