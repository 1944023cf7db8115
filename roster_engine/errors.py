from __future__ import annotations


class RosterError(Exception):
    """Base class for errors surfaced by roster_engine."""


class DecodeError(RosterError):
    """The document, or one of its pages, cannot be opened or rendered."""


class ImageRosterError(RosterError):
    """Raised for raster-only rosters (png/jpg), which carry no text layer."""


class SlotOutOfRange(RosterError):
    """A template slot projects outside the page raster."""


class IngestError(RosterError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DeckNotFound(RosterError, KeyError):
    pass


class CardNotFound(RosterError, KeyError):
    pass
