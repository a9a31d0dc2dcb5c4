"""JSON-LD context storage, document loading, linked-data proofs and structural validation."""

__version__ = "0.1.0"

__all__ = [
    "context",
    "store",
    "documentloader",
    "remote",
    "processor",
    "proof",
    "verifydata",
    "validator",
]