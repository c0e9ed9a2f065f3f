"""crossrealm: replicate object changes from a source bucket into a bucket in another storage realm."""

from __future__ import annotations

__version__ = "0.1.0"
