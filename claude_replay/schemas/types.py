"""
Foundation model classes and annotated types for every schema package.

Two bases, chosen by who writes the data:
- BaseStrictModel: data this tool builds (events, turns, listings, diffs)
- PermissiveModel: data someone else writes (session records, archive sidecars)

session/ and operations/ import from here; schemas/base.py narrows
BaseStrictModel to the StrictModel the rest of the package uses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

import pydantic

# ==============================================================================
# Base Strict Model (Foundation)
# ==============================================================================


class BaseStrictModel(pydantic.BaseModel):
    """
    Strict, closed model for values this application constructs.

    An unknown field here is a programming error, never input drift.
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


# ==============================================================================
# Permissive Model (Foundation)
# ==============================================================================


class PermissiveModel(pydantic.BaseModel):
    """
    Open model for records written by Claude Code or archiving tools.

    Session files gain fields with every Claude Code release, so unmodelled
    keys are kept as extras instead of failing the line. Modelled keys are
    still typed strictly: `"isMeta": "true"` fails validation and the decoder
    drops the line.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',
        strict=True,
        frozen=True,
    )


# ==============================================================================
# Annotated Types
# ==============================================================================

type JsonDatetime = Annotated[datetime, pydantic.Field(strict=False)]
"""RFC 3339 timestamp as written by Claude Code ("2025-06-01T10:00:00.000Z"), parsed from its string form."""
