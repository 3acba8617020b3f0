from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ..core.constants import SLIP_NUMBER_PREFIX, SLIP_SEQUENCE_WIDTH


def slip_number_prefix(generated_at: datetime) -> str:
    """``SS/YYYY/MM/`` for the month the slip is generated in."""
    return f"{SLIP_NUMBER_PREFIX}/{generated_at.year:04d}/{generated_at.month:02d}/"


def format_slip_number(generated_at: datetime, sequence: int) -> str:
    return f"{slip_number_prefix(generated_at)}{sequence:0{SLIP_SEQUENCE_WIDTH}d}"


def parse_sequence(slip_number: str) -> Optional[int]:
    m = re.match(rf"^{re.escape(SLIP_NUMBER_PREFIX)}/\d{{4}}/\d{{2}}/(\d+)$", slip_number or "")
    return int(m.group(1)) if m else None


def next_slip_number(generated_at: datetime, highest: Optional[str]) -> str:
    """Next number after the highest one issued in the same generation month.

    Sequences restart at 1 every month; wider numbers (past 9999) keep
    growing without truncation.
    """

    last = parse_sequence(highest) if highest else None
    return format_slip_number(generated_at, (last or 0) + 1)
