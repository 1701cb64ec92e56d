# predictionlogic/utils.py
from __future__ import annotations
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from . import canon
from .config import NORTHERN, SeasonClassifier


def parse_timestamp(ts: str) -> pd.Timestamp:
    """
    Parse an ISO timestamp keeping its own offset (wall-clock preserved).
    Unparseable values become NaT rather than raising.
    """
    return pd.to_datetime(ts, errors="coerce")


def utc_key(ts: str) -> pd.Timestamp:
    """UTC-normalised join key; naive timestamps are taken as UTC."""
    t = parse_timestamp(ts)
    if pd.isna(t):
        return pd.NaT
    if t.tzinfo is None:
        return t.tz_localize("UTC")
    return t.tz_convert("UTC")


# "YYYY-MM-DD[THH...]": month and hour exactly as written, offset ignored
_ISO_WALL_CLOCK = r"^\s*\d{4}-(\d{2})-\d{2}(?:[T ](\d{2}))?"


def wall_clock(timestamps: Iterable[str]) -> tuple[np.ndarray, np.ndarray]:
    """
    Return (month, hour) float arrays from each timestamp's own wall-clock.
    NaN where the timestamp could not be parsed.

    ISO strings are read in one vectorised pass; anything else falls back
    to parse_timestamp.
    """
    s = pd.Series(list(timestamps), dtype=object)
    if s.empty:
        return np.array([], dtype=float), np.array([], dtype=float)

    parts = s.astype(str).str.extract(_ISO_WALL_CLOCK)
    months = pd.to_numeric(parts[0], errors="coerce").to_numpy(dtype=float)
    hours = pd.to_numeric(parts[1], errors="coerce").fillna(0.0).to_numpy(dtype=float)

    bad = ~((months >= 1) & (months <= 12) & (hours <= 23))
    for i in np.flatnonzero(bad):
        t = parse_timestamp(s.iloc[i])
        if pd.isna(t):
            months[i] = hours[i] = np.nan
        else:
            months[i], hours[i] = float(t.month), float(t.hour)
    return months, hours


def peak_hour_mask(hours: np.ndarray | pd.Series) -> np.ndarray:
    h = np.asarray(hours, dtype=float)
    mask = np.zeros(len(h), dtype=bool)
    for start, end in canon.PEAK_HOURS:
        mask |= (h >= start) & (h <= end)
    return mask


def night_hour_mask(hours: np.ndarray | pd.Series) -> np.ndarray:
    """Night wraps midnight: [22, 23] and [0, 5]."""
    h = np.asarray(hours, dtype=float)
    return (h >= canon.NIGHT_START_HOUR) | (h <= canon.NIGHT_END_HOUR)


def season_labels(
    months: np.ndarray | pd.Series, seasons: Optional[SeasonClassifier] = None
) -> np.ndarray:
    """Map months to 'winter' / 'summer' / None via the injected classifier."""
    classify = seasons or NORTHERN
    m = np.asarray(months, dtype=float)
    out = np.full(len(m), None, dtype=object)
    for month in np.unique(m[np.isfinite(m)]):
        out[m == month] = classify(int(month))
    return out


def aligned(values: Optional[Sequence[float]], n: int) -> np.ndarray:
    """Pad/truncate to n positions, NaN where no value exists."""
    out = np.full(n, np.nan, dtype=float)
    if values is None:
        return out
    arr = np.asarray(values, dtype=float)[:n]
    out[: len(arr)] = arr
    return out


def utc_keys(timestamps: Iterable[str]) -> pd.Series:
    """Vector of UTC join keys (NaT allowed), parsed in one pass; naive taken as UTC."""
    keys = pd.to_datetime(
        pd.Series(list(timestamps), dtype=object),
        utc=True,
        errors="coerce",
        format="ISO8601",
    )
    return keys.astype("datetime64[ns, UTC]").reset_index(drop=True)

