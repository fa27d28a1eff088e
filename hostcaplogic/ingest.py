from __future__ import annotations
import logging
import pandas as pd
from typing import IO, Optional, cast

from . import canon, utils, validate
from .exceptions import IngestError
from .series import NetLoadSeries, SolarPerUnitSeries, TimeSeries
from .types import SeriesKind

logger = logging.getLogger(__name__)

_SERIES_TYPES: dict[str, type[TimeSeries]] = {
    "load": NetLoadSeries,
    "solar": SolarPerUnitSeries,
}


def _auto_index(df: pd.DataFrame) -> pd.DataFrame:
    new = df.copy()

    # 1) If index is already datetime-like, just name it
    if isinstance(new.index, pd.DatetimeIndex):
        new.index.name = canon.INDEX_NAME
        return new

    # 2) Otherwise try to find a timestamp column and set as index
    cols = {str(c).lower(): c for c in new.columns}
    tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
    if tcol is None:
        raise IngestError(
            "No timestamp column found and index is not datetime. "
            f"Expected one of: {', '.join(canon.COMMON_TIMESTAMP_NAMES)}."
        )
    return new.rename(columns={tcol: canon.INDEX_NAME}).set_index(canon.INDEX_NAME)


def _pick_value_column(df: pd.DataFrame, kind: str, value_col: Optional[str]) -> str:
    if value_col is not None:
        if value_col not in df.columns:
            raise IngestError(f"Missing value column: {value_col}")
        return value_col
    cols = {str(c).lower(): c for c in df.columns}
    for candidate in canon.VALUE_COLUMNS[kind]:
        if candidate in cols:
            return cols[candidate]
    if len(df.columns) == 1:
        return df.columns[0]
    raise IngestError(
        f"Could not identify a {kind} value column among: "
        f"{', '.join(map(str, df.columns))}. Pass value_col explicitly."
    )


def from_dataframe(
    df: pd.DataFrame,
    *,
    kind: SeriesKind = "load",
    value_col: Optional[str] = None,
    tz: str = canon.DEFAULT_TZ,
    negate: bool = False,
) -> TimeSeries:
    """
    Normalise a frame into a NetLoadSeries ('load') or SolarPerUnitSeries ('solar'):
      - index: tz-aware timestamps (naive ones read as wall time in tz)
      - rows with unparseable timestamps or values dropped
      - sorted ascending, duplicate timestamps keep the last row
    negate flips the sign, e.g. substation injection into net load.
    """
    if kind not in _SERIES_TYPES:
        raise IngestError(f"kind must be 'load' or 'solar', got {kind!r}")
    cls = _SERIES_TYPES[kind]

    d = _auto_index(df)
    col = _pick_value_column(d, kind, value_col)

    values = pd.to_numeric(d[col], errors="coerce").astype(float)
    if negate:
        values = -values
    idx = utils.parse_timestamps(d.index, tz)
    out = pd.DataFrame({cls.name: values.to_numpy()}, index=idx)
    out.index.name = canon.INDEX_NAME

    n_raw = len(out)
    keep = out.index.notna() & out[cls.name].notna().to_numpy()
    out = out[keep]
    # Always sort before de-dup so 'last' is deterministic
    out = out.sort_index(kind="stable")
    out = out[~out.index.duplicated(keep="last")]
    dropped = n_raw - len(out)
    if dropped:
        logger.warning(
            "Dropped %d of %d %s rows (missing, unparseable or duplicate)",
            dropped,
            n_raw,
            kind,
        )

    validate.assert_series_frame(out, cls.name)
    series = cls.from_series(out[cls.name], tz=tz)
    logger.info("Ingested %d %s samples", len(series), kind)
    return series


def load_from_csv(
    file_like: IO[str] | str,
    *,
    tz: str = canon.DEFAULT_TZ,
    injection: bool = True,
) -> NetLoadSeries:
    """
    Read a headerless two-column substation file: timestamp, MW.

    With injection=True the file holds net injection (export positive) and
    values are negated into net load (export negative). A header row, if
    present, fails to parse and is dropped with the other bad rows.
    """
    raw = pd.read_csv(
        file_like,
        header=None,
        usecols=[0, 1],
        names=[canon.INDEX_NAME, canon.LOAD_COL],
        skip_blank_lines=True,
    )
    series = from_dataframe(
        raw, kind="load", value_col=canon.LOAD_COL, tz=tz, negate=injection
    )
    return cast(NetLoadSeries, series)


def solar_from_csv(
    file_like: IO[str] | str,
    *,
    tz: str = canon.DEFAULT_TZ,
    value_col: str = "ac_kw_per_kwdc",
) -> SolarPerUnitSeries:
    """
    Read a headed per-unit PV file with 'timestamp' and 'ac_kw_per_kwdc'
    columns (kW per kWdc, numerically MW per MWdc).
    """
    raw = pd.read_csv(file_like)
    for col in (canon.INDEX_NAME, value_col):
        if col not in raw.columns:
            raise IngestError(f"Solar file missing required column: {col}")
    series = from_dataframe(raw, kind="solar", value_col=value_col, tz=tz)
    return cast(SolarPerUnitSeries, series)
