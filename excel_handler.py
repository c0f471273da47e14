import pandas as pd
from pathlib import Path
from typing import List, Optional, Tuple

from scheduler.config import SchedulerConfig
from scheduler.timeutil import local_tz, to_local

COLUMNS = ["Title", "Start", "End"]


def load_events_frame(path) -> pd.DataFrame:
    """Read a calendar export (.xlsx via openpyxl, or .csv) with Title/Start/End columns."""
    p = Path(path)
    if p.suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(p)
    else:
        df = pd.read_csv(p)
    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{p.name}: missing column(s) {', '.join(missing)}")
    return df


def _to_utc(value, offset_minutes: int):
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        # naive cells are local wall-clock
        ts = ts.tz_localize(local_tz(offset_minutes))
    return ts.tz_convert("UTC").to_pydatetime()


def rows_to_events(df: pd.DataFrame, offset_minutes: int) -> Tuple[List[tuple], List[int]]:
    """Returns ([(title, start_utc, end_utc), ...], [skipped row indexes])."""
    events, skipped = [], []
    for idx, row in df.iterrows():
        start = _to_utc(row["Start"], offset_minutes)
        end = _to_utc(row["End"], offset_minutes)
        title = "" if pd.isna(row["Title"]) else str(row["Title"]).strip()
        if start is None or end is None or not (end > start):
            skipped.append(int(idx))
            continue
        events.append((title, start, end))
    return events, skipped


def sync_store_from_sheet(store, path, config: Optional[SchedulerConfig] = None) -> int:
    """
    Replace the store's contents with the events in the sheet at `path`.
    Rows with unparseable or inverted times are skipped. Returns rows added.
    """
    config = config or SchedulerConfig()
    df = load_events_frame(path)
    events, skipped = rows_to_events(df, config.utc_offset_minutes)
    store.clear()
    for title, start, end in events:
        store.add(title, start, end)
    print("SYNC_DEBUG:", {"file": str(path), "added": len(events), "skipped": skipped})
    return len(events)


def export_events_sheet(events, path, config: Optional[SchedulerConfig] = None) -> Path:
    """Write events to .xlsx or .csv with local wall-clock Start/End."""
    config = config or SchedulerConfig()
    off = config.utc_offset_minutes
    df = pd.DataFrame(
        [
            {
                "Title": e.title,
                "Start": to_local(e.start_time, off).strftime("%Y-%m-%d %H:%M"),
                "End": to_local(e.end_time, off).strftime("%Y-%m-%d %H:%M"),
            }
            for e in events
        ],
        columns=COLUMNS,
    )
    p = Path(path)
    if p.suffix.lower() == ".xlsx":
        df.to_excel(p, index=False)
    else:
        df.to_csv(p, index=False)
    return p
