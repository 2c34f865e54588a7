"""
Import and Export for matchcore

Reads upstream records into schema objects and writes results back out:
- Profiles and events: JSON (list of records, or wrapped under a
  "profiles"/"events" key) or CSV
- Match candidates and fraud analyses: JSON or CSV

JSON keeps nested stats and signal details; CSV flattens list values into
";"-joined strings.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from matchcore import __version__
from matchcore.core.errors import InvalidInputError
from matchcore.core.schemas import FraudAnalysis, MatchCandidate, PlayerEvent, PlayerProfile

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("json", "csv")


def _detect_format(path: Path | None, format: str | None) -> str:
    if format is None:
        format = path.suffix.lstrip(".") if path else "json"
    fmt = format.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported format: {fmt or '<none>'} (expected json or csv)")
    return fmt


def _frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame rows as plain dicts with NaN replaced by None."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def _read_frame(path: Path, wrapper_key: str, id_columns: tuple[str, ...]) -> pd.DataFrame:
    fmt = _detect_format(path, None)
    if fmt == "csv":
        return pd.read_csv(path, dtype={col: str for col in id_columns})

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in {path}: {e}") from e
    if isinstance(raw, dict):
        raw = raw.get(wrapper_key, [])
    if not isinstance(raw, list):
        raise InvalidInputError(f"Expected a list of records in {path}")
    return pd.DataFrame.from_records(raw)


# ============================================================================
# Import
# ============================================================================

def load_profiles(path: Path) -> list[PlayerProfile]:
    """
    Load player profiles from a JSON or CSV file.

    CSV files carry stats as flat winrate/accuracy columns.

    Args:
        path: Input file (.json or .csv)

    Returns:
        Profiles in file order

    Raises:
        InvalidInputError: If a record is malformed
    """
    df = _read_frame(path, "profiles", ("id", "player_id", "playerId", "region"))
    profiles = [PlayerProfile.from_dict(record) for record in _frame_to_records(df)]
    logger.info(f"Loaded {len(profiles)} profiles from {path}")
    return profiles


def load_events(path: Path) -> list[PlayerEvent]:
    """Load a single event stream, ordered by timestamp."""
    df = _read_frame(path, "events", ("type",))
    if not df.empty and "timestamp" in df.columns:
        df = df.sort_values("timestamp", kind="stable")
    events = [PlayerEvent.from_dict(record) for record in _frame_to_records(df)]
    logger.info(f"Loaded {len(events)} events from {path}")
    return events


def load_event_streams(path: Path, player_column: str = "player_id") -> dict[str, list[PlayerEvent]]:
    """
    Load events and group them into per-player streams.

    Files without a player column are treated as one stream keyed by the
    file stem.

    Returns:
        Mapping of player id to that player's timestamp-ordered events
    """
    df = _read_frame(path, "events", (player_column, "type"))
    if df.empty:
        return {}
    if "timestamp" in df.columns:
        df = df.sort_values("timestamp", kind="stable")

    if player_column not in df.columns:
        return {path.stem: [PlayerEvent.from_dict(r) for r in _frame_to_records(df)]}

    streams: dict[str, list[PlayerEvent]] = {}
    for player_id, group in df.groupby(player_column, sort=False):
        records = _frame_to_records(group.drop(columns=[player_column]))
        streams[str(player_id)] = [PlayerEvent.from_dict(r) for r in records]

    logger.info(f"Loaded {len(df)} events for {len(streams)} players from {path}")
    return streams


# ============================================================================
# Export
# ============================================================================

def _write(text: str, output_path: Path | None, label: str) -> str:
    if output_path:
        output_path.write_text(text, encoding="utf-8")
        logger.info(f"Exported {label} to: {output_path}")
    return text


def _to_json(payload: dict[str, Any]) -> str:
    export_data = {
        "_metadata": {
            "exported_at": datetime.now().isoformat(),
            "format": "matchcore_json",
            "version": __version__,
        },
        **payload,
    }
    return json.dumps(export_data, indent=2, default=str)


def export_candidates(
    player_id: str,
    candidates: list[MatchCandidate],
    output_path: Path | None = None,
    format: str | None = None,
) -> str:
    """
    Export ranked match candidates.

    Args:
        player_id: The requesting player
        candidates: Ranked candidates from find_matches
        output_path: Optional path to write the file
        format: json or csv (detected from output_path when omitted)

    Returns:
        The exported text
    """
    fmt = _detect_format(output_path, format)
    if fmt == "json":
        text = _to_json(
            {"player_id": player_id, "candidates": [c.to_dict() for c in candidates]}
        )
    else:
        rows = [{"rank": i + 1, **c.to_dict()} for i, c in enumerate(candidates)]
        df = pd.DataFrame(rows, columns=["rank", "player_id", "score", "reason"])
        text = df.to_csv(index=False)
    return _write(text, output_path, f"{len(candidates)} candidates")


def export_fraud_analyses(
    analyses: dict[str, FraudAnalysis],
    output_path: Path | None = None,
    format: str | None = None,
) -> str:
    """
    Export fraud analyses keyed by player id.

    CSV rows carry the score, verdict, and ";"-joined signal names and reasons.
    """
    fmt = _detect_format(output_path, format)
    if fmt == "json":
        text = _to_json({"players": {pid: a.to_dict() for pid, a in analyses.items()}})
    else:
        rows = [
            {
                "player_id": pid,
                "risk_score": a.risk_score,
                "verdict": a.verdict.value,
                "signals": ";".join(a.signal_names),
                "reasons": ";".join(a.reasons),
            }
            for pid, a in analyses.items()
        ]
        df = pd.DataFrame(
            rows, columns=["player_id", "risk_score", "verdict", "signals", "reasons"]
        )
        text = df.to_csv(index=False)
    return _write(text, output_path, f"{len(analyses)} fraud analyses")
