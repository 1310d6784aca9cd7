"""Aggregate reports over stored studies: SAIL distribution, GRC x ARC matrix, OSO compliance."""

import logging

import pandas as pd
from sqlalchemy import text

from sora.database import safe_json_loads
from sora.services.risk_tables import ARC_ORDER, SAIL_ORDER
from sora.services.study_store import Principal

logger = logging.getLogger(__name__)

STUDY_COLUMNS = ["id", "name", "owner", "sail", "final_grc", "final_arc", "oso"]


def load_study_frame(engine, principal: Principal) -> pd.DataFrame:
    """Load the principal's studies (all studies for admins), one row per study."""
    query = "SELECT id, name, user_id, data FROM sora_studies"
    params = {}
    if not principal.is_admin:
        query += " WHERE user_id = :user_id"
        params["user_id"] = principal.user_id

    with engine.connect() as conn:
        raw = pd.read_sql(text(query), conn, params=params)

    rows = []
    for _, row in raw.iterrows():
        data = safe_json_loads(row["data"], {})
        assessment = data.get("assessment") or {}
        rows.append({
            "id": row["id"],
            "name": row["name"],
            "owner": row["user_id"],
            "sail": assessment.get("sail"),
            "final_grc": (assessment.get("ground") or {}).get("final_grc"),
            "final_arc": (assessment.get("air") or {}).get("final_arc"),
            "oso": assessment.get("oso") or [],
        })

    logger.info("Loaded %d studies for reporting", len(rows))
    return pd.DataFrame(rows, columns=STUDY_COLUMNS)


def compute_sail_distribution(df: pd.DataFrame) -> list[dict]:
    """Study count per SAIL, I..VI, unassessed studies excluded."""
    assessed = df.dropna(subset=["sail"])
    total = len(assessed)
    counts = assessed["sail"].value_counts().to_dict()

    return [
        {
            "sail": sail.value,
            "count": int(counts.get(sail.value, 0)),
            "percentage": round(100.0 * counts.get(sail.value, 0) / total, 2) if total > 0 else 0,
        }
        for sail in SAIL_ORDER
    ]


def compute_risk_matrix(df: pd.DataFrame) -> dict:
    """Crosstab of final GRC against final ARC."""
    assessed = df.dropna(subset=["final_grc", "final_arc"])
    if assessed.empty:
        return {"total_assessed": 0, "counts": {}}

    table = pd.crosstab(assessed["final_grc"].astype(int), assessed["final_arc"])
    table = table.reindex(columns=[arc.value for arc in ARC_ORDER], fill_value=0)

    return {
        "total_assessed": len(assessed),
        "counts": {
            str(grc): {str(arc): int(count) for arc, count in row.items()}
            for grc, row in table.iterrows()
        },
    }


def compute_oso_compliance(df: pd.DataFrame) -> list[dict]:
    """Per OSO: how many studies declared a robustness and how many meet the requirement."""
    records = [
        {
            "oso_id": entry["oso_id"],
            "declared": entry.get("user_declared_robustness") is not None,
            "met": entry.get("meets_requirement") is True,
        }
        for entries in df["oso"]
        for entry in entries
    ]
    if not records:
        return []

    grouped = pd.DataFrame(records).groupby("oso_id").agg(
        declared_count=("declared", "sum"),
        met_count=("met", "sum"),
    )

    results = []
    for oso_id, row in grouped.iterrows():
        declared = int(row["declared_count"])
        met = int(row["met_count"])
        results.append({
            "oso_id": str(oso_id),
            "declared_count": declared,
            "met_count": met,
            "compliance_rate": round(met / declared, 4) if declared > 0 else 0.0,
        })

    results.sort(key=lambda x: x["oso_id"])
    return results
