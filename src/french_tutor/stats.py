"""Accuracy and points statistics over stored submissions."""
from french_tutor.db import get_connection


def get_accuracy(db_path: str) -> float:
    """Share of submissions that were correct, as a percentage."""
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT COUNT(*) as total, SUM(is_correct) as correct FROM submission_results"
    ).fetchone()
    conn.close()
    if row["total"] == 0:
        return 0.0
    return round((row["correct"] / row["total"]) * 100, 1)


def get_variant_scores(db_path: str) -> dict:
    """Accuracy broken down by question variant."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT variant, COUNT(*) as total, SUM(is_correct) as correct
        FROM submission_results
        GROUP BY variant"""
    ).fetchall()
    conn.close()
    return {
        row["variant"]: round((row["correct"] / row["total"]) * 100, 1)
        for row in rows
    }


def get_points_earned(db_path: str) -> int:
    conn = get_connection(db_path)
    row = conn.execute("SELECT COALESCE(SUM(score), 0) as points FROM submission_results").fetchone()
    conn.close()
    return row["points"]


def get_weak_variants(db_path: str, threshold: float = 70.0) -> list[dict]:
    """Variants whose accuracy is below threshold (sorted worst first)."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT variant, COUNT(*) as total, SUM(is_correct) as correct,
            AVG(hints_used) as avg_hints
        FROM submission_results
        GROUP BY variant
        HAVING (CAST(correct AS REAL) / total) * 100 < ?
        ORDER BY (CAST(correct AS REAL) / total) ASC""",
        (threshold,),
    ).fetchall()
    conn.close()
    return [
        {
            "variant": r["variant"],
            "total": r["total"],
            "correct": r["correct"],
            "score": round((r["correct"] / r["total"]) * 100, 1),
            "avg_hints": round(r["avg_hints"], 1),
        }
        for r in rows
    ]
