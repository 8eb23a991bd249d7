from __future__ import annotations

from datetime import date, timedelta

import pandas as pd


def task_stats(tasks):
    total = len(tasks)
    completed = sum(1 for task in tasks if task.get("status") == "completed")
    percent = round(completed / total * 100, 1) if total else 0
    return {"total": total, "completed": completed, "percent": percent}


def mood_stats(entries):
    scores = [int(entry["mood_score"]) for entry in entries if entry.get("mood_score") is not None]
    average = round(sum(scores) / len(scores), 1) if scores else 0
    return {"count": len(scores), "average": average}


def mood_streak(entries, today: date):
    logged = {date.fromisoformat(str(entry["date"])[:10]) for entry in entries if entry.get("date")}
    count = 0
    current = today
    while current in logged:
        count += 1
        current -= timedelta(days=1)
    return count


def finance_totals(entries):
    income = 0.0
    expense = 0.0
    transfers = 0
    for entry in entries:
        amount = float(entry.get("amount") or 0)
        if entry.get("type") == "income":
            income += amount
        elif entry.get("type") == "expense":
            expense += amount
        else:
            transfers += 1
    return {
        "income": round(income, 2),
        "expense": round(expense, 2),
        "balance": round(income - expense, 2),
        "transfers": transfers,
        "count": len(entries),
    }


def expense_by_category(entries) -> pd.DataFrame:
    frame = pd.DataFrame(entries, columns=["type", "category", "amount"])
    frame = frame[frame["type"] == "expense"]
    if frame.empty:
        return pd.DataFrame(columns=["category", "amount"])
    frame = frame.assign(
        category=frame["category"].fillna("Uncategorized").replace("", "Uncategorized"),
        amount=frame["amount"].astype(float),
    )
    grouped = frame.groupby("category", as_index=False)["amount"].sum()
    return grouped.sort_values("amount", ascending=False).reset_index(drop=True)


def mood_frame(entries) -> pd.DataFrame:
    frame = pd.DataFrame(entries, columns=["date", "mood_score", "mood_label"])
    if frame.empty:
        return frame
    frame["date"] = pd.to_datetime(frame["date"]).dt.date
    return frame.sort_values("date").reset_index(drop=True)
