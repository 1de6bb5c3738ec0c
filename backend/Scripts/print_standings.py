# Scripts/print_standings.py
# Usage (from backend/):
#   python Scripts/print_standings.py <club_id> teams --year 2025 --month 3
#   python Scripts/print_standings.py <club_id> players --year 2025
#   python Scripts/print_standings.py <club_id> participation --tsv

import argparse

from clubstats.core.errors import EngineError
from clubstats.db.session import SessionLocal
from clubstats.services.participation_ranking import compute_participation_ranking
from clubstats.services.player_stats import compute_player_stats
from clubstats.services.team_stats import compute_team_stats

COLUMNS = {
    "teams": ["name", "total_games", "wins", "draws", "losses", "goals_scored", "goals_conceded", "points", "win_rate"],
    "players": ["position", "name", "games", "goals", "own_goals", "saves", "wins", "draws", "losses", "points", "win_rate"],
    "participation": [
        "position", "name", "games", "participation_rate", "effective_participation_rate",
        "membership_years", "age", "points",
    ],
}


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("club_id", help="Club id")
    ap.add_argument("table", choices=sorted(COLUMNS), help="Which table to print")
    ap.add_argument("--year", default="all", help='Year, e.g. 2025 (default "all")')
    ap.add_argument("--month", default="all", help='Month 1-12 (default "all")')
    ap.add_argument("--tsv", action="store_true", help="Print as TSV (tab-separated)")
    args = ap.parse_args()

    sep = "\t" if args.tsv else " | "

    db = SessionLocal()
    try:
        if args.table == "teams":
            rows = compute_team_stats(db, args.club_id, args.year, args.month)
        elif args.table == "players":
            rows = compute_player_stats(db, args.club_id, args.year, args.month)
        else:
            rows = compute_participation_ranking(db, args.club_id, args.year, args.month)
    except EngineError as e:
        raise SystemExit(f"ERROR ({e.kind}): {e.message}")
    finally:
        db.close()

    cols = COLUMNS[args.table]
    print(sep.join(cols))
    for r in rows:
        data = r.model_dump()
        print(sep.join(str(data.get(c, "")) for c in cols))

    print(f"\nTOTAL: {len(rows)} row(s) for club {args.club_id} ({args.year}/{args.month})")


if __name__ == "__main__":
    main()
