# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from datetime import datetime, timedelta
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import clubstats.models  # noqa: F401  registers tables on Base.metadata
from clubstats.db.base import Base
from clubstats.models.games import Game, GameEvent, GameParticipant
from clubstats.models.members import Club, Member
from clubstats.models.teams import TeamConfiguration, TeamFormation, TeamMember


class ClubFactory:
    """Writes the rows the game panel would have written, one club per test."""

    def __init__(self, db, club_id: str = "club-1"):
        self.db = db
        self.club = Club(id=club_id, name="Amigos da Bola")
        db.add(self.club)
        db.commit()
        self._clock = datetime(2025, 1, 1, 12, 0, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def member(self, member_id, name=None, status="Active", birth_date=None, registration_date=None, nickname=None):
        m = Member(
            id=member_id,
            club_id=self.club.id,
            name=name or member_id.title(),
            nickname=nickname,
            status=status,
            birth_date=birth_date,
            registration_date=registration_date,
        )
        self.db.add(m)
        self.db.commit()
        return m

    def team_config(self, team_name, color=None, is_active=True):
        c = TeamConfiguration(
            club_id=self.club.id,
            team_name=team_name,
            team_color=color,
            is_active=is_active,
            created_at=self._tick(),
        )
        self.db.add(c)
        self.db.commit()
        return c

    def game(self, game_id, day, status="completed", confirmed=(), declined=()):
        g = Game(id=game_id, club_id=self.club.id, date=day, status=status, created_at=self._tick())
        self.db.add(g)
        for mid in confirmed:
            self.db.add(GameParticipant(game_id=game_id, member_id=mid, status="confirmed"))
        for mid in declined:
            self.db.add(GameParticipant(game_id=game_id, member_id=mid, status="declined"))
        self.db.commit()
        return g

    def participant(self, game_id, member_id, status="confirmed"):
        self.db.add(GameParticipant(game_id=game_id, member_id=member_id, status=status))
        self.db.commit()

    def event(self, game_id, team, event_type="goal", member_id=None, times=1):
        for _ in range(times):
            self.db.add(
                GameEvent(
                    game_id=game_id,
                    member_id=member_id,
                    team=team,
                    event_type=event_type,
                    created_at=self._tick(),
                )
            )
        self.db.commit()

    def formation(self, game_id, teams: dict, is_active=True):
        f = TeamFormation(game_id=game_id, is_active=is_active, created_at=self._tick())
        self.db.add(f)
        self.db.flush()
        for mid, team in teams.items():
            self.db.add(TeamMember(team_formation_id=f.id, member_id=mid, team=team))
        self.db.commit()
        return f


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def club(db):
    return ClubFactory(db)
