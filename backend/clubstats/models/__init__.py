# Import the models here so SQLAlchemy "sees" them when creating tables
from clubstats.models.members import Club, Member  # noqa: F401
from clubstats.models.games import Game, GameEvent, GameParticipant  # noqa: F401
from clubstats.models.teams import TeamConfiguration, TeamFormation, TeamMember  # noqa: F401
from clubstats.models.highlights import GameHighlight, GameHighlightVote, GameVotingControl  # noqa: F401
