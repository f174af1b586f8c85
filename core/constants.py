"""Constants and enums for the Rails Europe game engine."""

from enum import Enum


class CardColor(Enum):
    """Wagon card colors.

    The eight simple colors are the suits of the wagon deck. LOCOMOTIVE is
    the wildcard card. GRAY never appears on a card: it is the color of a
    route that accepts any single color.
    """

    BLACK = "black"
    WHITE = "white"
    YELLOW = "yellow"
    RED = "red"
    ORANGE = "orange"
    BLUE = "blue"
    GREEN = "green"
    PINK = "pink"
    LOCOMOTIVE = "locomotive"
    GRAY = "gray"

    @property
    def label(self) -> str:
        """Name used for this card in choice requests."""
        return self.name

    @classmethod
    def from_label(cls, label: str) -> "CardColor":
        """Look up a color by its choice label.

        Raises:
            KeyError: If the label is not a color name.
        """
        return cls[label]

    def is_simple(self) -> bool:
        """Check if this is one of the eight suit colors."""
        return self not in (CardColor.LOCOMOTIVE, CardColor.GRAY)


class RouteKind(Enum):
    """Route variants on the board."""

    PLAIN = "plain"
    FERRY = "ferry"
    TUNNEL = "tunnel"


class PlayerColor(Enum):
    """Player piece colors (used by viewers only)."""

    YELLOW = "yellow"
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    PINK = "pink"


class Phase(Enum):
    """Game phases."""

    SETUP = "setup"
    MAIN = "main"
    LAST_ROUND = "last_round"
    GAME_OVER = "game_over"


SIMPLE_COLORS = [color for color in CardColor if color.is_simple()]

# Player limits
MIN_PLAYERS = 2
MAX_PLAYERS = 5

# Wagon deck: 12 of each simple color plus 14 locomotives (110 cards)
CARDS_PER_COLOR = 12
LOCOMOTIVE_CARDS = 14
DECK_SIZE = CARDS_PER_COLOR * len(SIMPLE_COLORS) + LOCOMOTIVE_CARDS

STARTING_HAND_SIZE = 4
VISIBLE_CARDS = 5
MAX_VISIBLE_LOCOMOTIVES = 2  # 3 or more face-up locomotives reset the row

# Per-player resources
INITIAL_TRAINS = 45
INITIAL_STATIONS = 3
STATION_VALUE = 4  # Points per unused station
INITIAL_SCORE = INITIAL_STATIONS * STATION_VALUE

# Cards needed for the next station, keyed by stations remaining
STATION_COSTS = {3: 1, 2: 2, 1: 3}

# Points per claimed route length (5 and 7 do not occur on the map)
ROUTE_POINTS = {1: 1, 2: 2, 3: 4, 4: 7, 6: 15, 8: 21}
VALID_ROUTE_LENGTHS = frozenset(ROUTE_POINTS)

# Endgame trigger: last round starts once a player is down to this many trains
END_GAME_TRAINS = 2

# Destinations
DESTINATIONS_PER_DRAW = 3
SETUP_SHORT_DESTINATIONS = 3
SETUP_LONG_DESTINATIONS = 1
SETUP_MIN_KEEP = 2
DRAFT_MIN_KEEP = 1

# Tunnels reveal this many cards from the draw pile
TUNNEL_TOLL_CARDS = 3

# Parallel routes block each other at or below this player count
DOUBLE_ROUTE_MAX_PLAYERS = 3

# End-of-game bonus for the longest continuous path
LONGEST_ROUTE_BONUS = 10

# Top-level turn labels
DESTINATIONS_LABEL = "destinations"
BLIND_DRAW_LABEL = "GRIS"  # The face-down pile, named after the gray card backs
