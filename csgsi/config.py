"""Game state integration configuration.

Which sections the game client pushes, and how often, is decided by a
config file the client reads at startup. ``GSIConfigBuilder`` collects the
options and ``GSIConfig`` holds the resolved values used to render it.
"""

import datetime
import enum
from typing import Dict, FrozenSet, Iterable, Optional, Union

import pydantic

Duration = Union[datetime.timedelta, float, int]

DEFAULT_TIMEOUT = datetime.timedelta(seconds=1.1)
DEFAULT_BUFFER = datetime.timedelta(seconds=0.1)
DEFAULT_THROTTLE = datetime.timedelta(seconds=1.0)
DEFAULT_HEARTBEAT = datetime.timedelta(seconds=60)
DEFAULT_PRECISION = 2
MAX_PRECISION = 255


class ConfigInstallError(RuntimeError):
    """Installing the config file into the game directory failed."""

    def __init__(self, description: str,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(f"CS:GO GSI config install error: {description}")
        self.description = description
        self.cause = cause


class Subscription(enum.Enum):
    """A slice of game state the client can be asked to push.

    Values are the keys used in the config file's ``data`` block.
    """
    # history of round wins
    MAP_ROUND_WINS = 'map_round_wins'
    # mode, map, phase, team scores
    MAP = 'map'
    PLAYER_ID = 'player_id'
    # scoreboard info
    PLAYER_MATCH_STATS = 'player_match_stats'
    # armor, flashed, equip_value, health, etc.
    PLAYER_STATE = 'player_state'
    PLAYER_WEAPONS = 'player_weapons'
    PROVIDER = 'provider'
    # round phase and the winning team
    ROUND = 'round'

    # Only meaningful while spectating or observing.
    ALL_GRENADES = 'allgrenades'
    ALL_PLAYERS_ID = 'allplayers_id'
    ALL_PLAYERS_MATCH_STATS = 'allplayers_match_stats'
    ALL_PLAYERS_POSITION = 'allplayers_position'
    ALL_PLAYERS_STATE = 'allplayers_state'
    ALL_PLAYERS_WEAPONS = 'allplayers_weapons'
    # location of the bomb, who's carrying it, dropped or not
    BOMB = 'bomb'
    # time remaining in tenths of a second, which phase
    PHASE_COUNTDOWNS = 'phase_countdowns'
    PLAYER_POSITION = 'player_position'


UNRESTRICTED = (
    Subscription.MAP_ROUND_WINS,
    Subscription.MAP,
    Subscription.PLAYER_ID,
    Subscription.PLAYER_MATCH_STATS,
    Subscription.PLAYER_STATE,
    Subscription.PLAYER_WEAPONS,
    Subscription.PROVIDER,
    Subscription.ROUND,
)

SPECTATOR_ONLY = (
    Subscription.ALL_GRENADES,
    Subscription.ALL_PLAYERS_ID,
    Subscription.ALL_PLAYERS_MATCH_STATS,
    Subscription.ALL_PLAYERS_POSITION,
    Subscription.ALL_PLAYERS_STATE,
    Subscription.ALL_PLAYERS_WEAPONS,
    Subscription.BOMB,
    Subscription.PHASE_COUNTDOWNS,
    Subscription.PLAYER_POSITION,
)


class GSIConfig(pydantic.BaseModel):
    """Resolved configuration, read-only for the life of a server."""
    model_config = pydantic.ConfigDict(frozen=True)

    service_name: str
    timeout: datetime.timedelta
    buffer: datetime.timedelta
    throttle: datetime.timedelta
    heartbeat: datetime.timedelta
    auth: Dict[str, str]
    precision_time: int
    precision_position: int
    precision_vector: int
    subscriptions: FrozenSet[Subscription]


def as_timedelta(value: Duration) -> datetime.timedelta:
    if isinstance(value, datetime.timedelta):
        duration = value
    else:
        duration = datetime.timedelta(seconds=value)
    if duration < datetime.timedelta(0):
        raise ValueError(f"duration must not be negative: {value!r}")
    return duration


def check_precision(precision: int) -> int:
    if isinstance(precision, bool) or not isinstance(precision, int) or \
            not 0 <= precision <= MAX_PRECISION:
        raise ValueError(
            f"precision must be an integer from 0 to {MAX_PRECISION}: "
            f"{precision!r}")
    return precision


class GSIConfigBuilder:
    """Accumulates config options; unset options take defaults in ``build``.

    Every option method returns the builder so calls can be chained. Scalar
    options overwrite earlier calls, while ``auth`` and the subscription
    methods add to what is already there.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._timeout: Optional[datetime.timedelta] = None
        self._buffer: Optional[datetime.timedelta] = None
        self._throttle: Optional[datetime.timedelta] = None
        self._heartbeat: Optional[datetime.timedelta] = None
        self._auth: Dict[str, str] = {}
        self._precision_time: Optional[int] = None
        self._precision_position: Optional[int] = None
        self._precision_vector: Optional[int] = None
        self._subscriptions: set = set()

    def timeout(self, timeout: Duration) -> 'GSIConfigBuilder':
        """Client timeout for each request (default 1.1 seconds)."""
        self._timeout = as_timedelta(timeout)
        return self

    def buffer(self, buffer: Duration) -> 'GSIConfigBuilder':
        """Minimum wait between sending updates (default 0.1 seconds)."""
        self._buffer = as_timedelta(buffer)
        return self

    def throttle(self, throttle: Duration) -> 'GSIConfigBuilder':
        """Minimum wait between a response and the next update (default 1.0
        seconds)."""
        self._throttle = as_timedelta(throttle)
        return self

    def heartbeat(self, heartbeat: Duration) -> 'GSIConfigBuilder':
        """Maximum time between updates (default 60 seconds)."""
        self._heartbeat = as_timedelta(heartbeat)
        return self

    def auth(self, key: str, value: str) -> 'GSIConfigBuilder':
        """Add a token the client echoes back in every update.

        Tokens are not verified here; listeners can compare
        ``Update.auth`` themselves.
        """
        self._auth[str(key)] = str(value)
        return self

    def precision_time(self, precision: int) -> 'GSIConfigBuilder':
        self._precision_time = check_precision(precision)
        return self

    def precision_position(self, precision: int) -> 'GSIConfigBuilder':
        self._precision_position = check_precision(precision)
        return self

    def precision_vector(self, precision: int) -> 'GSIConfigBuilder':
        self._precision_vector = check_precision(precision)
        return self

    def subscribe(self, subscription: Subscription) -> 'GSIConfigBuilder':
        self._subscriptions.add(Subscription(subscription))
        return self

    def subscribe_multiple(
            self, subscriptions: Iterable[Subscription]) -> 'GSIConfigBuilder':
        self._subscriptions.update(
            Subscription(subscription) for subscription in subscriptions)
        return self

    def build(self) -> GSIConfig:
        def or_default(value, default):
            return default if value is None else value

        return GSIConfig(
            service_name=self.name,
            timeout=or_default(self._timeout, DEFAULT_TIMEOUT),
            buffer=or_default(self._buffer, DEFAULT_BUFFER),
            throttle=or_default(self._throttle, DEFAULT_THROTTLE),
            heartbeat=or_default(self._heartbeat, DEFAULT_HEARTBEAT),
            auth=dict(self._auth),
            precision_time=or_default(self._precision_time, DEFAULT_PRECISION),
            precision_position=or_default(
                self._precision_position, DEFAULT_PRECISION),
            precision_vector=or_default(
                self._precision_vector, DEFAULT_PRECISION),
            subscriptions=frozenset(self._subscriptions),
        )
