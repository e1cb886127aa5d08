"""Typed representation of a single game state integration push.

Every section is a frozen pydantic model that forbids unknown keys, so any
change to the upstream wire format fails loudly instead of being dropped.
"""

import enum
import re
import types
from typing import Annotated, Any, Dict, Mapping, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, \
    Field, StrictBool, StrictInt, StrictStr, WrapSerializer, model_validator

__all__ = ['UnsignedInt', 'RoundNumber', 'ReadOnlyDict', 'Team', 'Mode',
           'MapPhase', 'Activity', 'WeaponType', 'WeaponState', 'RoundPhase',
           'BombState', 'Provider', 'TeamState', 'Map', 'MatchStats', 'State',
           'Weapon', 'Player', 'Round', 'Update', 'DISCARDED_KEYS']

UINT64_MAX = 2 ** 64 - 1

UnsignedInt = Annotated[int, Field(strict=True, ge=0, le=UINT64_MAX)]

# Canonical decimal only, so two wire keys can never name the same round.
ROUND_NUMBER_PATTERN = re.compile(r'0|[1-9][0-9]*')


def parse_round_number(value: Any) -> Any:
    if isinstance(value, str):
        if not ROUND_NUMBER_PATTERN.fullmatch(value):
            raise ValueError(f'invalid round number {value!r}')
        return int(value)
    return value


RoundNumber = Annotated[UnsignedInt, BeforeValidator(parse_round_number)]

K = TypeVar('K')
V = TypeVar('V')


def empty_mapping() -> Mapping:
    return types.MappingProxyType({})


def serialize_mapping(value: Mapping, handler) -> Any:
    return handler(dict(value))


# Decoded as a dict, then exposed through a read-only proxy.
ReadOnlyDict = Annotated[Dict[K, V],
                         AfterValidator(types.MappingProxyType),
                         WrapSerializer(serialize_mapping)]

# Diffing metadata sent alongside each snapshot; accepted but never decoded.
DISCARDED_KEYS = frozenset(('added', 'previously'))


class Team(str, enum.Enum):
    CT = 'CT'
    T = 'T'


class Mode(str, enum.Enum):
    COMPETITIVE = 'competitive'
    CASUAL = 'casual'
    DEATHMATCH = 'deathmatch'
    TRAINING = 'training'
    DEMOLITION = 'gungametrbomb'
    ARMS_RACE = 'gungameprogressive'
    WINGMAN = 'scrimcomp2v2'


class MapPhase(str, enum.Enum):
    WARMUP = 'warmup'
    LIVE = 'live'
    INTERMISSION = 'intermission'
    GAME_OVER = 'gameover'


class Activity(str, enum.Enum):
    MENU = 'menu'
    PLAYING = 'playing'


class WeaponType(str, enum.Enum):
    KNIFE = 'Knife'
    PISTOL = 'Pistol'
    SMG = 'Submachine Gun'
    MACHINE_GUN = 'Machine Gun'
    RIFLE = 'Rifle'
    SNIPER_RIFLE = 'SniperRifle'
    SHOTGUN = 'Shotgun'
    STACKABLE_ITEM = 'StackableItem'
    GRENADE = 'Grenade'
    C4 = 'C4'


class WeaponState(str, enum.Enum):
    HOLSTERED = 'holstered'
    ACTIVE = 'active'
    RELOADING = 'reloading'


class RoundPhase(str, enum.Enum):
    LIVE = 'live'
    OVER = 'over'
    FREEZETIME = 'freezetime'


class BombState(str, enum.Enum):
    PLANTED = 'planted'
    DEFUSED = 'defused'
    EXPLODED = 'exploded'


class GameStateModel(BaseModel):
    """Base for every section: closed schema, immutable once decoded."""
    model_config = ConfigDict(extra='forbid', frozen=True)


class Provider(GameStateModel):
    """The game client that sent the push."""
    name: StrictStr
    app_id: UnsignedInt = Field(alias='appid')
    version: UnsignedInt
    # Opaque: 64-bit ids lose precision as JSON numbers in some encoders.
    steam_id: StrictStr = Field(alias='steamid')
    timestamp: UnsignedInt


class TeamState(GameStateModel):
    """Per-map standing of one side."""
    score: UnsignedInt
    consecutive_round_losses: UnsignedInt
    timeouts_remaining: UnsignedInt
    matches_won_this_series: UnsignedInt
    name: Optional[StrictStr] = None
    flag: Optional[StrictStr] = None


class Map(GameStateModel):
    current_spectators: UnsignedInt
    mode: Mode
    name: StrictStr
    num_matches_to_win_series: UnsignedInt
    phase: MapPhase
    round: UnsignedInt
    # Round number to outcome code, e.g. "ct_win_elimination".
    round_wins: ReadOnlyDict[RoundNumber, StrictStr] = Field(
        default_factory=empty_mapping)
    souvenirs_total: UnsignedInt
    team_ct: TeamState
    team_t: TeamState


class MatchStats(GameStateModel):
    # Team kills are subtracted, so this can go negative.
    kills: StrictInt
    assists: UnsignedInt
    deaths: UnsignedInt
    mvps: UnsignedInt
    score: UnsignedInt


class State(GameStateModel):
    health: UnsignedInt
    armor: UnsignedInt
    helmet: StrictBool
    flashed: UnsignedInt
    smoked: UnsignedInt
    burning: UnsignedInt
    money: UnsignedInt
    round_kills: StrictInt
    round_killhs: UnsignedInt
    equip_value: UnsignedInt
    round_totaldmg: Optional[UnsignedInt] = None
    defuse_kit: Optional[StrictBool] = Field(default=None, alias='defusekit')


class Weapon(GameStateModel):
    name: StrictStr
    paintkit: StrictStr
    # Missing for the taser.
    type: Optional[WeaponType] = None
    state: WeaponState
    ammo_clip: Optional[UnsignedInt] = None
    ammo_clip_max: Optional[UnsignedInt] = None
    ammo_reserve: Optional[UnsignedInt] = None


class Player(GameStateModel):
    """The player currently being observed."""
    steam_id: StrictStr = Field(alias='steamid')
    name: StrictStr
    observer_slot: Optional[UnsignedInt] = None
    activity: Activity
    match_stats: Optional[MatchStats] = None
    state: Optional[State] = None
    team: Optional[Team] = None
    # Keyed by slot, e.g. "weapon_0".
    weapons: ReadOnlyDict[StrictStr, Weapon] = Field(
        default_factory=empty_mapping)
    clan: Optional[StrictStr] = None


class Round(GameStateModel):
    phase: RoundPhase
    bomb: Optional[BombState] = None
    win_team: Optional[Team] = None


class Update(GameStateModel):
    """One decoded push.

    Every section is optional except ``auth``, which echoes the tokens the
    client was configured with and may be empty.
    """
    map: Optional[Map] = None
    player: Optional[Player] = None
    provider: Optional[Provider] = None
    round: Optional[Round] = None
    auth: ReadOnlyDict[StrictStr, StrictStr]

    @model_validator(mode='before')
    @classmethod
    def discard_diff_metadata(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items()
                    if key not in DISCARDED_KEYS}
        return data
