"""Label/value trees for decoded updates, for printing or inspection.

``describe`` has exactly one case per section of the data model; anything
else must be an enumeration, a mapping, a scalar or a missing value.
"""

import collections.abc
import enum
import functools
from typing import Any, Iterator, Mapping, NamedTuple, Optional, Tuple

from csgsi.models import Map, MatchStats, Player, Provider, Round, State, \
    TeamState, Update, Weapon

INDENT = '    '
MISSING = '()'


class Node(NamedTuple):
    label: str
    # None for branches.
    value: Optional[str] = None
    children: Tuple['Node', ...] = ()


def branch(label: str, *fields: Tuple[str, Any]) -> Node:
    return Node(label, None,
                tuple(describe(value, name) for name, value in fields))


@functools.singledispatch
def describe(value: Any, label: str = 'Update') -> Node:
    if value is None:
        return Node(label, MISSING)
    if isinstance(value, (bool, int, str)):
        return Node(label, str(value))
    raise TypeError(f'cannot describe {type(value).__name__}')


@describe.register
def _(value: enum.Enum, label: str = 'Update') -> Node:
    return Node(label, value.name)


@describe.register(collections.abc.Mapping)
def _(value: Mapping, label: str = 'Update') -> Node:
    return Node(label, None, tuple(
        describe(item, str(key)) for key, item in sorted(value.items())))


@describe.register
def _(value: Update, label: str = 'Update') -> Node:
    return branch(
        label,
        ('Map', value.map),
        ('Player', value.player),
        ('Provider', value.provider),
        ('Round', value.round),
    )


@describe.register
def _(value: Provider, label: str = 'Provider') -> Node:
    return branch(
        label,
        ('Name', value.name),
        ('App ID', value.app_id),
        ('Version', value.version),
        ('Steam ID', value.steam_id),
        ('Timestamp', value.timestamp),
    )


@describe.register
def _(value: Map, label: str = 'Map') -> Node:
    return branch(
        label,
        ('Current Spectators', value.current_spectators),
        ('Mode', value.mode),
        ('Name', value.name),
        ('# Matches to Win Series', value.num_matches_to_win_series),
        ('Phase', value.phase),
        ('Round', value.round),
        ('Round Wins', value.round_wins),
        ('Souvenirs (Total)', value.souvenirs_total),
        ('CT Team', value.team_ct),
        ('T Team', value.team_t),
    )


@describe.register
def _(value: TeamState, label: str = 'Team') -> Node:
    return branch(
        label,
        ('Score', value.score),
        ('Consecutive Round Losses', value.consecutive_round_losses),
        ('Timeouts Remaining', value.timeouts_remaining),
        ('Matches Won This Series', value.matches_won_this_series),
        ('Name', value.name),
        ('Flag', value.flag),
    )


@describe.register
def _(value: Player, label: str = 'Player') -> Node:
    return branch(
        label,
        ('Steam ID', value.steam_id),
        ('Name', value.name),
        ('Observer Slot', value.observer_slot),
        ('Activity', value.activity),
        ('Match Stats', value.match_stats),
        ('State', value.state),
        ('Team', value.team),
        ('Weapons', value.weapons),
        ('Clan', value.clan),
    )


@describe.register
def _(value: MatchStats, label: str = 'Match Stats') -> Node:
    return branch(
        label,
        ('Kills', value.kills),
        ('Assists', value.assists),
        ('Deaths', value.deaths),
        ('MVPs', value.mvps),
        ('Score', value.score),
    )


@describe.register
def _(value: State, label: str = 'State') -> Node:
    return branch(
        label,
        ('Health', value.health),
        ('Armor', value.armor),
        ('Helmet', value.helmet),
        ('Flashed', value.flashed),
        ('Smoked', value.smoked),
        ('Burning', value.burning),
        ('Money', value.money),
        ('Round Kills', value.round_kills),
        ('Round Headshot Kills', value.round_killhs),
        ('Equipment Value', value.equip_value),
        ('Total Damage This Round', value.round_totaldmg),
        ('Defuse Kit', value.defuse_kit),
    )


@describe.register
def _(value: Weapon, label: str = 'Weapon') -> Node:
    return branch(
        label,
        ('Name', value.name),
        ('Skin', value.paintkit),
        ('Type', value.type),
        ('State', value.state),
        ('Current Bullets', value.ammo_clip),
        ('Bullets Per Clip', value.ammo_clip_max),
        ('Bullets In Reserve', value.ammo_reserve),
    )


@describe.register
def _(value: Round, label: str = 'Round') -> Node:
    return branch(
        label,
        ('Phase', value.phase),
        ('Bomb', value.bomb),
        ('Win Team', value.win_team),
    )


def render_tree(node: Node, indent: str = '') -> Iterator[str]:
    if node.value is not None:
        yield f'{indent}{node.label}: {node.value}'
        return
    yield f'{indent}{node.label}:'
    for child in node.children:
        yield from render_tree(child, indent + INDENT)
