import json
from unittest.mock import patch

import pydantic
import pytest

from csgsi.models import Activity, BombState, MapPhase, Mode, RoundPhase, \
  Team, Update, WeaponState, WeaponType
from csgsi.state_serialization import DeserializationError, \
  GameStateParseError, decode_update, dumps_update, load_game_state, \
  parse_game_state, serialize_update
from tests.gsi_test_utils import MENU_GAME_STATE, SAMPLE_GAME_STATE, \
  game_state


def test_parse_game_state():
  update = parse_game_state(SAMPLE_GAME_STATE)

  assert update.provider.name == 'Counter-Strike: Global Offensive'
  assert update.provider.app_id == 730
  assert update.provider.steam_id == '76561198413889827'
  assert update.provider.timestamp == 1557535071

  assert update.map.mode is Mode.WINGMAN
  assert update.map.name == 'de_shortnuke'
  assert update.map.phase is MapPhase.LIVE
  assert update.map.round_wins == {1: 'ct_win_elimination', 2: 't_win_bomb'}
  assert update.map.team_ct.name is None
  assert update.map.team_t.name == 'Garbage Collectors'
  assert update.map.team_t.flag == 'US'

  assert update.round.phase is RoundPhase.OVER
  assert update.round.bomb is BombState.EXPLODED
  assert update.round.win_team is Team.T

  assert update.player.steam_id == '76561197970510532'
  assert update.player.activity is Activity.PLAYING
  assert update.player.team is Team.T
  assert update.player.match_stats.kills == -1
  assert update.player.state.helmet is True
  assert update.player.state.round_totaldmg == 0
  assert update.player.state.defuse_kit is None

  assert update.auth == {'token': 'afohXaef9ighaeSh'}


def test_parse_weapons():
  weapons = parse_game_state(SAMPLE_GAME_STATE).player.weapons

  assert set(weapons) == {'weapon_0', 'weapon_1', 'weapon_2'}
  assert weapons['weapon_0'].type is WeaponType.KNIFE
  assert weapons['weapon_0'].ammo_clip is None
  assert weapons['weapon_1'].state is WeaponState.ACTIVE
  assert weapons['weapon_1'].ammo_reserve == 120
  assert weapons['weapon_2'].type is None


def test_parse_menu_state():
  update = parse_game_state(MENU_GAME_STATE)
  assert update.map is None
  assert update.round is None
  assert update.player.activity is Activity.MENU
  assert update.player.weapons == {}
  assert update.player.state is None
  assert update.auth == {}


@pytest.mark.parametrize('wire, mode', [
  ('competitive', Mode.COMPETITIVE),
  ('casual', Mode.CASUAL),
  ('deathmatch', Mode.DEATHMATCH),
  ('training', Mode.TRAINING),
  ('gungametrbomb', Mode.DEMOLITION),
  ('gungameprogressive', Mode.ARMS_RACE),
  ('scrimcomp2v2', Mode.WINGMAN),
])
def test_mode_aliases(wire, mode):
  state = game_state()
  state['map']['mode'] = wire
  assert parse_game_state(state).map.mode is mode


@pytest.mark.parametrize('wire, weapon_type', [
  ('Submachine Gun', WeaponType.SMG),
  ('Machine Gun', WeaponType.MACHINE_GUN),
  ('SniperRifle', WeaponType.SNIPER_RIFLE),
  ('StackableItem', WeaponType.STACKABLE_ITEM),
  ('C4', WeaponType.C4),
])
def test_weapon_type_names(wire, weapon_type):
  state = game_state()
  state['player']['weapons']['weapon_0']['type'] = wire
  weapon = parse_game_state(state).player.weapons['weapon_0']
  assert weapon.type is weapon_type


def test_defuse_kit_wire_name():
  state = game_state()
  state['player']['state']['defusekit'] = True
  assert parse_game_state(state).player.state.defuse_kit is True

  state = game_state()
  state['player']['state']['defuse_kit'] = True
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_diff_metadata_is_discarded():
  update = parse_game_state(SAMPLE_GAME_STATE)
  assert not hasattr(update, 'previously')
  assert not hasattr(update, 'added')
  assert 'previously' not in serialize_update(update)
  assert 'added' not in serialize_update(update)


def test_auth_is_required():
  state = game_state()
  del state['auth']
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_sections_are_optional():
  update = parse_game_state({'auth': {}})
  assert update == Update.model_validate({'auth': {}})
  assert update.provider is None
  assert update.player is None


@pytest.mark.parametrize('path', [
  (),
  ('provider',),
  ('map',),
  ('map', 'team_ct'),
  ('round',),
  ('player',),
  ('player', 'match_stats'),
  ('player', 'state'),
  ('player', 'weapons', 'weapon_1'),
])
def test_unknown_field_rejected(path):
  state = game_state()
  section = state
  for key in path:
    section = section[key]
  section['allplayers'] = {}

  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_unknown_enum_value_rejected():
  state = game_state()
  state['map']['mode'] = 'survival'
  with pytest.raises(DeserializationError):
    parse_game_state(state)

  state = game_state()
  state['player']['team'] = 'ct'
  with pytest.raises(DeserializationError):
    parse_game_state(state)

  state = game_state()
  state['player']['activity'] = 'textinput'
  with pytest.raises(DeserializationError):
    parse_game_state(state)


@pytest.mark.parametrize('section, field, value', [
  ('provider', 'appid', '730'),
  ('provider', 'steamid', 76561198413889827),
  ('provider', 'timestamp', 1557535071.5),
  ('map', 'round', True),
  ('map', 'round', -1),
  ('map', 'name', None),
  ('round', 'phase', 1),
])
def test_type_mismatch_rejected(section, field, value):
  state = game_state()
  state[section][field] = value
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_signed_and_unsigned_fields():
  state = game_state()
  state['player']['state']['round_kills'] = -1
  assert parse_game_state(state).player.state.round_kills == -1

  state = game_state()
  state['player']['state']['health'] = -1
  with pytest.raises(DeserializationError):
    parse_game_state(state)

  state = game_state()
  state['player']['state']['helmet'] = 1
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_missing_required_map_fields():
  with pytest.raises(DeserializationError):
    parse_game_state({'map': {}, 'auth': {}})


def test_non_object_rejected():
  with pytest.raises(DeserializationError):
    parse_game_state([SAMPLE_GAME_STATE])


def test_load_game_state():
  assert load_game_state(b'{"auth": {}}') == {'auth': {}}
  with pytest.raises(GameStateParseError):
    load_game_state(b'{"auth": ')
  with pytest.raises(GameStateParseError):
    load_game_state(b'\xff\xfe')


def test_decode_update():
  body = json.dumps(SAMPLE_GAME_STATE).encode('utf-8')
  assert decode_update(body) == parse_game_state(SAMPLE_GAME_STATE)


def test_update_is_read_only():
  update = parse_game_state(SAMPLE_GAME_STATE)
  with pytest.raises(pydantic.ValidationError):
    update.provider = None


@pytest.mark.parametrize('state', [SAMPLE_GAME_STATE, MENU_GAME_STATE])
def test_round_trip(state):
  update = parse_game_state(state)
  assert parse_game_state(json.loads(dumps_update(update))) == update


def test_serialize_update_uses_wire_names():
  serialized = json.loads(dumps_update(parse_game_state(SAMPLE_GAME_STATE)))
  expected = game_state()
  del expected['previously']
  del expected['added']
  assert serialized == expected


if __name__ == '__main__':
  raise SystemExit(pytest.main(['-xv', __file__]))


@pytest.mark.parametrize('key', ['1.0', ' 2 ', '+1', '-1', '01', '', 'one'])
def test_round_win_key_must_be_decimal(key):
  state = game_state()
  state['map']['round_wins'] = {key: 't_win_bomb'}
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_round_win_keys_cannot_collide():
  state = game_state()
  state['map']['round_wins'] = {
    '1': 'ct_win_elimination', '1.0': 't_win_bomb', ' 2 ': 'ct_win_time'}
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_round_win_key_range():
  state = game_state()
  state['map']['round_wins'] = {'0': 'ct_win_time',
                                str(2 ** 64 - 1): 't_win_bomb'}
  assert set(parse_game_state(state).map.round_wins) == {0, 2 ** 64 - 1}

  state['map']['round_wins'] = {str(2 ** 64): 't_win_bomb'}
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_unsigned_fields_are_64_bit():
  state = game_state()
  state['provider']['timestamp'] = 2 ** 64 - 1
  assert parse_game_state(state).provider.timestamp == 2 ** 64 - 1

  state['provider']['timestamp'] = 2 ** 64
  with pytest.raises(DeserializationError):
    parse_game_state(state)


def test_deeply_nested_body_is_a_parse_error():
  depth = 100000
  body = b'{"added": ' + b'[' * depth + b']' * depth + b', "auth": {}}'
  with pytest.raises(GameStateParseError):
    load_game_state(body)


def test_recursion_during_decode_is_a_deserialization_error():
  with patch('csgsi.state_serialization.Update') as update_model:
    update_model.model_validate.side_effect = RecursionError('too deep')
    with pytest.raises(DeserializationError):
      parse_game_state({'auth': {}})


def test_mappings_are_read_only():
  update = parse_game_state(SAMPLE_GAME_STATE)
  weapon = update.player.weapons['weapon_0']

  with pytest.raises(TypeError):
    update.player.weapons['weapon_9'] = weapon
  with pytest.raises(TypeError):
    del update.player.weapons['weapon_0']
  with pytest.raises(TypeError):
    update.auth['token'] = 'changed'
  with pytest.raises(TypeError):
    update.map.round_wins[3] = 't_win_bomb'
  with pytest.raises(TypeError):
    parse_game_state(MENU_GAME_STATE).player.weapons['weapon_0'] = weapon

  assert set(update.player.weapons) == {'weapon_0', 'weapon_1', 'weapon_2'}
  assert update.auth == {'token': 'afohXaef9ighaeSh'}
