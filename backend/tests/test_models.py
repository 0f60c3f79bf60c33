import pytest

from brushrush.config import Config
from brushrush.game.errors import InvalidPayload
from brushrush.game.models import Player, Room, RoomSettings


def make_room(*names):
    host = Player(id=names[0], name=names[0])
    room = Room.create('ROOM01', RoomSettings(), host)
    for name in names[1:]:
        room.add_player(Player(id=name, name=name))
    return room


def test_create_establishes_single_host_and_score_table():
    room = make_room('a', 'b', 'c')
    assert [p.id for p in room.players.values() if p.is_host] == ['a']
    assert set(room.scores) == set(room.players) == {'a', 'b', 'c'}
    assert room.game_state == 'waiting'
    assert room.current_round == 0


def test_room_rejects_broken_invariants():
    with pytest.raises(ValueError):
        Room(id='X', settings=RoomSettings(), players={}, scores={})

    p = Player(id='a', name='A')
    with pytest.raises(ValueError):
        Room(id='X', settings=RoomSettings(), players={'a': p}, scores={'a': 0})

    p.is_host = True
    with pytest.raises(ValueError):
        Room(id='X', settings=RoomSettings(), players={'a': p}, scores={})


def test_remove_player_keeps_score_table_in_step():
    room = make_room('a', 'b')
    removed = room.remove_player('b')
    assert removed.id == 'b'
    assert set(room.scores) == set(room.players) == {'a'}
    assert room.remove_player('b') is None


def test_ensure_host_promotes_first_remaining_player():
    room = make_room('a', 'b', 'c')
    room.remove_player('a')
    new_host = room.ensure_host()
    assert new_host.id == 'b'
    assert room.ensure_host() is None


def test_award_mirrors_score_into_player_and_table():
    room = make_room('a', 'b')
    room.award('b', 25)
    room.award('b', 10)
    assert room.scores['b'] == 35
    assert room.players['b'].score == 35


def test_rotation_wraps_around():
    room = make_room('a', 'b', 'c')
    assert room.next_drawer().id == 'a'
    room.assign_drawer(room.players['a'])
    assert room.next_drawer().id == 'b'
    room.assign_drawer(room.players['c'])
    assert room.next_drawer().id == 'a'


def test_rotation_resumes_after_removed_drawer():
    room = make_room('a', 'b', 'c', 'd')
    room.assign_drawer(room.players['b'])
    room.remove_player('b')
    assert room.drawer_id is None
    # "c" slid into the slot "b" held
    assert room.next_drawer().id == 'c'


def test_rotation_slot_shifts_when_earlier_player_leaves():
    room = make_room('a', 'b', 'c', 'd')
    room.assign_drawer(room.players['b'])
    room.remove_player('b')
    room.remove_player('a')
    assert room.next_drawer().id == 'c'


def test_rotation_slot_unchanged_when_later_player_leaves():
    room = make_room('a', 'b', 'c', 'd')
    room.assign_drawer(room.players['b'])
    room.remove_player('b')
    room.remove_player('d')
    assert room.next_drawer().id == 'c'


def test_rotation_when_last_drawer_removed_wraps():
    room = make_room('a', 'b', 'c')
    room.assign_drawer(room.players['c'])
    room.remove_player('c')
    assert room.next_drawer().id == 'a'


def test_non_drawers_all_guessed():
    room = make_room('a', 'b', 'c')
    room.assign_drawer(room.players['a'])
    assert not room.non_drawers_all_guessed()
    room.players['b'].has_guessed = True
    assert not room.non_drawers_all_guessed()
    room.players['c'].has_guessed = True
    assert room.non_drawers_all_guessed()


def test_reset_game_clears_round_state_and_scores():
    room = make_room('a', 'b')
    room.game_state = 'finished'
    room.current_round = 4
    room.current_word = 'cat'
    room.used_words = ['cat']
    room.drawing_data = [{'x': 1}]
    room.assign_drawer(room.players['a'])
    room.award('b', 30)
    epoch = room.epoch

    room.reset_game()

    assert room.game_state == 'waiting'
    assert room.current_round == 0
    assert room.current_word is None
    assert room.drawer_id is None
    assert room.used_words == []
    assert room.drawing_data == []
    assert room.scores == {'a': 0, 'b': 0}
    assert all(not p.is_drawing and p.score == 0 for p in room.players.values())
    assert room.epoch == epoch + 1
    assert list(room.players) == ['a', 'b']


def test_settings_from_payload_uses_defaults():
    settings = RoomSettings.from_payload({'name': 'Fun'}, Config)
    assert settings.name == 'Fun'
    assert settings.max_players == Config.DEFAULT_MAX_PLAYERS
    assert settings.rounds == Config.DEFAULT_ROUNDS
    assert settings.draw_time == Config.DEFAULT_DRAW_TIME_SEC
    assert settings.categories == Config.DEFAULT_CATEGORIES
    assert settings.difficulty == 'mixed'


def test_settings_from_payload_rejects_invalid_fields():
    with pytest.raises(InvalidPayload):
        RoomSettings.from_payload({'rounds': 0})
    with pytest.raises(InvalidPayload):
        RoomSettings.from_payload({'difficulty': 'nightmare'})


def test_settings_apply_is_partial_and_reports_invalid_keys():
    settings = RoomSettings()
    invalid = settings.apply({
        'rounds': 5,
        'drawTime': 5,
        'isPrivate': True,
        'password': 'hunter2',
        'categories': ['Food', 'Spaceships'],
    })
    assert invalid == ['drawTime']
    assert settings.rounds == 5
    assert settings.draw_time == 60
    assert settings.is_private is True
    assert settings.password == 'hunter2'
    assert settings.categories == ['Food']
