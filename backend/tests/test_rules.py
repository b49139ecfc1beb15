"""Unit tests for siege/services/games/rules.py"""

import pytest

from siege.models import ATTACKER, DEFENDER
from siege.services.games import rules

A, D, _ = ATTACKER, DEFENDER, None


def empty_board():
    return [[None] * 5 for _ in range(5)]


def test_initial_board_layout():
    board = rules.initial_board()
    assert board[0] == [_, A, A, A, _]
    assert board[1] == [_] * 5
    for row in range(2, 5):
        assert board[row] == [D] * 5
    assert rules.count_pieces(board, ATTACKER) == 3
    assert rules.count_pieces(board, DEFENDER) == 15


def test_initial_board_is_fresh_each_call():
    first = rules.initial_board()
    first[0][1] = None
    assert rules.initial_board()[0][1] == ATTACKER


def test_attacker_one_step_into_empty_cell():
    board = rules.initial_board()
    assert rules.is_legal_move(board, 0, 1, 1, 1)
    assert rules.is_legal_move(board, 0, 1, 0, 0)
    # occupied by another attacker
    assert not rules.is_legal_move(board, 0, 1, 0, 2)


def test_diagonal_moves_always_rejected():
    board = empty_board()
    board[2][2] = ATTACKER
    board[3][3] = DEFENDER
    for to_row, to_col in [(1, 1), (1, 3), (3, 1), (4, 4)]:
        assert not rules.is_legal_move(board, 2, 2, to_row, to_col)
    board[2][2] = DEFENDER
    assert not rules.is_legal_move(board, 2, 2, 1, 1)


def test_empty_source_is_illegal():
    board = rules.initial_board()
    assert not rules.is_legal_move(board, 1, 1, 1, 2)


def test_zero_length_move_is_illegal():
    board = rules.initial_board()
    assert not rules.is_legal_move(board, 0, 1, 0, 1)


def test_out_of_range_coordinates_are_illegal():
    board = rules.initial_board()
    assert not rules.is_legal_move(board, 0, 1, -1, 1)
    assert not rules.is_legal_move(board, 4, 0, 5, 0)


def test_defender_moves_exactly_one_step_into_empty_cell():
    board = rules.initial_board()
    assert rules.is_legal_move(board, 2, 0, 1, 0)
    assert not rules.is_legal_move(board, 2, 0, 0, 0)  # two steps
    assert not rules.is_legal_move(board, 3, 0, 2, 0)  # occupied


def test_defender_cannot_jump():
    board = empty_board()
    board[2][2] = DEFENDER
    board[2][3] = ATTACKER
    assert not rules.is_legal_move(board, 2, 2, 2, 4)


def test_attacker_capture_jump_over_defender():
    board = empty_board()
    board[1][1] = ATTACKER
    board[2][1] = DEFENDER
    assert rules.is_legal_move(board, 1, 1, 3, 1)

    record = rules.apply_move(board, 1, 1, 3, 1)
    assert board[3][1] == ATTACKER
    assert board[1][1] is None
    assert board[2][1] is None
    assert record.captured is not None
    assert (record.captured.row, record.captured.col, record.captured.piece) == (2, 1, DEFENDER)


def test_attacker_jump_over_empty_cell_rejected():
    board = empty_board()
    board[1][1] = ATTACKER
    assert not rules.is_legal_move(board, 1, 1, 3, 1)


def test_attacker_jump_over_attacker_rejected():
    board = empty_board()
    board[1][1] = ATTACKER
    board[1][2] = ATTACKER
    assert not rules.is_legal_move(board, 1, 1, 1, 3)


def test_attacker_jump_onto_occupied_cell_rejected():
    board = rules.initial_board()
    board[1][1] = ATTACKER
    board[0][1] = None
    # (2, 1) is a defender but (3, 1) is occupied too
    assert not rules.is_legal_move(board, 1, 1, 3, 1)


def test_attacker_cannot_move_three_cells():
    board = empty_board()
    board[0][0] = ATTACKER
    assert not rules.is_legal_move(board, 0, 0, 0, 3)


def test_apply_plain_move_has_no_capture():
    board = rules.initial_board()
    record = rules.apply_move(board, 0, 1, 1, 1)
    assert board[1][1] == ATTACKER
    assert board[0][1] is None
    assert record.captured is None
    assert record.to_dict() == {
        'from': {'row': 0, 'col': 1},
        'to': {'row': 1, 'col': 1},
        'piece': ATTACKER,
        'captured': None,
    }


def test_revert_move_restores_captured_piece():
    board = empty_board()
    board[1][1] = ATTACKER
    board[1][2] = DEFENDER
    before = rules.copy_board(board)
    record = rules.apply_move(board, 1, 1, 1, 3)
    rules.revert_move(board, record)
    assert board == before


def test_check_terminal_game_continues_from_start():
    assert rules.check_terminal(rules.initial_board()) == {'finished': False}


def test_check_terminal_attacker_wins_without_defenders():
    board = empty_board()
    board[0][0] = ATTACKER
    status = rules.check_terminal(board)
    assert status['finished'] is True
    assert status['winner'] == ATTACKER
    assert status['message']


def test_check_terminal_defender_wins_when_attackers_blockaded():
    board = empty_board()
    board[0][0] = ATTACKER
    board[0][1] = DEFENDER
    board[0][2] = DEFENDER
    board[1][0] = DEFENDER
    board[2][0] = DEFENDER
    status = rules.check_terminal(board)
    assert status['finished'] is True
    assert status['winner'] == DEFENDER


def test_blockade_is_defender_win_even_when_defenders_are_stuck():
    # Full board: nobody can move, yet the blockade check wins over a draw
    board = [[DEFENDER] * 5 for _ in range(5)]
    board[0][0] = ATTACKER
    assert not any(
        rules.is_legal_move(board, r, c, tr, tc)
        for r in range(5) for c in range(5)
        for tr in range(5) for tc in range(5)
    )
    assert rules.check_terminal(board)['winner'] == DEFENDER


def test_capture_available_keeps_attacker_mobile():
    board = empty_board()
    board[0][0] = ATTACKER
    board[0][1] = DEFENDER
    board[1][0] = DEFENDER
    # (0, 2) is empty so the attacker can jump (0, 1)
    assert rules.check_terminal(board) == {'finished': False}


@pytest.mark.parametrize('role, other', [(ATTACKER, DEFENDER), (DEFENDER, ATTACKER)])
def test_other_role(role, other):
    assert rules.other_role(role) == other
