from typing import List, Optional

from siege.models import ATTACKER, DEFENDER, Capture, MoveRecord

BOARD_SIZE = 5

Board = List[List[Optional[str]]]


def initial_board() -> Board:
    """Return the starting layout.

    Three attacker pieces on row 0 (columns 1-3) and fifteen defender
    pieces filling rows 2-4.
    """
    board: Board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for col in (1, 2, 3):
        board[0][col] = ATTACKER
    for row in range(2, BOARD_SIZE):
        for col in range(BOARD_SIZE):
            board[row][col] = DEFENDER
    return board


def copy_board(board: Board) -> Board:
    return [list(row) for row in board]


def other_role(role: str) -> str:
    return DEFENDER if role == ATTACKER else ATTACKER


def count_pieces(board: Board, piece: str) -> int:
    return sum(1 for row in board for cell in row if cell == piece)


def _on_board(*coords: int) -> bool:
    return all(isinstance(c, int) and 0 <= c < BOARD_SIZE for c in coords)


def is_legal_move(board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> bool:
    """Whether the piece at (from_row, from_col) may move to (to_row, to_col).

    Moves are strictly orthogonal. Defenders step one cell into an empty
    cell. Attackers either step one cell into an empty cell or jump exactly
    two cells over an adjacent defender into the empty cell beyond it.
    """
    if not _on_board(from_row, from_col, to_row, to_col):
        return False

    piece = board[from_row][from_col]
    if piece is None:
        return False

    d_row = to_row - from_row
    d_col = to_col - from_col
    # Exactly one axis may change
    if (d_row == 0) == (d_col == 0):
        return False

    distance = abs(d_row) + abs(d_col)
    if board[to_row][to_col] is not None:
        return False

    if distance == 1:
        return piece in (ATTACKER, DEFENDER)

    if piece == ATTACKER and distance == 2:
        mid_row = from_row + d_row // 2
        mid_col = from_col + d_col // 2
        return board[mid_row][mid_col] == DEFENDER

    return False


def apply_move(board: Board, from_row: int, from_col: int, to_row: int, to_col: int) -> MoveRecord:
    """Move a piece in place and return the record of what happened.

    Callers must check legality first. A two-cell attacker jump removes
    the jumped defender and records it as captured.
    """
    piece = board[from_row][from_col]
    record = MoveRecord(from_row, from_col, to_row, to_col, piece)

    if piece == ATTACKER and abs(to_row - from_row) + abs(to_col - from_col) == 2:
        mid_row = (from_row + to_row) // 2
        mid_col = (from_col + to_col) // 2
        record.captured = Capture(mid_row, mid_col, board[mid_row][mid_col])
        board[mid_row][mid_col] = None

    board[to_row][to_col] = piece
    board[from_row][from_col] = None
    return record


def revert_move(board: Board, record: MoveRecord) -> None:
    """Undo ``record`` on ``board``: the inverse of :func:`apply_move`."""
    board[record.from_row][record.from_col] = record.piece
    board[record.to_row][record.to_col] = None
    if record.captured:
        board[record.captured.row][record.captured.col] = record.captured.piece


def _pieces(board: Board, piece: str):
    return [
        (row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if board[row][col] == piece
    ]


def _can_move(board: Board, piece: str) -> bool:
    # Exhaustive scan: every piece of this kind against all 25 destinations
    for row, col in _pieces(board, piece):
        for to_row in range(BOARD_SIZE):
            for to_col in range(BOARD_SIZE):
                if is_legal_move(board, row, col, to_row, to_col):
                    return True
    return False


def check_terminal(board: Board) -> dict:
    """Decide whether the position is over.

    Attackers win once every defender is captured. Defenders win when no
    attacker piece has a legal move left; this is checked before the
    both-sides-immobile draw, so a blockaded attacker is always a defender
    win.
    """
    if count_pieces(board, DEFENDER) == 0:
        return {
            'finished': True,
            'winner': ATTACKER,
            'message': 'Attackers win! Every defender has been captured.',
        }

    attacker_can_move = _can_move(board, ATTACKER)
    defender_can_move = _can_move(board, DEFENDER)

    if not attacker_can_move:
        return {
            'finished': True,
            'winner': DEFENDER,
            'message': 'Defenders win! The attackers are completely surrounded.',
        }

    # Never reached: an immobile attacker has already returned above.
    if not attacker_can_move and not defender_can_move:
        return {
            'finished': True,
            'winner': 'draw',
            'message': 'Draw! Neither side can move.',
        }

    return {'finished': False}
