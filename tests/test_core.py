import random

import numpy as np
import pytest

from falling_block_rl.game import Action, FallingBlockGame, GameConfig, Piece, TetrominoType, shape


def _game(kind: TetrominoType = TetrominoType.T, seed: int = 0) -> FallingBlockGame:
    game = FallingBlockGame(GameConfig(random_seed=seed))
    game.current_piece = Piece.spawn(kind, game.grid.width)
    return game


def _vertical_i(x: int, y: int) -> Piece:
    # One clockwise turn puts the bar in local column 2
    base = Piece(TetrominoType.I, shape(TetrominoType.I), x, y)
    return base.with_cells(base.rotated_cw())


def test_initial_state():
    game = FallingBlockGame(GameConfig(random_seed=1))
    assert (game.score, game.lines, game.level) == (0, 0, 1)
    assert not game.game_over
    assert (game.current_piece.x, game.current_piece.y) == (3, -1)
    assert not game.grid.grid.any()


def test_same_seed_gives_same_piece_sequence():
    a = FallingBlockGame(GameConfig(random_seed=42))
    b = FallingBlockGame(rng=random.Random(42))
    seq_a, seq_b = [], []
    for _ in range(10):
        seq_a.append(a.current_piece.kind)
        seq_b.append(b.current_piece.kind)
        a.hard_drop()
        b.hard_drop()
    assert seq_a == seq_b


def test_try_move_stops_at_wall():
    game = _game(TetrominoType.T)
    moves = 0
    while game.try_move(-1, 0):
        moves += 1
    assert moves == 3
    before = game.current_piece
    assert not game.try_move(-1, 0)
    assert game.current_piece == before


def test_o_rotation_always_succeeds_without_change():
    game = _game(TetrominoType.O)
    before = game.current_piece
    assert game.try_rotate()
    assert game.current_piece == before


def test_t_rotation_in_place():
    game = _game(TetrominoType.T)
    assert game.try_rotate()
    piece = game.current_piece
    assert set(piece.cells) == {(1, 0), (1, 1), (1, 2), (2, 1)}
    assert (piece.x, piece.y) == (3, -1)


def test_rotation_kicks_off_left_wall():
    game = _game()
    game.current_piece = Piece(TetrominoType.T, ((1, 0), (1, 1), (1, 2), (2, 1)), -1, 5)
    assert game.try_rotate()
    assert (game.current_piece.x, game.current_piece.y) == (0, 5)
    assert set(game.current_piece.cells) == {(2, 1), (1, 1), (0, 1), (1, 2)}


def test_i_rotation_kicks_two_columns():
    game = _game()
    # Vertical bar in local column 1 against the right wall
    game.current_piece = Piece(TetrominoType.I, ((1, 0), (1, 1), (1, 2), (1, 3)), 8, 5)
    assert game.try_rotate()
    piece = game.current_piece
    assert (piece.x, piece.y) == (6, 5)
    assert set(piece.absolute_cells()) == {(6, 6), (7, 6), (8, 6), (9, 6)}


def test_blocked_rotation_leaves_state_unchanged():
    game = _game()
    piece = Piece(TetrominoType.T, ((1, 0), (1, 1), (1, 2), (2, 1)), 3, 10)
    game.current_piece = piece
    game.grid.grid[:, :] = 1
    for x, y in piece.absolute_cells():
        game.grid.grid[y, x] = 0
    assert not game.try_rotate()
    assert game.current_piece == piece


def test_hard_drop_locks_at_bottom_and_spawns():
    game = _game(TetrominoType.I)
    next_kind = game.next_kind
    game.hard_drop()
    assert list(game.grid.grid[19, 3:7]) == [int(TetrominoType.I)] * 4
    assert np.count_nonzero(game.grid.grid) == 4
    assert game.current_piece.kind == next_kind
    assert (game.current_piece.x, game.current_piece.y) == (3, -1)
    assert game.score == 0


def test_single_line_clear_scores_at_current_level():
    game = _game(TetrominoType.I)
    game.grid.grid[19, :] = 1
    game.grid.grid[19, 3:7] = 0
    game.hard_drop()
    assert game.lines == 1
    assert game.score == 100
    assert not game.grid.grid.any()


def test_four_lines_at_level_three():
    game = _game()
    game.lines, game.level, game.score = 20, 3, 50
    game.grid.grid[16:20, 1:] = 2
    game.current_piece = _vertical_i(-2, 16)
    game.lock_and_advance()
    assert game.score == 50 + 2400
    assert game.lines == 24
    assert game.level == 3
    assert not game.grid.grid.any()


def test_level_follows_lines_after_each_lock():
    game = _game(TetrominoType.I)
    game.lines = 9
    game.grid.grid[19, :] = 1
    game.grid.grid[19, 3:7] = 0
    game.hard_drop()
    assert game.lines == 10
    assert game.level == 2
    assert game.score == 100
    assert game.drop_interval_ms() == 920


def test_blocked_spawn_ends_game_and_freezes_state():
    game = _game()
    game.grid.grid[0:2, 4] = 1
    game.current_piece = Piece(TetrominoType.O, shape(TetrominoType.O), 0, 18)
    game.lock_and_advance()
    assert game.game_over

    grid = game.grid.clone_state()
    piece = game.current_piece
    score = game.score
    assert not game.try_move(1, 0)
    assert not game.try_move(0, 1)
    assert not game.try_rotate()
    assert not game.soft_drop()
    game.hard_drop()
    game.lock_and_advance()
    assert not game.tick(10_000)
    _, reward, done, _ = game.step(Action.HARD_DROP)
    assert (reward, done) == (0, True)
    assert np.array_equal(game.grid.grid, grid)
    assert game.current_piece == piece
    assert game.score == score


def test_reset_starts_a_fresh_game():
    game = _game()
    game.grid.grid[0:2, 4] = 1
    game.current_piece = Piece(TetrominoType.O, shape(TetrominoType.O), 0, 18)
    game.score, game.lines, game.level = 900, 12, 2
    game.lock_and_advance()
    assert game.game_over
    game.reset()
    assert not game.game_over
    assert (game.score, game.lines, game.level) == (0, 0, 1)
    assert not game.grid.grid.any()
    assert game.grid.fits(game.current_piece.absolute_cells())


def test_ghost_projection_does_not_mutate():
    game = _game(TetrominoType.T)
    before = game.current_piece
    ghost = game.ghost_cells()
    assert set(ghost) == {(3, 19), (4, 19), (5, 19), (4, 18)}
    assert game.current_piece == before


def test_ghost_rests_on_stack():
    game = _game(TetrominoType.O)
    game.grid.grid[10, 4] = 1
    assert set(game.ghost_cells()) == {(4, 8), (5, 8), (4, 9), (5, 9)}


def test_tick_applies_gravity_when_due():
    game = _game(TetrominoType.T)
    assert not game.tick(999)
    assert game.current_piece.y == -1
    assert game.tick(1)
    assert game.current_piece.y == 0
    assert not game.tick(500)
    assert game.current_piece.y == 0


def test_soft_drop_locks_when_blocked():
    game = _game(TetrominoType.O)
    game.current_piece = Piece(TetrominoType.O, shape(TetrominoType.O), 0, 18)
    assert not game.soft_drop()
    assert game.grid.grid[19, 1] == int(TetrominoType.O)
    assert game.current_piece.y == -1


def test_step_rewards_score_gained():
    game = _game(TetrominoType.I)
    game.grid.grid[19, :] = 1
    game.grid.grid[19, 3:7] = 0
    state, reward, done, info = game.step(Action.HARD_DROP)
    assert reward == 100
    assert not done
    assert info["lines"] == 1
    assert state.shape == (20, 10)


def test_step_rejects_unknown_action():
    game = _game()
    with pytest.raises(ValueError):
        game.step(42)


def test_get_state_overlays_falling_piece():
    game = _game(TetrominoType.T)
    state = game.get_state()
    assert state[0, 3] == -int(TetrominoType.T)
    assert not game.grid.grid.any()


def test_snapshot_is_a_copy():
    game = _game(TetrominoType.S)
    snap = game.snapshot()
    snap.grid[19, 0] = 5
    assert game.grid.grid[19, 0] == 0
    assert snap.piece_kind == TetrominoType.S
    assert snap.next_kind == game.next_kind
    assert snap.next_cells == shape(game.next_kind)
    assert snap.drop_interval_ms == 1000
    assert set(snap.ghost_cells) == set(game.ghost_cells())


def test_flat_t_on_floor_kicks_up_one_row():
    game = _game()
    game.current_piece = Piece(TetrominoType.T, shape(TetrominoType.T), 3, 18)
    assert game.try_rotate()
    piece = game.current_piece
    assert (piece.x, piece.y) == (3, 17)
    assert set(piece.absolute_cells()) == {(4, 17), (4, 18), (4, 19), (5, 18)}


def test_flat_i_on_floor_kicks_up_two_rows():
    game = _game()
    game.current_piece = Piece(TetrominoType.I, shape(TetrominoType.I), 3, 18)
    assert game.try_rotate()
    piece = game.current_piece
    assert (piece.x, piece.y) == (3, 16)
    assert set(piece.absolute_cells()) == {(5, 16), (5, 17), (5, 18), (5, 19)}


def test_left_kick_wins_when_both_sides_fit():
    game = _game()
    game.current_piece = Piece(TetrominoType.T, shape(TetrominoType.T), 3, 5)
    # Blocks the in-place rotation only; shifting either way would fit
    game.grid.grid[7, 4] = 1
    assert game.grid.fits(game.current_piece.moved(1, 0).with_cells(game.current_piece.rotated_cw()).absolute_cells())
    assert game.try_rotate()
    assert (game.current_piece.x, game.current_piece.y) == (2, 5)


def test_soft_drop_resets_gravity_clock():
    game = _game(TetrominoType.T)
    assert not game.tick(900)
    assert game.soft_drop()
    assert game.current_piece.y == 0
    assert not game.tick(200)
    assert game.current_piece.y == 0


def test_hard_drop_resets_gravity_clock():
    game = _game(TetrominoType.T)
    assert not game.tick(900)
    game.hard_drop()
    assert not game.tick(200)
    assert game.current_piece.y == -1


def test_step_rejects_unknown_action_after_game_over():
    game = _game()
    game.grid.grid[0:2, 4] = 1
    game.current_piece = Piece(TetrominoType.O, shape(TetrominoType.O), 0, 18)
    game.lock_and_advance()
    assert game.game_over
    with pytest.raises(ValueError):
        game.step(42)
