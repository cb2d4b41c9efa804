"""Unit tests for chessbattle/engine/search.py"""

import math
import random
from unittest.mock import Mock, patch

import pytest

from chessbattle.chess.board import Board
from chessbattle.chess.rules import legal_moves
from chessbattle.chess.square import Square
from chessbattle.core.config import Difficulty
from chessbattle.core.shared_types import Color
from chessbattle.engine.evaluation import evaluate
from chessbattle.engine.search import (
    MATE_SCORE,
    SearchResult,
    SearchStats,
    find_best_move,
    minimax,
    select_move,
)

# black king h8 behind its pawns, white rook a1: Ra8 is mate
BACK_RANK_MATE_FEN = "7k/6pp/8/8/8/8/8/R5K1"
# black queen on a5 hangs to the rook on a1
HANGING_QUEEN_FEN = "7k/8/8/q7/8/8/8/R6K"
# small position for comparing pruned / full searches
SMALL_FEN = "6k1/7p/2n5/8/8/8/1P6/R5K1"


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


# --- MINIMAX ---
def test_leaf_is_static_evaluation_for_root_color() -> None:
    """Depth 0: evaluate for the root color, whether maximizing or not"""
    board = Board.from_fen(HANGING_QUEEN_FEN)
    assert minimax(board, 0, Color.WHITE, True).score == evaluate(board, Color.WHITE)
    assert minimax(board, 0, Color.WHITE, False).score == evaluate(board, Color.WHITE)
    assert minimax(board, 0, Color.WHITE, True).move is None


def test_checkmated_root_player_scores_mate_against(black_checkmated_board: Board) -> None:
    result = minimax(black_checkmated_board, 2, Color.BLACK, True)
    assert result.score == -MATE_SCORE
    assert result.move is None


def test_checkmated_opponent_scores_mate_for(black_checkmated_board: Board) -> None:
    """Root is white, black (the minimizer) is to move and is mated"""
    result = minimax(black_checkmated_board, 2, Color.WHITE, False)
    assert result.score == MATE_SCORE


def test_stalemate_scores_zero(black_stalemated_board: Board) -> None:
    assert minimax(black_stalemated_board, 3, Color.BLACK, True).score == 0.0
    assert minimax(black_stalemated_board, 3, Color.WHITE, False).score == 0.0


def test_finds_mate_in_one() -> None:
    board = Board.from_fen(BACK_RANK_MATE_FEN)
    result = minimax(board, 2, Color.WHITE, True)
    assert result.move == (sq("a1"), sq("a8"))
    assert result.score == MATE_SCORE


def test_captures_hanging_queen() -> None:
    board = Board.from_fen(HANGING_QUEEN_FEN)
    result = find_best_move(board, Color.WHITE, 1)
    assert result.move == (sq("a1"), sq("a5"))


def test_black_captures_hanging_rook() -> None:
    """Same idea with colors swapped: black's queen takes the undefended rook"""
    board = Board.from_fen("7k/8/8/q7/8/8/8/R6K")
    result = find_best_move(board, Color.BLACK, 1)
    assert result.move == (sq("a5"), sq("a1"))


def test_search_does_not_mutate() -> None:
    board = Board.from_fen(SMALL_FEN)
    snapshot = board.to_fen()
    find_best_move(board, Color.WHITE, 2)
    assert board.to_fen() == snapshot


@pytest.mark.parametrize("depth", [1, 2, 3])
@pytest.mark.parametrize("color", [Color.WHITE, Color.BLACK])
def test_pruning_does_not_change_the_score(depth: int, color: Color) -> None:
    """Alpha-beta only skips branches that cannot matter: same score as the full tree, fewer (or equal) nodes"""
    board = Board.from_fen(SMALL_FEN)
    pruned_stats = SearchStats()
    full_stats = SearchStats()
    pruned = minimax(board, depth, color, True, stats=pruned_stats)
    full = minimax(board, depth, color, True, use_pruning=False, stats=full_stats)

    assert pruned.score == pytest.approx(full.score)
    assert evaluate_line(board, color, pruned, depth) == pytest.approx(
        evaluate_line(board, color, full, depth)
    )
    assert pruned_stats.nodes <= full_stats.nodes


def evaluate_line(board: Board, color: Color, result: SearchResult, depth: int) -> float:
    """Score of the root move chosen, re-searched with the full tree"""
    assert result.move is not None
    child, _ = board.move_piece(*result.move)
    return minimax(child, depth - 1, color, False, use_pruning=False).score


def test_pruning_cuts_nodes_at_depth_three() -> None:
    board = Board.from_fen(SMALL_FEN)
    pruned_stats = SearchStats()
    full_stats = SearchStats()
    minimax(board, 3, Color.WHITE, True, stats=pruned_stats)
    minimax(board, 3, Color.WHITE, True, use_pruning=False, stats=full_stats)
    assert pruned_stats.nodes < full_stats.nodes


def test_ties_go_to_first_move_in_generation_order(kings_only_board: Board) -> None:
    """With kings only, every king move evaluates the same at depth 1: the first generated one is kept"""
    first_move = legal_moves(kings_only_board, Color.WHITE)[0]
    assert find_best_move(kings_only_board, Color.WHITE, 1).move == first_move


# --- FIND BEST MOVE ---
@pytest.mark.parametrize("depth", [1, 2])
def test_root_loop_matches_minimax(depth: int) -> None:
    board = Board.from_fen(SMALL_FEN)
    assert find_best_move(board, Color.WHITE, depth) == minimax(board, depth, Color.WHITE, True)


def test_find_best_move_without_moves(black_checkmated_board: Board) -> None:
    result = find_best_move(black_checkmated_board, Color.BLACK, 2)
    assert result == SearchResult(-MATE_SCORE, None)


def test_find_best_move_depth_zero() -> None:
    board = Board.from_fen(SMALL_FEN)
    assert find_best_move(board, Color.WHITE, 0).move is None


def test_cancelled_before_first_move() -> None:
    board = Board.from_fen(SMALL_FEN)
    result = find_best_move(board, Color.WHITE, 2, should_stop=lambda: True)
    assert result.move is None
    assert result.score == -math.inf


def test_cancelled_after_some_moves_keeps_best_so_far() -> None:
    """Stop is only asked between root moves: the answer is the best of the root moves searched"""
    board = Board.from_fen(HANGING_QUEEN_FEN)
    moves = legal_moves(board, Color.WHITE)
    searched = moves.index((sq("a1"), sq("a5"))) + 1
    calls = iter(range(len(moves) + 1))

    result = find_best_move(board, Color.WHITE, 1, should_stop=lambda: next(calls) >= searched)
    assert result.move == (sq("a1"), sq("a5"))


# --- SELECT MOVE ---
def test_no_move_available(black_checkmated_board: Board, no_randomness: Difficulty) -> None:
    assert select_move(black_checkmated_board, Color.BLACK, no_randomness) is None


def test_deterministic_without_randomness() -> None:
    """randomness 0: two searches of the same board return the same move"""
    board = Board.from_fen(SMALL_FEN)
    difficulty = Difficulty(name="Medium, no randomness", search_depth=2, randomness=0.0)
    first = select_move(board, Color.WHITE, difficulty, rng=random.Random(1))
    second = select_move(board, Color.WHITE, difficulty, rng=random.Random(2))
    assert first == second
    assert first == find_best_move(board, Color.WHITE, 2).move


def test_random_branch_skips_the_search() -> None:
    """rng.random() below the randomness: a random legal move, no search at all"""
    board = Board.from_fen(HANGING_QUEEN_FEN)
    rng = Mock(spec=random.Random)
    rng.random.return_value = 0.0
    rng.randrange.return_value = 0
    difficulty = Difficulty(name="Easy", search_depth=1, randomness=0.3)

    with patch("chessbattle.engine.search.find_best_move") as mock_search:
        move = select_move(board, Color.WHITE, difficulty, rng=rng)

    mock_search.assert_not_called()
    assert move == legal_moves(board, Color.WHITE)[0]


def test_always_random(starting_board: Board) -> None:
    difficulty = Difficulty(name="Chaos", search_depth=1, randomness=1.0)
    with patch("chessbattle.engine.search.find_best_move") as mock_search:
        move = select_move(starting_board, Color.WHITE, difficulty, rng=random.Random(0))
    mock_search.assert_not_called()
    assert move in legal_moves(starting_board, Color.WHITE)


def test_search_without_result_falls_back_to_random(no_randomness: Difficulty) -> None:
    board = Board.from_fen(HANGING_QUEEN_FEN)
    with patch(
        "chessbattle.engine.search.find_best_move",
        return_value=SearchResult(0.0, None),
    ):
        move = select_move(board, Color.WHITE, no_randomness, rng=random.Random(0))
    assert move in legal_moves(board, Color.WHITE)


def test_cancelled_search_still_returns_a_move(no_randomness: Difficulty) -> None:
    board = Board.from_fen(SMALL_FEN)
    move = select_move(
        board, Color.WHITE, no_randomness, rng=random.Random(0), should_stop=lambda: True
    )
    assert move in legal_moves(board, Color.WHITE)


def test_select_move_uses_search_depth(no_randomness: Difficulty) -> None:
    board = Board.from_fen(HANGING_QUEEN_FEN)
    with patch(
        "chessbattle.engine.search.find_best_move",
        return_value=SearchResult(5.0, (sq("a1"), sq("a5"))),
    ) as mock_search:
        move = select_move(board, Color.WHITE, no_randomness)
    assert move == (sq("a1"), sq("a5"))
    assert mock_search.call_args.args[:3] == (board, Color.WHITE, no_randomness.search_depth)
