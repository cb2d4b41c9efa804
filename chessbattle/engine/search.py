"""
Minimax Search with Alpha-Beta Pruning

This module picks the computer's move.
Minimax explores the game tree to find the best move, and alpha-beta
pruning cuts the branches that can no longer change the result.

Key Concepts:
    - Minimax: Recursive algorithm that assumes optimal play by both sides
    - Alpha-Beta: Stop looking at the remaining siblings as soon as beta <= alpha
    - Scores are always from the ROOT player's point of view. The maximizing plies are the
      root player's moves, the minimizing plies are the opponent's.

Moves are searched in generation order (row by row across the board), and the first move
reaching the best score is kept. No move ordering, no transposition table.

Algorithm Complexity:
    - Minimax: O(b^d) where b=branching factor (~20-40 in the middle game), d=depth
    - depth 3 is about as far as an interactive game can go
"""

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from chessbattle.chess.board import Board
from chessbattle.chess.rules import MoveSquares, is_in_check, legal_moves
from chessbattle.core.config import Difficulty
from chessbattle.core.shared_types import Color
from chessbattle.engine.evaluation import evaluate

logger = logging.getLogger(__name__)

MATE_SCORE = 10000.0
STALEMATE_SCORE = 0.0

StopFn = Callable[[], bool]


@dataclass
class SearchResult:
    score: float
    move: Optional[MoveSquares] = None


@dataclass
class SearchStats:
    """Mutable counter threaded through the recursion"""

    nodes: int = 0


def terminal_score(board: Board, side_to_move: Color, maximizing: bool) -> float:
    """
    Score of a node where the side to move has no legal move.

    Checkmate is a loss for whoever is to move: the root player when maximizing, the opponent when minimizing.
    """
    if is_in_check(board, side_to_move):
        return -MATE_SCORE if maximizing else MATE_SCORE
    return STALEMATE_SCORE


def minimax(
    board: Board,
    depth: int,
    color: Color,
    maximizing: bool,
    alpha: float = -math.inf,
    beta: float = math.inf,
    use_pruning: bool = True,
    stats: Optional[SearchStats] = None,
) -> SearchResult:
    """
    Minimax search with alpha-beta pruning.

    Args:
        board: Position to search (never modified)
        depth: Remaining plies (decrements each recursive call)
        color: The ROOT player. Leaves are evaluated for this color, whatever the side to move is
        maximizing: True on the root player's plies
        alpha: Best score the maximizer is already assured of
        beta: Best score the minimizer is already assured of
        use_pruning: False searches the full tree (same score, more nodes)
        stats: Optional node counter

    Returns:
        SearchResult with the score of the best line and the first move of it
        (no move at a leaf or a terminal node)
    """
    if stats is not None:
        stats.nodes += 1

    # Base case: Reached leaf node (depth = 0)
    if depth == 0:
        return SearchResult(evaluate(board, color))

    side_to_move = color if maximizing else color.opponent
    moves = legal_moves(board, side_to_move)
    if not moves:
        return SearchResult(terminal_score(board, side_to_move, maximizing))

    best_move: Optional[MoveSquares] = None
    if maximizing:
        best_score = -math.inf
        for move in moves:
            child, _ = board.move_piece(*move)
            result = minimax(child, depth - 1, color, False, alpha, beta, use_pruning, stats)

            if result.score > best_score:
                best_score = result.score
                best_move = move

            alpha = max(alpha, result.score)
            # Beta cutoff: Minimizing player won't allow this branch
            if use_pruning and beta <= alpha:
                break
    else:
        best_score = math.inf
        for move in moves:
            child, _ = board.move_piece(*move)
            result = minimax(child, depth - 1, color, True, alpha, beta, use_pruning, stats)

            if result.score < best_score:
                best_score = result.score
                best_move = move

            beta = min(beta, result.score)
            # Alpha cutoff: Maximizing player won't allow this branch
            if use_pruning and beta <= alpha:
                break

    return SearchResult(best_score, best_move)


def find_best_move(
    board: Board,
    color: Color,
    depth: int,
    use_pruning: bool = True,
    should_stop: Optional[StopFn] = None,
    stats: Optional[SearchStats] = None,
) -> SearchResult:
    """
    Search the root moves one at a time.

    Same result as `minimax(board, depth, color, True)`, but `should_stop` is asked before each root move.
    Once it answers True the best move found so far is returned, so a cancelled search still has a
    well-defined answer (no move at all if it was cancelled before the first root move).
    """
    if depth <= 0:
        return SearchResult(evaluate(board, color))

    moves = legal_moves(board, color)
    if not moves:
        return SearchResult(terminal_score(board, color, maximizing=True))

    stats = stats if stats is not None else SearchStats()
    stats.nodes += 1
    alpha = -math.inf
    best = SearchResult(-math.inf)
    for move in moves:
        if should_stop is not None and should_stop():
            logger.info("Search cancelled after %d nodes", stats.nodes)
            break

        child, _ = board.move_piece(*move)
        result = minimax(child, depth - 1, color, False, alpha, math.inf, use_pruning, stats)
        if result.score > best.score:
            best = SearchResult(result.score, move)
        alpha = max(alpha, result.score)

    return best


def random_move(moves: list[MoveSquares], rng: random.Random) -> MoveSquares:
    return moves[rng.randrange(len(moves))]


def select_move(
    board: Board,
    color: Color,
    difficulty: Difficulty,
    rng: Optional[random.Random] = None,
    should_stop: Optional[StopFn] = None,
) -> Optional[MoveSquares]:
    """
    The computer's choice of move for `color`.

    1. No legal moves? -> None (the caller should have seen checkmate / stalemate already)
    2. With probability `difficulty.randomness`: a uniformly random legal move
    3. Otherwise: minimax with alpha-beta pruning to `difficulty.search_depth` plies
    4. Search came back without a move? -> a random legal move rather than no move at all
    """
    rng = rng if rng is not None else random.Random()
    moves = legal_moves(board, color)
    if not moves:
        logger.info("No legal move available for %s", color)
        return None

    if rng.random() < difficulty.randomness:
        move = random_move(moves, rng)
        logger.info("%s plays a random move (%s)", color, difficulty.name)
        return move

    stats = SearchStats()
    start = time.perf_counter()
    result = find_best_move(
        board, color, difficulty.search_depth, should_stop=should_stop, stats=stats
    )
    elapsed = time.perf_counter() - start
    logger.debug(
        "%s searched depth %d: score %.2f, %d nodes in %.3fs",
        color,
        difficulty.search_depth,
        result.score,
        stats.nodes,
        elapsed,
    )

    if result.move is None:
        logger.info("Search returned no move for %s, falling back to a random move", color)
        return random_move(moves, rng)
    return result.move
