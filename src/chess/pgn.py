"""
PGN (Portable Game Notation)
----

A text format for a whole game: tag pairs with metadata, followed by the moves in SAN.

ex)
[Event "Casual Game"]
[White "Alice"]
[Black "Bob"]
[Result "0-1"]

1. f3 e5 2. g4 Qh4 0-1

NOTE: reading / writing the actual files is up to the caller. Everything here takes and returns strings.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from src.chess.board import Board
from src.chess.game import Game, GameState
from src.chess.pieces import Color, PieceType
from src.chess.san import resolve_san

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r'\[(\w+)\s+"([^"]*)"\]')
RESULT_TOKENS: tuple[str, ...] = ("1-0", "0-1", "1/2-1/2", "*")

# Removed from the movetext before splitting it into tokens (order matters: tags and comments first)
TAG_LINES = re.compile(r"\[.*?\]", re.DOTALL)
BRACE_COMMENTS = re.compile(r"\{.*?\}", re.DOTALL)
LINE_COMMENTS = re.compile(r";.*?(\r?\n|$)")
VARIATIONS = re.compile(r"\(.*?\)", re.DOTALL)
MOVE_NUMBERS = re.compile(r"\d+\.+")
NAG = re.compile(r"^\$\d+$")

# Seven Tag Roster, in the order PGN expects them
SEVEN_TAG_ROSTER: tuple[str, ...] = (
    "Event",
    "Site",
    "Date",
    "Round",
    "White",
    "Black",
    "Result",
)


@dataclass
class PGNRecord:
    """What a PGN text holds: the tags, the SAN moves of the main line, and the result token."""

    tags: dict[str, str] = field(default_factory=dict)
    moves: list[str] = field(default_factory=list)
    result: str = "*"


# --- PARSING ---
def parse_tags(text: str) -> dict[str, str]:
    """[Key "Value"] pairs, in order of appearance. A repeated key overwrites the earlier value."""
    tags: dict[str, str] = {}
    for key, value in TAG_PATTERN.findall(text):
        tags[key] = value
    return tags


def tokenize_moves(text: str) -> list[str]:
    """
    The SAN tokens of the main line
    ----

    1. strip tag lines, {comments}, ;comments until end of line, (variations) and move numbers (1. / 12...)
    2. split on whitespace
    3. stop at the result token (1-0, 0-1, 1/2-1/2, *)

    NOTE: NAGs ($1, $14, ...) are annotations, not moves. They are dropped.
    """
    movetext = TAG_LINES.sub(" ", text)
    movetext = BRACE_COMMENTS.sub(" ", movetext)
    movetext = LINE_COMMENTS.sub(" ", movetext)
    movetext = VARIATIONS.sub(" ", movetext)
    movetext = MOVE_NUMBERS.sub(" ", movetext)

    tokens: list[str] = []
    for token in movetext.split():
        if token in RESULT_TOKENS:
            break
        if NAG.match(token):
            continue
        tokens.append(token)
    return tokens


def parse_result(text: str) -> str:
    """The result token ending the movetext, falling back on the Result tag, or * if neither is there."""
    movetext = TAG_LINES.sub(" ", text)
    movetext = BRACE_COMMENTS.sub(" ", movetext)
    movetext = LINE_COMMENTS.sub(" ", movetext)
    for token in movetext.split():
        if token in RESULT_TOKENS:
            return token
    result_tag = parse_tags(text).get("Result", "*")
    return result_tag if result_tag in RESULT_TOKENS else "*"


def parse_pgn(text: str) -> PGNRecord:
    return PGNRecord(
        tags=parse_tags(text), moves=tokenize_moves(text), result=parse_result(text)
    )


# --- REPLAYING ---
def load_to_board(
    board: Board, pgn_text: str, default_promotion: PieceType = PieceType.QUEEN
) -> bool:
    """
    Reset the board to the starting position and play the PGN moves on it, white first.
    ----

    Returns False as soon as a token cannot be resolved.

    NOTE: this is not all-or-nothing. On failure the board is left at the position reached just before the bad token.
    Use `load_game()` to get the game only if every move replays.
    """
    board.reset()
    color = Color.WHITE
    for ply, token in enumerate(tokenize_moves(pgn_text)):
        move = resolve_san(board, token, color)
        if move is None:
            logger.warning(
                "Failed to resolve SAN at ply %d: %r (%s to move)",
                ply,
                token,
                color.display_name,
            )
            return False
        board.apply_move(move, default_promotion)
        color = color.opponent
    return True


def load_game(
    pgn_text: str, default_promotion: PieceType = PieceType.QUEEN
) -> Optional[Game]:
    """
    Replay the PGN on a fresh Game, checking every move for legality.

    Returns None if any move fails: a half-replayed game never leaks out to the caller.
    The game keeps the tags of the PGN text. The state (check, mate, ...) follows from the moves played,
    unless the moves leave the game open while the PGN gives a result: then the game ended off the board,
    1-0 / 0-1 by resignation of the losing side and 1/2-1/2 by agreement.
    """
    record = parse_pgn(pgn_text)
    game = Game.new_game(tags=record.tags, default_promotion=default_promotion)
    for ply, token in enumerate(record.moves):
        if not game.make_san_move(token):
            logger.warning(
                "PGN replay stopped at ply %d: %r is not legal for %s",
                ply,
                token,
                game.current_player.display_name,
            )
            return None
    if not game.is_over:
        _restore_result(game, record.result)
    logger.info("Loaded PGN game with %d moves", len(record.moves))
    return game


def _restore_result(game: Game, result: str) -> None:
    if result == "1-0":
        game.resign(Color.BLACK)
    elif result == "0-1":
        game.resign(Color.WHITE)
    elif result == "1/2-1/2":
        game.decline_draw()
        game.state = GameState.DRAW


# --- EXPORTING ---
def generate(
    tags: Optional[dict[str, str]],
    san_moves: Optional[list[str]],
    result: Optional[str] = None,
) -> str:
    """
    Write a PGN document.
    ---

    * one [Key "Value"] line per tag, then a blank line
    * moves in pairs: "1. e4 e5 2. Nf3 Nc6 ..."
    * the result token at the end (if given)
    """
    parts: list[str] = []
    if tags:
        for key, value in tags.items():
            parts.append(f'[{key} "{value}"]\n')
        parts.append("\n")

    if san_moves:
        for move_number, ply in enumerate(range(0, len(san_moves), 2), start=1):
            parts.append(f"{move_number}. {san_moves[ply]}")
            if ply + 1 < len(san_moves):
                parts.append(f" {san_moves[ply + 1]}")
            parts.append(" ")

    pgn_text = "".join(parts).strip()
    if result:
        pgn_text = f"{pgn_text} {result}".strip()
    return pgn_text + "\n"


def default_tags(
    white: str = "White",
    black: str = "Black",
    event: str = "Casual Game",
    site: str = "Local",
    round_: str = "1",
    played_on: Optional[date] = None,
    result: str = "*",
) -> dict[str, str]:
    """Seven Tag Roster, with the date written as YYYY.MM.DD"""
    played_on = played_on or date.today()
    values = [
        event,
        site,
        played_on.strftime("%Y.%m.%d"),
        round_,
        white,
        black,
        result,
    ]
    return dict(zip(SEVEN_TAG_ROSTER, values))


def export_game(game: Game) -> str:
    """PGN text for the game: its own tags (Result tag kept in sync with the game) and its SAN history."""
    result = game.result_token()
    tags = dict(game.tags) if game.tags else default_tags(result=result)
    tags["Result"] = result
    return generate(tags, game.move_history, result)
