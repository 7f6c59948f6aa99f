"""Game API endpoints."""

import logging
import time
from typing import Annotated, Callable

from fastapi import APIRouter, HTTPException, Header

from api.schemas import (
    BetRequest,
    BetSlipRequest,
    GameStateResponse,
    NewSessionResponse,
    RejectionResponse,
)
from api.session import create_session, extract_session_id, get_session, update_session
from config import config
from core.chips import BetSlip
from core.game import BlackjackGame, EventType, GameEvent, GamePhase

logger = logging.getLogger(__name__)

router = APIRouter()

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


def create_game() -> BlackjackGame:
    """Build a game from the configured table settings."""
    return BlackjackGame(
        rules=config.game.to_rules(),
        seats=config.game.seats,
    )


async def new_session() -> str:
    """Open a session holding a fresh game."""
    now = int(time.time())
    session_id = await create_session({
        SESSION_KEY_GAME: create_game(),
        SESSION_KEY_CREATED_AT: now,
        SESSION_KEY_LAST_ACTIVITY: now,
    })
    logger.info("Opened game session")
    return session_id


async def load_game(session_id: str) -> BlackjackGame:
    """
    Fetch the game for a session token.

    Raises:
        HTTPException: 404 if the token is forged, expired or unknown
    """
    if extract_session_id(session_id) is None:
        raise HTTPException(status_code=404, detail="Unknown session")

    session_data = await get_session(session_id)
    if session_data is None or SESSION_KEY_GAME not in session_data:
        raise HTTPException(status_code=404, detail="Unknown session")

    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    await update_session(session_id, session_data)
    return session_data[SESSION_KEY_GAME]


def rejection_from_event(event: GameEvent | None) -> RejectionResponse:
    """Describe a rejection event for the client."""
    if event is not None and event.event_type == EventType.INSUFFICIENT_FUNDS:
        return RejectionResponse(reason="insufficient_funds", message=event.message)
    message = event.message if event is not None else "Action not allowed"
    return RejectionResponse(reason="invalid_action", message=message)


def rejection_for(game: BlackjackGame) -> RejectionResponse:
    """Describe the engine's most recent rejection."""
    return rejection_from_event(game.last_rejection)


def _apply(game: BlackjackGame, intent: Callable[[], bool]) -> GameStateResponse:
    """Run an intent and return the new state, or raise on rejection."""
    if not intent():
        rejection = rejection_for(game)
        status_code = 400 if rejection.reason == "insufficient_funds" else 409
        raise HTTPException(status_code=status_code, detail=rejection.model_dump())
    return GameStateResponse.from_state(game.snapshot())


@router.post("/new")
async def new_game_session() -> NewSessionResponse:
    """Create a new game session."""
    session_id = await new_session()
    return NewSessionResponse(
        session_id=session_id,
        chip_values=list(config.game.chip_values),
    )


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game = await load_game(session_id)
    return GameStateResponse.from_state(game.snapshot())


@router.post("/bet")
async def place_bet(
    request: BetRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Place a bet; cards are dealt once every seat has bet."""
    game = await load_game(session_id)
    return _apply(game, lambda: game.place_bet(request.amount, seat=request.seat))


@router.post("/bet-slip")
async def place_bet_slip(
    request: BetSlipRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """
    Add up chips against the seat's bankroll and place the total as a bet.

    Chips are taken in order, the way a player stacks them. A chip the table
    does not offer, or one that would take the slip past the bankroll, stays
    off the slip and the rest are still counted. The response's ``bet`` is
    the amount actually wagered.
    """
    game = await load_game(session_id)
    if request.seat >= len(game.seats):
        raise HTTPException(status_code=409, detail=f"No seat {request.seat} at this table")

    slip = BetSlip(game.seats[request.seat].bankroll, config.game.chip_values)
    if request.all_in:
        slip.all_in()
    else:
        refused = [chip for chip in request.chips if not slip.add_chip(chip)]
        if refused:
            logger.debug("Chips left off the slip: %s", refused)

    if slip.amount == 0:
        raise HTTPException(status_code=422, detail="No chips on the bet slip")
    return _apply(game, lambda: game.place_bet(slip.amount, seat=request.seat))


@router.post("/hit")
async def hit(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Take another card."""
    game = await load_game(session_id)
    return _apply(game, game.hit)


@router.post("/stand")
async def stand(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Keep the current hand; the dealer plays out."""
    game = await load_game(session_id)
    return _apply(game, game.stand)


@router.post("/new-game")
async def new_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Start the next round after a finished one."""
    game = await load_game(session_id)
    if game.phase == GamePhase.GAME_OVER and not game.can_start_new_game:
        raise HTTPException(
            status_code=409,
            detail=RejectionResponse(
                reason="invalid_action",
                message="Game Over - No Money Left",
            ).model_dump(),
        )
    return _apply(game, game.new_game)
