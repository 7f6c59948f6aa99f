"""WebSocket connection management with paced snapshot delivery."""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from api.routes.game import load_game, rejection_from_event
from api.schemas import BetRequest, GameStateResponse, RejectionResponse
from config import PacingConfig, config
from core.game import BlackjackGame, EventType, GameEvent, GamePhase, RoundResult, RoundState

logger = logging.getLogger(__name__)

router = APIRouter()


def pacing_delay(
    previous: GamePhase | None,
    state: RoundState,
    pacing: PacingConfig,
) -> float:
    """
    Seconds to wait before showing a snapshot.

    Gives the view time to animate the deal, the blackjack reveal and the
    dealer's turn. The game itself has already moved on.
    """
    if previous == GamePhase.DEALING and state.phase == GamePhase.PLAYING:
        return pacing.deal_delay
    if previous == GamePhase.DEALER_TURN and state.phase == GamePhase.GAME_OVER:
        return pacing.dealer_delay
    if previous == GamePhase.PLAYING and state.phase == GamePhase.GAME_OVER:
        naturals = (RoundResult.BLACKJACK, RoundResult.PUSH)
        if any(s.result in naturals and len(s.hand) == 2 for s in state.seats):
            return pacing.blackjack_delay
    return 0.0


def _state_message(state: RoundState) -> dict[str, Any]:
    return {
        "type": "state_update",
        "state": GameStateResponse.from_state(state).model_dump(mode="json"),
    }


def _rejection_message(rejection: RejectionResponse) -> dict[str, Any]:
    return {"type": "rejection", **rejection.model_dump()}


class ConnectionManager:
    """
    Track open WebSocket connections per session.

    A session may be watched by several sockets at once. Each socket owns its
    own event queue and delivery task, so nothing here is shared between them.
    """

    def __init__(self, pacing: PacingConfig | None = None) -> None:
        self.pacing = pacing or config.pacing
        self._connections: dict[str, set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections.setdefault(session_id, set()).add(websocket)

    def disconnect(self, websocket: WebSocket, session_id: str) -> None:
        """Remove one connection. The game stays in the session store."""
        sockets = self._connections.get(session_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[session_id]

    def connections_for(self, session_id: str) -> int:
        """Number of sockets watching a session."""
        return len(self._connections.get(session_id, ()))

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return sum(len(sockets) for sockets in self._connections.values())


# Global connection manager
manager = ConnectionManager()


async def _deliver_events(websocket: WebSocket, queue: asyncio.Queue, game: BlackjackGame) -> None:
    """Forward queued events to one client, pausing between phases."""
    previous = game.phase
    while True:
        event: GameEvent = await queue.get()
        if event.event_type == EventType.STATE_CHANGED:
            state: RoundState = event.data["state"]
            delay = pacing_delay(previous, state, manager.pacing)
            if delay > 0:
                await asyncio.sleep(delay)
            previous = state.phase
            await websocket.send_json(_state_message(state))
        elif event.event_type.is_rejection:
            await websocket.send_json(_rejection_message(rejection_from_event(event)))


def _dispatch(game: BlackjackGame, message: dict[str, Any]) -> bool | None:
    """
    Run the intent named by a client message; None if it names none.

    Raises:
        ValidationError: If a bet message is malformed
    """
    msg_type = message.get("type")
    if msg_type == "bet":
        bet = BetRequest.model_validate(message)
        return game.place_bet(bet.amount, seat=bet.seat)
    if msg_type == "hit":
        return game.hit()
    if msg_type == "stand":
        return game.stand()
    if msg_type == "new_game":
        return game.new_game()
    return None


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "bet", "amount": 100, "seat": 0}
    - {"type": "hit"} / {"type": "stand"} / {"type": "new_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "rejection", "reason": "...", "message": "..."}
    - {"type": "error", "message": "..."}
    """
    try:
        game = await load_game(session_id)
    except HTTPException:
        await websocket.close(code=4404)
        return

    await manager.connect(websocket, session_id)

    queue: asyncio.Queue = asyncio.Queue()

    def handler(event: GameEvent) -> None:
        if event.event_type == EventType.STATE_CHANGED or event.event_type.is_rejection:
            queue.put_nowait(event)

    game.subscribe(handler)
    await websocket.send_json(_state_message(game.snapshot()))
    delivery = asyncio.create_task(_deliver_events(websocket, queue, game))

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            if message.get("type") == "get_state":
                await websocket.send_json(_state_message(game.snapshot()))
                continue

            try:
                accepted = _dispatch(game, message)
            except ValidationError as exc:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Invalid bet: {exc.errors()[0]['msg']}",
                })
                continue

            if accepted is None:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {message.get('type')}",
                })

    except WebSocketDisconnect:
        logger.debug("WebSocket closed")
    finally:
        game.events.unsubscribe(handler)
        delivery.cancel()
        try:
            await delivery
        except asyncio.CancelledError:
            pass
        manager.disconnect(websocket, session_id)
