"""Wire protocol.

Messages are JSON objects, one per line, UTF-8 encoded. Clients send
``join-game`` and ``player-action``; the server answers with events that
carry the full session snapshot (no incremental diffs).
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from tongits_server.models.actions import Action
from tongits_server.models.game_state import GameSession
from tongits_server.models.player import Player

ENCODING = "utf-8"
MAX_LINE_BYTES = 64 * 1024

# Server event names
JOINED = "joined"  # Sent to the joining client only
PLAYER_JOINED = "player-joined"
GAME_STARTED = "game-started"
GAME_STATE = "game-state"
PLAYER_DISCONNECTED = "player-disconnected"
ACTION_REJECTED = "action-rejected"  # Sent to the acting client only
ERROR = "error"


class ProtocolError(Exception):
    """Raised when a client line cannot be decoded."""


class JoinGame(BaseModel):
    """Ask to be seated in an open session."""

    event: Literal["join-game"] = "join-game"
    name: str = Field(min_length=1, max_length=32)


class PlayerAction(BaseModel):
    """Submit one action for the sender's seat."""

    event: Literal["player-action"] = "player-action"
    action: Action


ClientMessage = Annotated[Union[JoinGame, PlayerAction], Field(discriminator="event")]

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


class ServerMessage(BaseModel):
    """Event pushed to a client."""

    event: str
    data: dict[str, Any] = Field(default_factory=dict)


def decode_client_message(line: bytes | str) -> JoinGame | PlayerAction:
    """Decode one line received from a client.

    Args:
        line: Raw line, with or without the trailing newline

    Returns:
        Decoded message

    Raises:
        ProtocolError: If the line is not valid JSON or not a known message
    """
    if isinstance(line, bytes):
        try:
            line = line.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Invalid encoding: {e}") from e

    line = line.strip()
    if not line:
        raise ProtocolError("Empty message")

    try:
        return _client_message_adapter.validate_json(line)
    except ValidationError as e:
        raise ProtocolError(f"Invalid message: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


def encode_message(message: BaseModel) -> bytes:
    """Encode a message as one line."""
    return (message.model_dump_json(by_alias=True) + "\n").encode(ENCODING)


def joined(session: GameSession, player: Player) -> ServerMessage:
    """Seat assignment for the joining client."""
    return ServerMessage(
        event=JOINED,
        data={
            "sessionId": session.id,
            "playerId": player.id,
            "playerNumber": player.seat_number,
        },
    )


def player_joined(player: Player, players_count: int) -> ServerMessage:
    return ServerMessage(
        event=PLAYER_JOINED,
        data={
            "playerName": player.name,
            "playerNumber": player.seat_number,
            "playersCount": players_count,
        },
    )


def player_disconnected(player: Player, players_count: int) -> ServerMessage:
    return ServerMessage(
        event=PLAYER_DISCONNECTED,
        data={
            "playerName": player.name,
            "playerNumber": player.seat_number,
            "playersCount": players_count,
        },
    )


def game_started(session: GameSession) -> ServerMessage:
    return ServerMessage(event=GAME_STARTED, data=session.snapshot())


def game_state(session: GameSession) -> ServerMessage:
    return ServerMessage(event=GAME_STATE, data=session.snapshot())


def action_rejected(action_type: str, reason: str) -> ServerMessage:
    return ServerMessage(event=ACTION_REJECTED, data={"type": action_type, "reason": reason})


def error(message: str) -> ServerMessage:
    return ServerMessage(event=ERROR, data={"message": message})
