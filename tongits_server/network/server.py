"""TCP server for Tongits sessions."""

import logging
import socket
import threading
import uuid

from tongits_server.game.engine import GameEngine
from tongits_server.game.sessions import SessionRepository

from . import protocol
from .hub import SessionHub
from .protocol import (
    MAX_LINE_BYTES,
    JoinGame,
    PlayerAction,
    ProtocolError,
    ServerMessage,
    decode_client_message,
    encode_message,
)

logger = logging.getLogger(__name__)

# Poll interval for noticing close() while waiting in accept()
ACCEPT_TIMEOUT = 0.5


class _Client:
    """A connected socket with a write lock."""

    def __init__(self, client_id: str, conn: socket.socket):
        self.client_id = client_id
        self.conn = conn
        self.write_lock = threading.Lock()

    def send(self, data: bytes) -> None:
        with self.write_lock:
            self.conn.sendall(data)


class GameServer:
    """TCP server hosting any number of three-seat sessions."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 5000,
        engine: GameEngine | None = None,
        repository: SessionRepository | None = None,
    ):
        """Initialize server.

        Args:
            host: Host address to bind to
            port: Port number (0 picks a free port on start)
            engine: Game engine (uses defaults if not provided)
            repository: Session repository (creates one if not provided)
        """
        self.host = host
        self.port = port
        self.engine = engine or GameEngine()
        self.repository = repository or SessionRepository(
            players_required=self.engine.rules.num_players
        )
        self.hub = SessionHub(self.repository, self.engine, self.send)

        self._socket: socket.socket | None = None
        self._clients: dict[str, _Client] = {}
        self._clients_lock = threading.Lock()
        self._running = False

    def start(self) -> None:
        """Start the server and listen for connections."""
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind((self.host, self.port))
        self._socket.listen()
        self._socket.settimeout(ACCEPT_TIMEOUT)
        self.port = self._socket.getsockname()[1]
        self._running = True
        logger.info(f"Server listening on {self.host}:{self.port}")

    def serve_forever(self) -> None:
        """Accept connections until the server is closed.

        Each connection is served by its own thread.
        """
        listener = self._socket
        if listener is None:
            raise RuntimeError("Server not started")

        while self._running:
            try:
                conn, addr = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._running:
                    raise
                break

            conn.settimeout(None)
            client = _Client(uuid.uuid4().hex, conn)
            with self._clients_lock:
                self._clients[client.client_id] = client
            logger.info(f"Connection from {addr} as {client.client_id}")

            thread = threading.Thread(
                target=self._serve_client,
                args=(client,),
                name=f"client-{client.client_id[:8]}",
                daemon=True,
            )
            thread.start()

    def _serve_client(self, client: _Client) -> None:
        """Read and dispatch lines from one client until it disconnects."""
        reader = client.conn.makefile("rb")
        try:
            while True:
                line = reader.readline(MAX_LINE_BYTES + 1)
                if not line:
                    break
                if len(line) > MAX_LINE_BYTES:
                    self.send(client.client_id, protocol.error("Message too long"))
                    break
                if not line.strip():
                    continue

                try:
                    message = decode_client_message(line)
                except ProtocolError as e:
                    logger.warning(f"Client {client.client_id}: {e}")
                    self.send(client.client_id, protocol.error(str(e)))
                    continue

                self._dispatch(client.client_id, message)
        except OSError as e:
            logger.info(f"Client {client.client_id} connection error: {e}")
        finally:
            reader.close()
            self.hub.disconnect(client.client_id)
            self._drop_client(client.client_id)
            logger.info(f"Client {client.client_id} disconnected")

    def _dispatch(self, client_id: str, message: JoinGame | PlayerAction) -> None:
        if isinstance(message, JoinGame):
            self.hub.join(client_id, message.name)
        else:
            self.hub.handle_action(client_id, message.action)

    def send(self, client_id: str, message: ServerMessage) -> None:
        """Send a message to one client.

        Args:
            client_id: Target client
            message: Message to send
        """
        with self._clients_lock:
            client = self._clients.get(client_id)
        if client is None:
            return

        try:
            client.send(encode_message(message))
        except OSError as e:
            logger.warning(f"Failed to send {message.event} to {client_id}: {e}")

    def _drop_client(self, client_id: str) -> None:
        with self._clients_lock:
            client = self._clients.pop(client_id, None)
        if client is not None:
            try:
                client.conn.close()
            except OSError:
                pass

    def close(self) -> None:
        """Close all connections and the server socket."""
        self._running = False

        with self._clients_lock:
            clients = list(self._clients.values())
        for client in clients:
            try:
                client.conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

        if self._socket:
            self._socket.close()
            self._socket = None

        logger.info("Server closed")

    def __enter__(self) -> "GameServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
