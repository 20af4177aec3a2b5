"""Tests for the TCP server."""

import json
import random
import socket
import threading

import pytest

from tongits_server.game.engine import GameEngine
from tongits_server.network.server import GameServer


class LineClient:
    """Minimal newline-delimited JSON client."""

    def __init__(self, port: int):
        self.sock = socket.create_connection(("127.0.0.1", port), timeout=5)
        self.reader = self.sock.makefile("rb")

    def send(self, message: dict) -> None:
        self.sock.sendall((json.dumps(message) + "\n").encode("utf-8"))

    def send_raw(self, data: bytes) -> None:
        self.sock.sendall(data)

    def receive(self) -> dict:
        line = self.reader.readline()
        assert line, "connection closed"
        return json.loads(line)

    def receive_until(self, event: str) -> dict:
        while True:
            message = self.receive()
            if message["event"] == event:
                return message

    def close(self) -> None:
        self.reader.close()
        self.sock.close()


@pytest.fixture
def server():
    game_server = GameServer(host="127.0.0.1", port=0, engine=GameEngine(rng=random.Random(0)))
    game_server.start()
    thread = threading.Thread(target=game_server.serve_forever, daemon=True)
    thread.start()
    yield game_server
    game_server.close()
    thread.join(timeout=5)


class TestGameServer:
    """Tests for GameServer class."""

    def test_serve_before_start(self):
        """Test that serving requires start()."""
        with pytest.raises(RuntimeError):
            GameServer(port=0).serve_forever()

    def test_join(self, server):
        """Test joining over a socket."""
        client = LineClient(server.port)
        try:
            client.send({"event": "join-game", "name": "Alice"})

            joined = client.receive()
            assert joined["event"] == "joined"
            assert joined["data"]["playerNumber"] == 1
            assert client.receive()["event"] == "player-joined"
            state = client.receive()
            assert state["event"] == "game-state"
            assert state["data"]["turn_phase"] == "lobby"
        finally:
            client.close()

    def test_malformed_line_keeps_connection(self, server):
        """Test that a bad line is answered and the connection stays open."""
        client = LineClient(server.port)
        try:
            client.send_raw(b"not json\n")
            assert client.receive()["event"] == "error"

            client.send({"event": "join-game", "name": "Alice"})
            assert client.receive()["event"] == "joined"
        finally:
            client.close()

    def test_full_table_plays(self, server):
        """Test that three clients start a game and can act."""
        clients = [LineClient(server.port) for _ in range(3)]
        try:
            for index, client in enumerate(clients):
                client.send({"event": "join-game", "name": f"P{index}"})
                client.receive_until("joined")

            started = clients[0].receive_until("game-started")
            assert started["data"]["turn_phase"] == "opening"
            clients[0].receive_until("game-state")

            clients[1].send(
                {"event": "player-action", "action": {"type": "discard", "cardIndex": 0}}
            )
            rejected = clients[1].receive_until("action-rejected")
            assert rejected["data"]["reason"] == "Not your turn"

            clients[0].send(
                {"event": "player-action", "action": {"type": "discard", "cardIndex": 0}}
            )
            state = clients[2].receive_until("game-state")
            while state["data"]["current_player_index"] != 1:
                state = clients[2].receive_until("game-state")
            assert state["data"]["turn_phase"] == "needs_draw"
        finally:
            for client in clients:
                client.close()

    def test_disconnect_reaches_others(self, server):
        """Test that a dropped connection is announced."""
        first = LineClient(server.port)
        second = LineClient(server.port)
        try:
            first.send({"event": "join-game", "name": "A"})
            first.receive_until("game-state")
            second.send({"event": "join-game", "name": "B"})
            second.receive_until("game-state")

            second.close()
            message = first.receive_until("player-disconnected")
            assert message["data"]["playerName"] == "B"
            assert message["data"]["playersCount"] == 1
        finally:
            first.close()
