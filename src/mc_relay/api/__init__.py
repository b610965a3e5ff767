"""HTTP surface used by the game server."""
