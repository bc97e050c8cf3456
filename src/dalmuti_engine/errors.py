# src/dalmuti_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
WRONG_STATUS = "WRONG_STATUS"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
INVALID_MOVE = "INVALID_MOVE"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"

# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
