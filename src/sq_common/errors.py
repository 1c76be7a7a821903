"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity
  3xxx: Board / lifecycle
  4xxx: Cell / claim
  5xxx: Scoring
  6xxx: Payout
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class MissingClaimantError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Claimant user id and display name are required", 422)


# --- 3xxx: Board ---

class BoardNotFoundError(AppError):
    def __init__(self, board_id: str) -> None:
        super().__init__(3001, f"Board not found: {board_id}", 404)


class BoardNotOpenError(AppError):
    def __init__(self, board_id: str, status: str) -> None:
        super().__init__(3002, f"Board {board_id} is not open (status={status})", 409)


class InvalidTransitionError(AppError):
    def __init__(self, board_id: str, current: str, target: str) -> None:
        super().__init__(
            3003, f"Board {board_id} cannot move from {current} to {target}", 409
        )


class InvalidShapeConfigurationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid board headers: {detail}", 500)


class BoardNotInPlayError(AppError):
    def __init__(self, board_id: str, status: str) -> None:
        super().__init__(
            3005, f"Board {board_id} cannot resolve winners in status {status}", 409
        )


class PeriodAlreadyResolvedError(AppError):
    def __init__(self, board_id: str, period: int) -> None:
        super().__init__(
            3006,
            f"Period {period} of board {board_id} was already resolved with different scores",
            409,
        )


class InvalidBoardConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3007, f"Invalid board configuration: {detail}", 422)


class NotBoardCreatorError(AppError):
    def __init__(self, board_id: str) -> None:
        super().__init__(3008, f"Only the creator of board {board_id} may manage it", 403)


# --- 4xxx: Cell ---

class AlreadyClaimedError(AppError):
    def __init__(self, board_id: str, row: int, col: int) -> None:
        super().__init__(4001, f"Cell ({row}, {col}) on board {board_id} is already claimed", 409)


class CellNotFoundError(AppError):
    def __init__(self, row: int, col: int) -> None:
        super().__init__(4002, f"Cell ({row}, {col}) is outside the board", 404)


class CellLimitExceededError(AppError):
    def __init__(self, limit: int) -> None:
        super().__init__(4003, f"Cell limit exceeded: at most {limit} cells per claimant", 422)


# --- 5xxx: Scoring ---

class InvalidScoreError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Invalid score: {detail}", 422)


class InvalidPeriodError(AppError):
    def __init__(self, period: object) -> None:
        super().__init__(5002, f"Unknown scoring period: {period}", 422)


# --- 6xxx: Payout ---

class InvalidPayoutScheduleError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6001, f"Invalid payout schedule: {detail}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
