"""
Engine Errors

Typed failures raised by team assignment, schedule generation and the
tournament state aggregate. Every error is recoverable: the organizer adjusts
input and retries. Routes translate these to HTTP responses.
"""


class LineupError(Exception):
    """Base class for all engine failures"""

    code = "LINEUP_ERROR"
    user_message = "処理に失敗しました"

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)

    def to_detail(self) -> str:
        return f"{self.code}: {self}"


class InvalidTeamCount(LineupError):
    """Raised when fewer than one team is requested"""

    code = "INVALID_TEAM_COUNT"
    user_message = "チーム数は1以上を指定してください"


class InsufficientParticipants(LineupError):
    """Raised when the roster cannot fill the requested teams"""

    code = "INSUFFICIENT_PARTICIPANTS"
    user_message = "2人以上の参加者が必要です"


class InsufficientCompetitors(LineupError):
    """Raised when a schedule is requested for fewer than two competitors"""

    code = "INSUFFICIENT_COMPETITORS"
    user_message = "チームが2つ以上必要です"


class AlreadyGeneratingConflict(LineupError):
    """Raised when another mutation is in flight or the caller's batch view is stale"""

    code = "ALREADY_GENERATING"
    user_message = "他の操作が実行中です。最新の状態を読み込んでから再度お試しください"


class InvalidMatchState(LineupError):
    """Raised when a result is recorded on a match that cannot take one"""

    code = "INVALID_MATCH_STATE"
    user_message = "この試合には結果を登録できません"


class MatchNotFound(InvalidMatchState):
    code = "MATCH_NOT_FOUND"
    user_message = "試合が見つかりません"


class AmbiguousResult(LineupError):
    """Raised when an elimination match is reported as a tie"""

    code = "AMBIGUOUS_RESULT"
    user_message = "トーナメント戦では引き分けは登録できません"
