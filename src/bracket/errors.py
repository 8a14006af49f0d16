"""
Errors raised by the bracket engine and its storage layer.
"""


class BracketError(Exception):
    """Base class for every bracket failure."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InsufficientParticipants(BracketError):
    def __init__(self, count):
        super().__init__(f"Need at least 2 participants to generate a bracket, got {count}")
        self.count = count


class MatchNotFound(BracketError):
    def __init__(self, round_number, match_number):
        super().__init__(f"No match R{round_number}-M{match_number} in bracket")
        self.round = round_number
        self.match_number = match_number


class InvalidWinner(BracketError):
    def __init__(self, round_number, match_number, winner_id, message=None):
        super().__init__(message or f"{winner_id} is not a player in match R{round_number}-M{match_number}")
        self.round = round_number
        self.match_number = match_number
        self.winner_id = winner_id


class MatchNotReady(InvalidWinner):
    """Result reported before both contestants are known."""

    def __init__(self, round_number, match_number, winner_id):
        super().__init__(round_number, match_number, winner_id,
                         f"Match R{round_number}-M{match_number} is still waiting for an opponent")


class MatchAlreadyComplete(BracketError):
    def __init__(self, round_number, match_number):
        super().__init__(f"Match R{round_number}-M{match_number} already has a different result")
        self.round = round_number
        self.match_number = match_number


class InvalidScore(BracketError):
    def __init__(self, score):
        super().__init__(f"Scores must be non-negative integers, got {score!r}")
        self.score = score


class BracketExistsError(BracketError):
    def __init__(self, tournament_id):
        super().__init__(f"Tournament {tournament_id} already has a bracket")
        self.tournament_id = tournament_id
