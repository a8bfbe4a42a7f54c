"""
Japan rack point redistribution.

Within a rack every player pays every other player what that player earned:

    received(P) = e(P) * (n - 1)
    given(P)    = sum of e(Q) for every other player Q
    delta(P)    = received(P) - given(P)

so the deltas of one rack always sum to zero and the sum of all players'
running totals never changes. Earned points e(P) are the player's ball clicks
minus deductions in the current rack, times the rack multiplier.

The current rack is everything in the shot history after the most recent
rack_complete shot.
"""

from models.events import BallClickShot, DeductionShot, Shot, ShotType
from models.game_state import Game
from models.japan import JapanPlayerRackResult, JapanRackResult


def current_rack_shots(game: Game) -> tuple[Shot, ...]:
    """Shots logged since the last rack completion."""
    history = game.shot_history
    for i in range(len(history) - 1, -1, -1):
        if history[i].shot_type == ShotType.RACK_COMPLETE:
            return history[i + 1:]
    return history


def has_current_rack_clicks(game: Game) -> bool:
    return any(s.shot_type == ShotType.BALL_CLICK for s in current_rack_shots(game))


def _base_points(shots: tuple[Shot, ...], player_id: str) -> int:
    points = 0
    for shot in shots:
        if shot.player_id != player_id:
            continue
        if isinstance(shot, BallClickShot):
            points += shot.points
        elif isinstance(shot, DeductionShot):
            points -= shot.value
    return points


def current_rack_points(game: Game, player_id: str) -> int:
    """Points player_id earned in the current rack, multiplier applied."""
    return _base_points(current_rack_shots(game), player_id) * (game.japan_current_multiplier or 1)


def previous_rack_total_points(game: Game, player_id: str) -> int:
    """Running total for player_id after the last settled rack (0 before any)."""
    if not game.japan_rack_history:
        return 0
    result = game.japan_rack_history[-1].for_player(player_id)
    return result.total_points if result else 0


def calculate_current_rack_results(game: Game) -> JapanRackResult:
    """
    Settle the current rack.

    Args:
        game: A Japan game.

    Returns:
        Earned, delta and running total points for every player, tagged with
        the current rack number.
    """
    shots = current_rack_shots(game)
    multiplier = game.japan_current_multiplier or 1
    earned = {p.id: _base_points(shots, p.id) * multiplier for p in game.players}
    everyone = sum(earned.values())
    others = len(game.players) - 1

    results = []
    for player in game.players:
        e = earned[player.id]
        delta = e * others - (everyone - e)
        results.append(JapanPlayerRackResult(
            player_id=player.id,
            earned_points=e,
            delta_points=delta,
            total_points=previous_rack_total_points(game, player.id) + delta,
        ))

    return JapanRackResult(rack_number=game.current_rack, player_results=tuple(results))
