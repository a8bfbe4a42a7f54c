"""
Ten-pin frame scoring used by the Bowlard engine.

Frames 1-9 end on a strike or after two rolls. Frame 10 takes a third roll
after a strike or a spare. A frame's score is cumulative and stays None until
the frame has at least one roll; strike and spare bonuses count whatever later
rolls exist so far.
"""

from dataclasses import replace

from constants import BOWLING_FRAMES, BOWLING_PINS
from models.player import BowlingFrame


def initialize_frames() -> tuple[BowlingFrame, ...]:
    """Ten empty frames."""
    return tuple(BowlingFrame(frame_number=i + 1) for i in range(BOWLING_FRAMES))


def current_frame_index(frames: tuple[BowlingFrame, ...]) -> int:
    """Index of the first incomplete frame, or -1 when the game is finished."""
    for i, frame in enumerate(frames):
        if not frame.is_complete:
            return i
    return -1


def pins_standing(frame: BowlingFrame, is_last: bool) -> int:
    """How many pins the next roll in this frame can knock down."""
    rolls = frame.rolls
    if not rolls:
        return BOWLING_PINS
    if not is_last:
        return BOWLING_PINS - rolls[0]

    # Frame 10 re-racks after a strike or a spare
    if len(rolls) == 1:
        return BOWLING_PINS if rolls[0] == BOWLING_PINS else BOWLING_PINS - rolls[0]
    first, second = rolls[0], rolls[1]
    if first == BOWLING_PINS and second < BOWLING_PINS:
        return BOWLING_PINS - second
    return BOWLING_PINS


def update_frame_status(frame: BowlingFrame, is_last: bool) -> BowlingFrame:
    """Derive strike, spare and completion flags from a frame's rolls."""
    rolls = frame.rolls
    is_strike = bool(rolls) and rolls[0] == BOWLING_PINS
    is_spare = (
        len(rolls) >= 2
        and not is_strike
        and rolls[0] + rolls[1] == BOWLING_PINS
    )
    if not is_last:
        is_complete = is_strike or len(rolls) == 2
    elif len(rolls) == 3:
        is_complete = True
    elif len(rolls) == 2:
        is_complete = not (is_strike or is_spare)
    else:
        is_complete = False
    return replace(frame, is_strike=is_strike, is_spare=is_spare, is_complete=is_complete)


def calculate_scores(frames: tuple[BowlingFrame, ...]) -> tuple[BowlingFrame, ...]:
    """
    Recompute cumulative frame scores.

    Args:
        frames: Frames with rolls and status flags set.

    Returns:
        The same frames with score filled in for every frame that has rolls.
    """
    result = []
    running = 0
    last = len(frames) - 1
    for i, frame in enumerate(frames):
        if not frame.rolls:
            result.append(replace(frame, score=None))
            continue

        frame_score = sum(frame.rolls)
        if i < last and (frame.is_strike or frame.is_spare):
            later = [pins for f in frames[i + 1:] for pins in f.rolls]
            bonus_rolls = 2 if frame.is_strike else 1
            frame_score += sum(later[:bonus_rolls])

        running += frame_score
        result.append(replace(frame, score=running))
    return tuple(result)


def total_score(frames: tuple[BowlingFrame, ...]) -> int:
    """The last cumulative frame score (0 before the first roll)."""
    scores = [f.score for f in frames if f.score is not None]
    return scores[-1] if scores else 0


def add_roll(frames: tuple[BowlingFrame, ...], pins: int) -> tuple[BowlingFrame, ...]:
    """
    Record a roll in the current frame.

    pins is clamped to the pins standing. Returns frames unchanged when all
    ten frames are complete.
    """
    index = current_frame_index(frames)
    if index < 0:
        return frames

    is_last = index == len(frames) - 1
    frame = frames[index]
    pins = max(0, min(pins, pins_standing(frame, is_last)))
    frame = update_frame_status(replace(frame, rolls=frame.rolls + (pins,)), is_last)

    updated = frames[:index] + (frame,) + frames[index + 1:]
    return calculate_scores(updated)
