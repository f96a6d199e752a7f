from config import Settings
from models import PlacementEvent, Side


class ScriptedRecipes:
    """Hands out a fixed sequence of recipes; the last one repeats."""

    def __init__(self, *recipes):
        self.recipes = list(recipes)
        self.calls = 0

    def generate(self, previous=None):
        recipe = self.recipes[min(self.calls, len(self.recipes) - 1)]
        self.calls += 1
        return recipe


def make_settings(**overrides) -> Settings:
    values = dict(
        left_track_count=5,
        right_track_count=5,
        tokens=["A", "B", "C"],
        require_gesture_stage=True,
        required_duration=1.0,
        min_speed_threshold=40.0,
        speed_affects_progress=False,
        max_multiplier=3.0,
        result_display_duration=0.5,
        next_round_delay=0.5,
        session_time_limit=60.0,
        session_end_display_duration=2.0,
    )
    values.update(overrides)
    return Settings(**values)


def hold_all(machine):
    machine.on_tick(0.0, held_samples={token: True for token in machine.tokens})


def release(machine, *tokens):
    """Hold every token, then let go of `tokens` one tick at a time."""
    held = {token: True for token in machine.tokens}
    machine.on_tick(0.0, held_samples=held)
    for token in tokens:
        held[token] = False
        machine.on_tick(0.0, held_samples=held)


def place(machine, side, track):
    return machine.on_tick(0.0, placement_events=[PlacementEvent(side=Side(side), track=track)])


def gesture(machine, ticks, step=10.0, dt=0.25):
    """Move the cursor `step` units along x every tick."""
    x = machine._cursor[0]
    for _ in range(ticks):
        x += step
        machine.on_tick(dt, cursor_position=(x, 0.0))


def advance(machine, seconds, dt=0.25):
    for _ in range(int(round(seconds / dt))):
        machine.on_tick(dt)


def event_types(machine):
    return [event.event_type for event in machine.events]
