"""Text-mode renditions of the timed minigames."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict

from bardo.domain.minigame import MinigameConfig


@dataclass(slots=True)
class MinigameIO:
    """Console hooks a minigame uses; swapped out in tests."""

    read: Callable[[str], str] = input
    write: Callable[[str], None] = print
    clock: Callable[[], float] = field(default=time.monotonic)


MinigameRunner = Callable[[MinigameConfig, MinigameIO], bool]


def run_qte(config: MinigameConfig, io: MinigameIO) -> bool:
    """Type the prompted key before the timeout expires."""
    key = config.text("key", "SPACE").upper()
    timeout = config.number("timeout", 2.0)
    label = "Enter" if key in ("SPACE", " ") else f"{key} then Enter"
    io.write(f"QUICK! Press {label} within {timeout:g}s.")
    started = io.clock()
    answer = io.read("> ")
    elapsed = io.clock() - started
    if elapsed > timeout:
        io.write(f"Too slow ({elapsed:.1f}s).")
        return False
    pressed = answer.strip().upper()
    if key in ("SPACE", " "):
        return pressed in ("", "SPACE")
    return pressed == key


def run_keymash(config: MinigameConfig, io: MinigameIO) -> bool:
    """Type the key ``count`` times (over any number of lines) within the time limit."""
    key = config.text("key", "V").upper()
    target = int(config.number("count", 30))
    time_limit = config.number("timeLimit", 15)
    io.write(f"Mash {key}! Type it {target} times within {time_limit:g}s (Enter to submit each burst).")
    started = io.clock()
    presses = 0
    while presses < target:
        burst = io.read(f"[{presses}/{target}] > ")
        if io.clock() - started > time_limit:
            io.write("Time is up.")
            return False
        presses += burst.upper().count(key)
    return True


def run_lockpick(config: MinigameConfig, io: MinigameIO) -> bool:
    """Stop a sweeping pin inside the centred sweet spot."""
    zone_size = config.number("zoneSize", 0.15)
    speed = config.number("speed", 1.5)
    io.write(f"A pin sweeps back and forth. Press Enter when it crosses the middle ({zone_size:.0%} wide).")
    io.read("Ready? ")
    started = io.clock()
    io.read("Now! ")
    elapsed = io.clock() - started
    position = sweep_position(elapsed, speed)
    io.write(f"The pin stopped at {position:.0%}.")
    return abs(position - 0.5) <= zone_size / 2


def sweep_position(elapsed: float, speed: float) -> float:
    """Triangle wave in [0, 1]: ``speed`` full sweeps per second."""
    phase = (elapsed * speed) % 2.0
    return phase if phase <= 1.0 else 2.0 - phase


_ENDURANCE_DEFAULTS = {"apnea": (3, 35.0)}


def run_endurance(config: MinigameConfig, io: MinigameIO) -> bool:
    """Confirm each wave before its window closes (used for arkanoid/apnea)."""
    default_waves, default_duration = _ENDURANCE_DEFAULTS.get(config.type, (1, 10.0))
    waves = max(1, int(config.number("waves", default_waves)))
    duration = config.number("duration", default_duration)
    window = duration / waves
    io.write(f"{config.type.upper()}: hold on for {waves} wave(s), {window:g}s each. Press Enter to endure.")
    for wave in range(1, waves + 1):
        started = io.clock()
        io.read(f"Wave {wave}/{waves} > ")
        if io.clock() - started > window:
            io.write("You falter.")
            return False
    return True


MINIGAMES: Dict[str, MinigameRunner] = {
    "qte": run_qte,
    "keymash": run_keymash,
    "lockpick": run_lockpick,
    "arkanoid": run_endurance,
    "apnea": run_endurance,
}


def run_minigame(config: MinigameConfig, io: MinigameIO | None = None) -> bool | None:
    """Play a configured game. Returns None when the type has no console rendition."""
    runner = MINIGAMES.get(config.type)
    if runner is None:
        return None
    return runner(config, io or MinigameIO())
