"""RockSample POMDP on a rectangular grid.

The rover knows its own position but not which rocks are valuable. It can
sample the rock under it, check any rock with a distance-dependent sensor,
or leave the map through the east edge.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np
from scipy import sparse

from suggestion_eval.belief import normalize_belief
from suggestion_eval.core.errors import InvalidConfigurationError
from suggestion_eval.plugins import ComponentManifest
from suggestion_eval.problems.tabular import TabularPOMDP

SAMPLE = 0
NORTH = 1
EAST = 2
SOUTH = 3
WEST = 4
N_BASIC_ACTIONS = 5

OBS_GOOD = 0
OBS_BAD = 1
OBS_NONE = 2

_MOVES = {NORTH: (0, 1), EAST: (1, 0), SOUTH: (0, -1), WEST: (-1, 0)}


class RockSampleProblem(TabularPOMDP):
    """RockSample with deterministic moves and noisy rock checks.

    Parameters
    ----------
    map_size : tuple[int, int], optional
        Grid width and height.
    rock_positions : Sequence[tuple[int, int]], optional
        Zero-based rock coordinates.
    init_pos : tuple[int, int], optional
        Starting rover position.
    sensor_efficiency : float, optional
        Half-efficiency distance of the rock sensor.
    good_rock_reward, bad_rock_penalty, exit_reward : float, optional
        Rewards for sampling a good rock, sampling a bad rock and leaving.
    step_penalty, sensor_use_penalty : float, optional
        Per-step reward and extra reward for check actions.
    discount : float, optional
        Discount factor.

    Notes
    -----
    Rock ``i`` is good in state ``s`` when bit ``i`` of the rock mask is set.
    The last state index is the absorbing exit state.
    """

    supports_advisor_belief = True

    def __init__(
        self,
        *,
        map_size: tuple[int, int] = (5, 5),
        rock_positions: Sequence[tuple[int, int]] = ((0, 0), (2, 2), (3, 3)),
        init_pos: tuple[int, int] = (0, 0),
        sensor_efficiency: float = 20.0,
        good_rock_reward: float = 10.0,
        bad_rock_penalty: float = -10.0,
        exit_reward: float = 10.0,
        step_penalty: float = 0.0,
        sensor_use_penalty: float = 0.0,
        discount: float = 0.95,
    ) -> None:
        width, height = (int(value) for value in map_size)
        if width <= 0 or height <= 0:
            raise InvalidConfigurationError("map_size must be positive")
        rocks = tuple((int(x), int(y)) for x, y in rock_positions)
        if len(rocks) == 0:
            raise InvalidConfigurationError("rock_positions must include at least one rock")
        if len(set(rocks)) != len(rocks):
            raise InvalidConfigurationError("rock_positions must be distinct")
        for position in (*rocks, tuple(init_pos)):
            if not (0 <= position[0] < width and 0 <= position[1] < height):
                raise InvalidConfigurationError(f"position {position} lies outside the map")
        if sensor_efficiency <= 0.0:
            raise InvalidConfigurationError("sensor_efficiency must be > 0")

        self.map_size = (width, height)
        self.rock_positions = rocks
        self.num_rocks = len(rocks)
        self.init_pos = (int(init_pos[0]), int(init_pos[1]))
        self.sensor_efficiency = float(sensor_efficiency)
        self._num_masks = 2**self.num_rocks
        self.terminal_state = width * height * self._num_masks

        num_states = self.terminal_state + 1
        num_actions = N_BASIC_ACTIONS + self.num_rocks
        next_states = np.empty((num_actions, num_states), dtype=int)
        observations = np.zeros((num_actions, num_states, 3), dtype=float)
        rewards = np.zeros((num_states, num_actions), dtype=float)

        for state in range(num_states):
            if state == self.terminal_state:
                next_states[:, state] = state
                observations[:, state, OBS_NONE] = 1.0
                continue

            x, y, mask = self.decode(state)
            for action in range(num_actions):
                next_states[action, state], rewards[state, action] = self._step(
                    x,
                    y,
                    mask,
                    action,
                    good_rock_reward=good_rock_reward,
                    bad_rock_penalty=bad_rock_penalty,
                    exit_reward=exit_reward,
                    step_penalty=step_penalty,
                    sensor_use_penalty=sensor_use_penalty,
                )
                if action < N_BASIC_ACTIONS:
                    observations[action, state, OBS_NONE] = 1.0
                else:
                    rock = action - N_BASIC_ACTIONS
                    efficiency = self.check_efficiency((x, y), rock)
                    good = bool(mask >> rock & 1)
                    observations[action, state, OBS_GOOD] = efficiency if good else 1.0 - efficiency
                    observations[action, state, OBS_BAD] = 1.0 - efficiency if good else efficiency

        rows = np.arange(num_states)
        transitions = [
            sparse.csr_matrix(
                (np.ones(num_states), (rows, next_states[action])),
                shape=(num_states, num_states),
            )
            for action in range(num_actions)
        ]
        self._next_states = next_states
        self._next_states.setflags(write=False)

        initial = np.zeros(num_states, dtype=float)
        for mask in range(self._num_masks):
            initial[self.encode(*self.init_pos, mask)] = 1.0

        super().__init__(
            transitions=transitions,
            observations=observations,
            rewards=rewards,
            discount=discount,
            initial_distribution=initial,
            terminal_states=(self.terminal_state,),
            action_names=(
                "sample",
                "north",
                "east",
                "south",
                "west",
                *(f"check-{rock}" for rock in range(self.num_rocks)),
            ),
            observation_names=("good", "bad", "none"),
        )

    def encode(self, x: int, y: int, mask: int) -> int:
        """Return the state index of position ``(x, y)`` and rock mask."""

        return (x * self.map_size[1] + y) * self._num_masks + mask

    def decode(self, state: int) -> tuple[int, int, int]:
        """Return ``(x, y, mask)`` for a non-terminal state index."""

        if state == self.terminal_state:
            raise ValueError("terminal state has no position")
        cell, mask = divmod(state, self._num_masks)
        x, y = divmod(cell, self.map_size[1])
        return x, y, mask

    def check_efficiency(self, position: tuple[int, int], rock: int) -> float:
        """Return the probability that checking ``rock`` reports its true quality."""

        rx, ry = self.rock_positions[rock]
        distance = math.hypot(position[0] - rx, position[1] - ry)
        return 0.5 * (1.0 + math.exp(-distance * math.log(2.0) / self.sensor_efficiency))

    def generate(
        self,
        state: int,
        action: int,
        rng: np.random.Generator,
    ) -> tuple[int, int, float]:
        """Sample one step; moves are deterministic, checks are noisy."""

        next_state = int(self._next_states[action, state])
        likelihoods = self._observations[action, next_state]
        observation = int(rng.choice(self.num_observations, p=likelihoods))
        return next_state, observation, float(self._rewards[state, action])

    def state_from_rocks(self, rocks: Sequence[int]) -> int:
        """Return the state at the start position with the given rock qualities.

        Raises
        ------
        InvalidConfigurationError
            If ``rocks`` does not have one entry per rock or holds anything
            but 0 and 1.
        """

        values = tuple(rocks)
        if len(values) != self.num_rocks:
            raise InvalidConfigurationError(
                f"init_rocks must have length {self.num_rocks}, got {len(values)}"
            )
        if any(value not in (0, 1) for value in values):
            raise InvalidConfigurationError(f"init_rocks entries must be 0 or 1, got {list(values)}")
        mask = sum(1 << index for index, good in enumerate(values) if good)
        return self.encode(*self.init_pos, mask)

    def resolve_initial_state(self, override: Any) -> int:
        """Accept either a rock-quality vector or a raw state index."""

        if isinstance(override, (list, tuple, np.ndarray)):
            return self.state_from_rocks(override)
        state = super().resolve_initial_state(override)
        if state == self.terminal_state:
            raise InvalidConfigurationError("initial state cannot be the terminal exit state")
        return state

    def rock_prior_belief(self, position: tuple[int, int], good_probabilities: Sequence[float]) -> np.ndarray:
        """Return the product belief over rock masks at a known position.

        Parameters
        ----------
        position : tuple[int, int]
            Known rover position.
        good_probabilities : Sequence[float]
            Probability that each rock is good.
        """

        probs = np.asarray(good_probabilities, dtype=float)
        if probs.shape != (self.num_rocks,) or np.any(probs < 0.0) or np.any(probs > 1.0):
            raise InvalidConfigurationError(
                f"rock probabilities must be {self.num_rocks} values in [0, 1]"
            )
        weights = np.zeros(self.num_states, dtype=float)
        for mask in range(self._num_masks):
            good = np.array([mask >> rock & 1 for rock in range(self.num_rocks)], dtype=bool)
            weights[self.encode(*position, mask)] = float(np.prod(np.where(good, probs, 1.0 - probs)))
        return normalize_belief(weights)

    def advisor_belief(self, true_state: int, prior: Sequence[float] | None = None) -> np.ndarray:
        """Return the suggester belief built from a rock-knowledge prior.

        Parameters
        ----------
        true_state : int
            True initial state.
        prior : Sequence[float] | None, optional
            Either one "good" probability per rock, or a pair
            ``[p_if_good, p_if_bad]`` applied to each rock according to its
            true quality. ``None`` means ``[1.0, 0.0]`` (perfect knowledge).

        Raises
        ------
        InvalidConfigurationError
            If ``prior`` has any other length.
        """

        x, y, mask = self.decode(true_state)
        values = [1.0, 0.0] if prior is None else [float(value) for value in prior]
        if len(values) == self.num_rocks:
            probabilities = values
        elif len(values) == 2:
            probabilities = [values[0] if mask >> rock & 1 else values[1] for rock in range(self.num_rocks)]
        else:
            raise InvalidConfigurationError(
                f"suggester prior must have length 2 or {self.num_rocks}, got {len(values)}"
            )
        return self.rock_prior_belief((x, y), probabilities)

    def state_label(self, state: int) -> str:
        """Return ``pos=(x, y) rocks=[...]`` or ``terminal``."""

        if state == self.terminal_state:
            return "terminal"
        x, y, mask = self.decode(state)
        rocks = [mask >> rock & 1 for rock in range(self.num_rocks)]
        return f"pos=({x}, {y}) rocks={rocks}"

    def _step(
        self,
        x: int,
        y: int,
        mask: int,
        action: int,
        *,
        good_rock_reward: float,
        bad_rock_penalty: float,
        exit_reward: float,
        step_penalty: float,
        sensor_use_penalty: float,
    ) -> tuple[int, float]:
        """Return deterministic next state and reward for one action."""

        reward = step_penalty
        if action == SAMPLE:
            if (x, y) in self.rock_positions:
                rock = self.rock_positions.index((x, y))
                reward += good_rock_reward if mask >> rock & 1 else bad_rock_penalty
                mask &= ~(1 << rock)
            return self.encode(x, y, mask), reward

        if action in _MOVES:
            dx, dy = _MOVES[action]
            nx, ny = x + dx, y + dy
            if nx >= self.map_size[0]:
                return self.terminal_state, reward + exit_reward
            nx = min(max(nx, 0), self.map_size[0] - 1)
            ny = min(max(ny, 0), self.map_size[1] - 1)
            return self.encode(nx, ny, mask), reward

        return self.encode(x, y, mask), reward + sensor_use_penalty


def create_rock_sample_problem(
    *,
    map_size: Sequence[int] = (5, 5),
    rock_positions: Sequence[Sequence[int]] = ((0, 0), (2, 2), (3, 3)),
    init_pos: Sequence[int] = (0, 0),
    sensor_efficiency: float = 20.0,
    discount: float = 0.95,
) -> RockSampleProblem:
    """Factory used by plugin discovery."""

    return RockSampleProblem(
        map_size=(int(map_size[0]), int(map_size[1])),
        rock_positions=tuple((int(x), int(y)) for x, y in rock_positions),
        init_pos=(int(init_pos[0]), int(init_pos[1])),
        sensor_efficiency=sensor_efficiency,
        discount=discount,
    )


PLUGIN_MANIFESTS = [
    ComponentManifest(
        kind="problem",
        component_id="rock_sample",
        factory=create_rock_sample_problem,
        description="RockSample grid with noisy rock sensor",
    )
]
