from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Deque, List, Optional, Tuple

import numpy as np

from . import controller
from .controller import ActivePiece
from .grid import Board, EMPTY
from .pieces import TetrominoType, random_kind
from .rules import ScoringRules, SpeedRules


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    NONE = 4
    TICK = 5
    START = 6
    RESET = 7


class GamePhase(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    GAME_OVER = "game_over"


class EventType(Enum):
    LINES_CLEARED = "lines_cleared"
    GAME_OVER = "game_over"
    NEW_HIGH_SCORE = "new_high_score"


@dataclass(frozen=True)
class GameEvent:
    type: EventType
    value: int


Listener = Callable[[GameEvent], None]
KindSource = Callable[[], TetrominoType]


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {self.width}x{self.height}")


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read-only view of the game after a command.

    `board` holds settled cells only and `overlay` holds only the active
    piece; both are copies detached from the live game.
    """

    board: np.ndarray
    overlay: np.ndarray
    score: int
    high_score: int
    game_over: bool
    fall_interval_ms: int
    phase: GamePhase
    lines_cleared: int
    active_kind: Optional[TetrominoType]
    events: Tuple[GameEvent, ...] = ()

    def composite(self) -> np.ndarray:
        merged = self.board.copy()
        mask = self.overlay != EMPTY
        merged[mask] = self.overlay[mask]
        return merged


class TetrisGame:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        scoring: Optional[ScoringRules] = None,
        speed: Optional[SpeedRules] = None,
        kind_source: Optional[KindSource] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.scoring = scoring or ScoringRules()
        self.speed = speed or SpeedRules()
        self.rng = random.Random(self.config.random_seed)
        self.kind_source: KindSource = kind_source or (lambda: random_kind(self.rng))
        self.high_score = 0
        self._listeners: List[Listener] = []
        self._queue: Deque[Action] = deque()
        self._busy = False
        self._handlers = {
            Action.LEFT: lambda events: self._shift(-1),
            Action.RIGHT: lambda events: self._shift(1),
            Action.ROTATE: lambda events: self._rotate(),
            Action.SOFT_DROP: lambda events: self._soft_drop(),
            Action.NONE: lambda events: None,
            Action.TICK: self._tick,
            Action.START: self._start,
            Action.RESET: lambda events: self._reset_state(),
        }
        self._reset_state()

    def _reset_state(self) -> None:
        self.board = Board.create(self.config.width, self.config.height)
        self.piece: Optional[ActivePiece] = None
        self.score = 0
        self.lines_cleared_total = 0
        self.phase = GamePhase.NOT_STARTED
        self.fall_interval_ms = self.speed.fall_interval_ms(0)

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    @property
    def running(self) -> bool:
        return self.phase is GamePhase.RUNNING

    def reseed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    # Listeners

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    # Commands

    def start(self) -> Snapshot:
        return self.step(Action.START)

    def reset(self) -> Snapshot:
        return self.step(Action.RESET)

    def restart(self) -> Snapshot:
        self.reset()
        return self.start()

    def tick(self) -> Snapshot:
        return self.step(Action.TICK)

    def move_left(self) -> Snapshot:
        return self.step(Action.LEFT)

    def move_right(self) -> Snapshot:
        return self.step(Action.RIGHT)

    def soft_drop(self) -> Snapshot:
        return self.step(Action.SOFT_DROP)

    def rotate(self) -> Snapshot:
        return self.step(Action.ROTATE)

    def step(self, action: Action) -> Snapshot:
        """Apply a command after anything already queued, in FIFO order.

        Commands issued from inside a listener are appended to the queue and
        run before this call returns. The returned snapshot reflects the
        final state and carries every event produced along the way.
        """
        self._queue.append(Action(action))
        if self._busy:
            return self.snapshot()
        return self._drain()

    def enqueue(self, action: Action) -> None:
        self._queue.append(Action(action))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def process_pending(self) -> Snapshot:
        if self._busy:
            return self.snapshot()
        return self._drain()

    def _drain(self) -> Snapshot:
        produced: List[GameEvent] = []
        self._busy = True
        try:
            while self._queue:
                events: List[GameEvent] = []
                self._handlers[self._queue.popleft()](events)
                produced.extend(events)
                for event in events:
                    for listener in list(self._listeners):
                        listener(event)
        finally:
            self._busy = False
        return self.snapshot(produced)

    # Transitions

    def _start(self, events: List[GameEvent]) -> None:
        if self.phase is not GamePhase.NOT_STARTED:
            return
        self.phase = GamePhase.RUNNING
        self._spawn_next(events)

    def _shift(self, dx: int) -> None:
        if not self.running or self.piece is None:
            return
        moved = controller.move_horizontal(self.board, self.piece, dx)
        if moved is not None:
            self.piece = moved

    def _rotate(self) -> None:
        if not self.running or self.piece is None:
            return
        rotated = controller.rotate(self.board, self.piece)
        if rotated is not None:
            self.piece = rotated

    def _soft_drop(self) -> None:
        # Player-initiated drop never locks; the next tick does
        if not self.running or self.piece is None:
            return
        dropped = controller.soft_drop(self.board, self.piece)
        if dropped is not None:
            self.piece = dropped

    def _tick(self, events: List[GameEvent]) -> None:
        if not self.running or self.piece is None:
            return
        dropped = controller.soft_drop(self.board, self.piece)
        if dropped is not None:
            self.piece = dropped
            return
        self._lock_piece(events)
        self._spawn_next(events)

    def _lock_piece(self, events: List[GameEvent]) -> None:
        assert self.piece is not None
        piece = self.piece
        self.piece = None
        locked = self.board.lock(piece.shape, piece.position, int(piece.kind))
        self.board, lines = locked.clear_full_lines()
        logger.debug("Locked %s at %s, cleared %d line(s)", piece.kind.name, piece.position, lines)
        if lines:
            self.lines_cleared_total += lines
            self.score += self.scoring.score_for_lines(lines)
            self.fall_interval_ms = self.speed.fall_interval_ms(self.score)
            events.append(GameEvent(EventType.LINES_CLEARED, lines))

    def _spawn_next(self, events: List[GameEvent]) -> None:
        kind = self.kind_source()
        piece = controller.spawn(self.board, kind)
        if piece is None:
            self._end_game(events)
            return
        self.piece = piece

    def _end_game(self, events: List[GameEvent]) -> None:
        self.phase = GamePhase.GAME_OVER
        self.piece = None
        logger.info("Game over with score %d (high score %d)", self.score, self.high_score)
        events.append(GameEvent(EventType.GAME_OVER, self.score))
        if self.score > self.high_score:
            self.high_score = self.score
            events.append(GameEvent(EventType.NEW_HIGH_SCORE, self.score))

    # Views

    def overlay(self) -> np.ndarray:
        overlay = np.zeros((self.board.height, self.board.width), dtype=np.int8)
        if self.piece is not None:
            for x, y in self.piece.cells():
                overlay[y, x] = int(self.piece.kind)
        return overlay

    def snapshot(self, events: Optional[List[GameEvent]] = None) -> Snapshot:
        return Snapshot(
            board=self.board.to_array(),
            overlay=self.overlay(),
            score=self.score,
            high_score=self.high_score,
            game_over=self.game_over,
            fall_interval_ms=self.fall_interval_ms,
            phase=self.phase,
            lines_cleared=self.lines_cleared_total,
            active_kind=self.piece.kind if self.piece is not None else None,
            events=tuple(events or ()),
        )
