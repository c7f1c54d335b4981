"""
Frame-synchronous cooperative scheduler.

The scheduler owns the global tick counter.  For each scene it primes the
scene generator to obtain its object list, then every tick:

1. resumes the scene with the current tick; while the scene yields
   generators (spawns) they are added to the running set and the scene is
   resumed again on the same tick;
2. steps every spawned task once, in the order they were added, dropping
   the ones that finish;
3. emits a :class:`TickState` describing what should be drawn.

Everything is single threaded: all mutations for tick ``i`` are applied
before the ``TickState`` for tick ``i`` is handed out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence

from .errors import SceneError
from .objects import Frame, RenderObject
from .primitives import Coroutine, is_coroutine

LOG = logging.getLogger(__name__)


class Task:
    """
    A spawned coroutine owned by the scheduler.

    ``step(tick)`` resumes it once and reports whether it has finished.
    Spawns issued by the task itself are collected in :attr:`spawned` for the
    scheduler to adopt.
    """

    __slots__ = ("coroutine", "name", "done", "spawned", "_started")

    def __init__(self, coroutine: Coroutine, name: Optional[str] = None) -> None:
        if not is_coroutine(coroutine):
            raise TypeError(f"Task requires a generator, got {type(coroutine).__name__}")
        self.coroutine = coroutine
        self.name = name or getattr(coroutine, "__name__", "task")
        self.done = False
        self.spawned: List["Task"] = []
        self._started = False

    def _resume(self, tick: Optional[int]) -> object:
        if not self._started:
            self._started = True
            return next(self.coroutine)
        return self.coroutine.send(tick)

    def step(self, tick: Optional[int] = None) -> bool:
        if self.done:
            return True
        try:
            value = self._resume(tick)
            while is_coroutine(value):
                self.spawned.append(Task(value))  # type: ignore[arg-type]
                value = self._resume(tick)
        except StopIteration:
            self.done = True
        if not self.done and value is not None:
            raise SceneError(
                f"task '{self.name}' yielded {type(value).__name__}; "
                "yield a generator to spawn it or None to wait a tick"
            )
        return self.done

    def take_spawned(self) -> List["Task"]:
        spawned, self.spawned = self.spawned, []
        return spawned

    def __repr__(self) -> str:
        state = "done" if self.done else "running"
        return f"<Task {self.name} {state}>"


@dataclass(frozen=True, slots=True)
class TickState:
    """
    Immutable record of one scheduler tick.
    """

    tick: int
    scene_index: int
    scene_name: str
    frame: Frame
    running: int
    scene_finished: bool

    def to_dict(self) -> dict:
        return {
            "tick": int(self.tick),
            "sceneIndex": int(self.scene_index),
            "sceneName": self.scene_name,
            "objects": len(self.frame),
            "running": int(self.running),
            "sceneFinished": bool(self.scene_finished),
        }


def _validate_objects(scene_name: str, value: object) -> List[RenderObject]:
    if not isinstance(value, (list, tuple)):
        raise SceneError(
            f"scene '{scene_name}' must first yield its list of objects, got {type(value).__name__}"
        )
    for item in value:
        if not isinstance(item, RenderObject):
            raise SceneError(
                f"scene '{scene_name}' yielded a non-drawable object: {type(item).__name__}"
            )
    return value  # type: ignore[return-value]


class Scheduler:
    """
    Steps a sequence of scene generators against one global tick counter.
    """

    def __init__(self, scenes: Iterable[Coroutine]) -> None:
        self._scenes: Sequence[Coroutine] = list(scenes)
        for scene in self._scenes:
            if not is_coroutine(scene):
                raise SceneError(f"scenes must be generators, got {type(scene).__name__}")
        self._tick = 0
        self._running: List[Task] = []

    # ------------------------------------------------------------------ state

    @property
    def tick(self) -> int:
        """Number of ticks consumed so far."""

        return self._tick

    @property
    def running(self) -> int:
        return len(self._running)

    # ------------------------------------------------------------------ helpers

    def _spawn(self, coroutine: Coroutine) -> None:
        self._running.append(Task(coroutine))

    def _resume_scene(self, scene: Coroutine, scene_name: str) -> bool:
        """
        Resume ``scene`` for the current tick, adopting any spawns.

        Returns True once the scene has finished.
        """

        try:
            value = scene.send(self._tick)
            while is_coroutine(value):
                self._spawn(value)  # type: ignore[arg-type]
                value = scene.send(self._tick)
        except StopIteration:
            return True
        if value is not None:
            raise SceneError(
                f"scene '{scene_name}' yielded {type(value).__name__}; "
                "yield a generator to spawn it or None to wait a tick"
            )
        return False

    def _step_running(self) -> None:
        index = 0
        while index < len(self._running):
            task = self._running[index]
            finished = task.step(self._tick)
            self._running.extend(task.take_spawned())
            if finished:
                del self._running[index]
            else:
                index += 1

    # ------------------------------------------------------------------ API

    def ticks(self) -> Iterator[TickState]:
        for scene_index, scene in enumerate(self._scenes):
            scene_name = getattr(scene, "__name__", f"scene{scene_index}")
            try:
                first = next(scene)
            except StopIteration:
                raise SceneError(f"scene '{scene_name}' finished before yielding its objects") from None
            objects = _validate_objects(scene_name, first)
            self._running = []
            LOG.debug("Starting scene %s (%d) at tick %d", scene_name, scene_index, self._tick)

            finished = False
            while not finished:
                finished = self._resume_scene(scene, scene_name)
                self._step_running()
                yield TickState(
                    tick=self._tick,
                    scene_index=scene_index,
                    scene_name=scene_name,
                    frame=tuple(objects),
                    running=len(self._running),
                    scene_finished=finished,
                )
                self._tick += 1

            if self._running:
                LOG.warning(
                    "Scene %s ended with %d spawned coroutine(s) still running; dropping them",
                    scene_name,
                    len(self._running),
                )
                for task in self._running:
                    task.coroutine.close()
                self._running = []

    def run(self) -> int:
        """Step every scene to completion and return the total tick count."""

        for _ in self.ticks():
            pass
        return self._tick
