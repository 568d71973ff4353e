"""Grading of every exercise at once, with a JSON report of the results."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path

from rustlings.exercise import Exercise
from rustlings.run import run
from rustlings.verify import VerificationFailed

__all__ = [
    "ExerciseResult",
    "ExerciseStatistics",
    "ExerciseCheckList",
    "cicv_verify",
    "DEFAULT_RESULT_PATH",
]

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a whole grading run."""

    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The report written after grading."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)

    def to_json(self) -> str:
        """Serialise the report as indented JSON."""
        return json.dumps(asdict(self), indent=2, ensure_ascii=False)


def _now() -> int:
    return int(time.time())


def cicv_verify(
    exercises: Iterable[Exercise],
    verbose: bool = True,
    output_path: str | os.PathLike = DEFAULT_RESULT_PATH,
) -> ExerciseCheckList:
    """Run every exercise concurrently and write the results to ``output_path``.

    Test output is always shown, whatever ``verbose`` says.
    """
    exercises = list(exercises)
    start = _now()
    total = len(exercises)
    check_list = ExerciseCheckList(
        statistics=ExerciseStatistics(total_exercations=total)
    )
    stats = check_list.statistics
    lock = threading.Lock()

    def check(exercise: Exercise, task_start: int) -> None:
        try:
            run(exercise, True)
        except VerificationFailed:
            passed = False
        else:
            passed = True
        with lock:
            if passed:
                stats.total_succeeds += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {stats.total_succeeds}")
            print(f"当前修改试卷耗时: {_now() - task_start} s")
            check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if not passed:
                stats.total_failures += 1

    if exercises:
        with ThreadPoolExecutor() as pool:
            futures = [pool.submit(check, exercise, _now()) for exercise in exercises]
            for future in futures:
                future.result()

    total_time = _now() - start
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    stats.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list