from dataclasses import dataclass, field
from enum import Enum

from borrowkit import (
    BorrowConflictError,
    Fetch,
    FetchMut,
    Resources,
    access_of,
    system_data,
)


class TaskStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class Task:
    description: str
    status: TaskStatus


@dataclass
class TaskQueue:
    """One queue per worker, told apart by aux id."""

    tasks: list[Task] = field(default_factory=list)


@dataclass
class Progress:
    completed: int = 0


@system_data
@dataclass
class ProgressorData:
    queue: FetchMut[TaskQueue]
    progress: FetchMut[Progress]


@system_data
@dataclass
class ReporterData:
    queue: Fetch[TaskQueue]


def progress_tasks(data: ProgressorData) -> None:
    """Advance every task in the queue one step."""
    updated = []
    for task in data.queue.value.tasks:
        if task.status == TaskStatus.PENDING:
            updated.append(Task(task.description, TaskStatus.IN_PROGRESS))
        elif task.status == TaskStatus.IN_PROGRESS:
            updated.append(Task(task.description, TaskStatus.COMPLETED))
            data.progress.value = Progress(data.progress.value.completed + 1)
        else:
            updated.append(task)
    data.queue.value = TaskQueue(updated)


def report(data: ReporterData) -> None:
    pending = [t for t in data.queue.value.tasks if t.status != TaskStatus.COMPLETED]
    print(f"{len(pending)} tasks not completed.")


def main() -> None:
    resources = Resources()
    resources.register(
        TaskQueue(
            tasks=[
                Task("Collect data", TaskStatus.PENDING),
                Task("Analyze data", TaskStatus.PENDING),
                Task("Generate report", TaskStatus.PENDING),
            ]
        )
    )
    resources.register(Progress())

    # A scheduler would keep these two apart: the progressor writes the queue
    print(
        "Conflict:",
        access_of(ProgressorData).conflicts_with(access_of(ReporterData)),
    )

    for tick in range(2):
        with ProgressorData.construct(resources) as data:
            progress_tasks(data)
        with ReporterData.construct(resources) as data:
            report(data)
        print(f"After tick {tick + 1}: {resources.fetch_shared(Progress).value.completed} done")

    # Run them together anyway and the borrow tracking refuses
    with ProgressorData.construct(resources):
        try:
            ReporterData.construct(resources)
        except BorrowConflictError as e:
            print(f"Caught conflicting access: {e}")


if __name__ == "__main__":
    main()
