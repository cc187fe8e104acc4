"""Task hierarchy as an arena.

Tasks are held in a dict keyed by id; parent and dependency links stay as id
references. Subtrees are read level by level with one query per level, so no
deeply nested eager loading is needed and depth is bounded explicitly.
"""

from collections import defaultdict
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.schemas.category import CategoryBrief
from app.schemas.task import TaskBrief, TaskResponse, TaskTreeNode
from models import Task, TaskDependency, TaskStatus


async def collect_subtree_levels(
    db: AsyncSession, root_id: UUID, max_depth: int | None = None
) -> list[list[UUID]]:
    """Ids of ``root_id`` and its descendants grouped by level, root level first."""
    levels = [[root_id]]
    seen = {root_id}
    level = [root_id]
    depth = 0
    while max_depth is None or depth < max_depth:
        result = await db.execute(select(Task.id).where(Task.parent_id.in_(level)))
        level = [child_id for child_id in result.scalars().all() if child_id not in seen]
        if not level:
            break
        seen.update(level)
        levels.append(level)
        depth += 1
    return levels


async def collect_subtree_ids(
    db: AsyncSession, root_id: UUID, max_depth: int | None = None
) -> list[UUID]:
    """Ids of ``root_id`` and all its descendants, breadth-first."""
    levels = await collect_subtree_levels(db, root_id, max_depth)
    return [task_id for level in levels for task_id in level]


class TaskArena:
    """Loaded subtree of one task plus the dependency edges touching it."""

    def __init__(
        self,
        root_id: UUID,
        tasks: dict[UUID, Task],
        edges: list[TaskDependency],
        external: dict[UUID, Task] | None = None,
    ):
        self.root_id = root_id
        self.tasks = tasks
        self.external = external or {}
        self.children: dict[UUID, list[UUID]] = defaultdict(list)
        self.dependency_ids: dict[UUID, list[UUID]] = defaultdict(list)
        self.dependent_ids: dict[UUID, list[UUID]] = defaultdict(list)

        for task in sorted(tasks.values(), key=lambda t: t.created_at):
            if task.parent_id is not None and task.id != root_id and task.parent_id in tasks:
                self.children[task.parent_id].append(task.id)
        for edge in edges:
            self.dependency_ids[edge.task_id].append(edge.dependency_id)
            self.dependent_ids[edge.dependency_id].append(edge.task_id)

    @classmethod
    async def load(cls, db: AsyncSession, root: Task, max_depth: int) -> "TaskArena":
        tasks: dict[UUID, Task] = {root.id: root}
        level = [root.id]
        depth = 0
        while level and depth < max_depth:
            result = await db.execute(
                select(Task)
                .options(selectinload(Task.category))
                .where(Task.parent_id.in_(level), Task.user_id == root.user_id)
                .execution_options(populate_existing=True)
            )
            children = [t for t in result.scalars().all() if t.id not in tasks]
            tasks.update({t.id: t for t in children})
            level = [t.id for t in children]
            depth += 1

        ids = list(tasks)
        result = await db.execute(
            select(TaskDependency).where(
                or_(TaskDependency.task_id.in_(ids), TaskDependency.dependency_id.in_(ids))
            )
        )
        edges = list(result.scalars().all())

        # Dependencies may point outside the subtree; load them for blocking info
        outside = {e.dependency_id for e in edges} - tasks.keys()
        external: dict[UUID, Task] = {}
        if outside:
            result = await db.execute(select(Task).where(Task.id.in_(outside)))
            external = {t.id: t for t in result.scalars().all()}

        return cls(root.id, tasks, edges, external)

    def lookup(self, task_id: UUID) -> Task | None:
        return self.tasks.get(task_id) or self.external.get(task_id)

    def blocked_by(self, task_id: UUID) -> list[Task]:
        """Incomplete tasks ``task_id`` depends on."""
        blockers = []
        for dependency_id in self.dependency_ids.get(task_id, []):
            dependency = self.lookup(dependency_id)
            if dependency is not None and dependency.status != TaskStatus.COMPLETED:
                blockers.append(dependency)
        return blockers

    def node(self, task_id: UUID) -> TaskTreeNode:
        task = self.tasks[task_id]
        base = TaskResponse.model_validate(task).model_dump()
        return TaskTreeNode(
            **base,
            category=CategoryBrief.model_validate(task.category) if task.category else None,
            dependency_ids=self.dependency_ids.get(task_id, []),
            dependent_ids=self.dependent_ids.get(task_id, []),
            blocked_by=[TaskBrief.model_validate(t) for t in self.blocked_by(task_id)],
            subtasks=[self.node(child_id) for child_id in self.children.get(task_id, [])],
        )

    def to_tree(self) -> TaskTreeNode:
        return self.node(self.root_id)
