from __future__ import annotations

import heapq
from typing import Dict, List, Sequence

from core.domain import TemplateTask
from core.exceptions import ConfigurationError


def validate_template_tasks(template_tasks: Sequence[TemplateTask]) -> Dict[str, TemplateTask]:
    tasks_by_key: Dict[str, TemplateTask] = {}
    for tt in template_tasks:
        if tt.key in tasks_by_key:
            raise ConfigurationError(
                f"Template task key '{tt.key}' is used more than once.",
                code="TEMPLATE_DUPLICATE_KEY",
            )
        if int(tt.duration_days or 0) < 1:
            raise ConfigurationError(
                f"Template task '{tt.name}' must last at least one workday.",
                code="TEMPLATE_INVALID_DURATION",
            )
        tasks_by_key[tt.key] = tt

    for tt in template_tasks:
        for dep in tt.dependencies:
            if dep.predecessor_task_id not in tasks_by_key:
                raise ConfigurationError(
                    f"Template task '{tt.name}' depends on unknown task '{dep.predecessor_task_id}'.",
                    code="TEMPLATE_UNKNOWN_PREDECESSOR",
                )
            if dep.predecessor_task_id == tt.key:
                raise ConfigurationError(
                    f"Template task '{tt.name}' cannot depend on itself.",
                    code="TEMPLATE_DEPENDENCY_CYCLE",
                )
            if int(dep.lag_days or 0) < 0:
                raise ConfigurationError(
                    f"Template task '{tt.name}' has a negative lag.",
                    code="TEMPLATE_NEGATIVE_LAG",
                )
    return tasks_by_key


def build_template_order(template_tasks: Sequence[TemplateTask]) -> List[str]:
    """
    Topological order of template keys; ties keep template order.

    A template whose dependencies only point backwards comes out in its own
    order unchanged.
    """
    tasks_by_key = validate_template_tasks(template_tasks)
    position = {tt.key: idx for idx, tt in enumerate(template_tasks)}

    graph_succ: Dict[str, List[str]] = {}
    indegree: Dict[str, int] = {key: 0 for key in tasks_by_key}
    for tt in template_tasks:
        for pred_key in {dep.predecessor_task_id for dep in tt.dependencies}:
            graph_succ.setdefault(pred_key, []).append(tt.key)
            indegree[tt.key] += 1

    heap: list[tuple[int, str]] = [(position[key], key) for key, degree in indegree.items() if degree == 0]
    heapq.heapify(heap)

    order: list[str] = []
    while heap:
        _pos, key = heapq.heappop(heap)
        order.append(key)
        for succ_key in graph_succ.get(key, []):
            indegree[succ_key] -= 1
            if indegree[succ_key] == 0:
                heapq.heappush(heap, (position[succ_key], succ_key))

    if len(order) != len(tasks_by_key):
        stuck = sorted(key for key, degree in indegree.items() if degree > 0)
        raise ConfigurationError(
            f"Cannot instantiate template: circular dependency detected among {stuck}.",
            code="TEMPLATE_DEPENDENCY_CYCLE",
        )
    return order


__all__ = ["validate_template_tasks", "build_template_order"]
