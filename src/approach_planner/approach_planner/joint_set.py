"""
joint_set.py

[역할]
- 관절 이름 집합에 대한 간단한 집합 연산.
- 비교(부분집합 등)는 항상 정렬된 사본으로 수행하므로 입력 순서/중복에 영향을 받지 않는다.
"""

from typing import Iterable, List, Sequence


def sorted_joints(names: Iterable[str]) -> List[str]:
    return sorted(set(names))


def is_subset(sub: Iterable[str], sup: Iterable[str]) -> bool:
    return set(sub).issubset(sup)


def is_planning_joint(name: str, excluded: Sequence[str]) -> bool:
    return name not in excluded


def exclude_joints(names: Sequence[str], excluded: Sequence[str]) -> List[str]:
    return [n for n in names if is_planning_joint(n, excluded)]


def enumerate_str(names: Iterable[str]) -> str:
    return ", ".join(str(n) for n in names)
