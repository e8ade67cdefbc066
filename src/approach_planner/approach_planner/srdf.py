"""
srdf.py

[역할]
- SRDF(robot_description_semantic) 문자열에서 planning group별 관절 이름을 읽는다.
- <group> 안의 <joint name=...> 와 하위 <group name=...> 참조를 재귀적으로 펼친다.
- <chain>은 URDF 없이 풀 수 없으므로 무시한다 (호출자가 경고를 남김).
- URDF(robot_description)에서 관절 위치 한계를 읽는다 (parse_joint_limits).
"""

import math
import xml.etree.ElementTree as ET
from typing import Dict, List, Tuple


def parse_group_joints(srdf_xml: str) -> Dict[str, List[str]]:
    root = ET.fromstring(srdf_xml)
    raw = {}
    for g in root.findall("group"):
        name = g.get("name")
        if name is None:
            continue
        joints = [j.get("name") for j in g.findall("joint") if j.get("name")]
        subgroups = [s.get("name") for s in g.findall("group") if s.get("name")]
        has_chain = g.find("chain") is not None
        raw[name] = (joints, subgroups, has_chain)

    result = {}

    def expand(name, visiting):
        if name in result:
            return result[name]
        if name in visiting or name not in raw:
            return []
        visiting.add(name)
        joints, subgroups, _ = raw[name]
        out = list(joints)
        for sub in subgroups:
            for j in expand(sub, visiting):
                if j not in out:
                    out.append(j)
        visiting.discard(name)
        result[name] = out
        return out

    for name in raw:
        expand(name, set())
    return result


def groups_with_chains(srdf_xml: str) -> List[str]:
    root = ET.fromstring(srdf_xml)
    return [g.get("name") for g in root.findall("group") if g.find("chain") is not None]


def parse_joint_limits(urdf_xml: str) -> Dict[str, Tuple[float, float]]:
    """
    URDF 관절 이름 -> (lower, upper).
    - revolute / prismatic: <limit lower upper> (없으면 0)
    - continuous: 한계 없음 (-inf, inf)
    - fixed / floating / planar, mimic 관절은 목표로 줄 수 없으므로 빠진다
    """
    root = ET.fromstring(urdf_xml)
    limits = {}
    for j in root.findall("joint"):
        name, jtype = j.get("name"), j.get("type")
        if name is None or j.find("mimic") is not None:
            continue
        if jtype == "continuous":
            limits[name] = (-math.inf, math.inf)
        elif jtype in ("revolute", "prismatic"):
            lim = j.find("limit")
            lo = float(lim.get("lower", 0.0)) if lim is not None else 0.0
            hi = float(lim.get("upper", 0.0)) if lim is not None else 0.0
            limits[name] = (lo, hi)
    return limits
