"""
几何包围盒 - 计算 SVG 元素在局部坐标系中的外接矩形

策略：
1. 基本图形（rect/circle/ellipse/line/polyline/polygon）按属性直接计算
2. path 按路径指令取端点与控制点的外接矩形（不求曲线极值）
3. 容器（g/a/svg/symbol）取子元素并集
4. 不应用 transform 属性
"""

from __future__ import annotations

import re
from xml.etree import ElementTree as ET

from ..models import BBox

_PATH_CMD_RE = re.compile(
    r"([MmZzLlHhVvCcSsQqTtAa])|([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px)?\s*$")

# 每条指令的参数个数
_ARG_COUNTS = {"M": 2, "L": 2, "T": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "A": 7}

CONTAINER_TAGS = {"g", "a", "svg", "symbol", "switch"}
_HIDDEN_TAGS = {"defs", "clipPath", "mask", "marker", "pattern", "symbol"}


def local_name(tag: str) -> str:
    """'{http://www.w3.org/2000/svg}rect' -> 'rect'"""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def parse_length(value: str | None) -> float | None:
    """解析长度（仅无单位或 px，百分比等返回 None）"""
    if value is None:
        return None
    m = _LENGTH_RE.match(value)
    if not m:
        return None
    return float(m.group(1))


def parse_points(value: str | None) -> list[tuple[float, float]]:
    """polyline/polygon 的 points 属性"""
    if not value:
        return []
    nums = [float(n) for n in _NUMBER_RE.findall(value)]
    return [(nums[i], nums[i + 1]) for i in range(0, len(nums) - 1, 2)]


def tokenize_path(d: str) -> list[tuple[str, list[float]]]:
    """将 path 的 d 属性切分为 (指令, [参数])"""
    tokens: list[tuple[str, list[float]]] = []
    cmd = None
    args: list[float] = []
    for match in _PATH_CMD_RE.finditer(d):
        c, n = match.groups()
        if c:
            if cmd is not None:
                tokens.append((cmd, args))
            cmd = c
            args = []
        elif n is not None:
            args.append(float(n))
    if cmd is not None:
        tokens.append((cmd, args))
    return tokens


def path_points(d: str) -> list[tuple[float, float]]:
    """路径中所有端点与控制点的绝对坐标"""
    points: list[tuple[float, float]] = []
    cx = cy = 0.0
    start_x = start_y = 0.0

    for cmd, args in tokenize_path(d):
        op = cmd.upper()
        relative = cmd.islower()
        if op == "Z":
            cx, cy = start_x, start_y
            continue
        step = _ARG_COUNTS[op]
        for i in range(0, len(args) - step + 1, step):
            chunk = args[i:i + step]
            if op == "H":
                cx = chunk[0] + (cx if relative else 0.0)
                seg = [(cx, cy)]
            elif op == "V":
                cy = chunk[0] + (cy if relative else 0.0)
                seg = [(cx, cy)]
            elif op == "A":
                x, y = chunk[5], chunk[6]
                if relative:
                    x, y = x + cx, y + cy
                seg = [(x, y)]
            else:
                seg = [(chunk[j], chunk[j + 1]) for j in range(0, step, 2)]
                if relative:
                    seg = [(px + cx, py + cy) for px, py in seg]
            points.extend(seg)
            cx, cy = seg[-1]
            # M 后续坐标对按 L 处理，只有第一对确定子路径起点
            if op == "M" and i == 0:
                start_x, start_y = cx, cy
    return points


def shape_bounds(el: ET.Element) -> BBox | None:
    """单个图形元素自身的包围盒（容器返回 None）"""
    tag = local_name(el.tag)
    a = el.attrib

    if tag == "rect":
        x = parse_length(a.get("x")) or 0.0
        y = parse_length(a.get("y")) or 0.0
        w = parse_length(a.get("width"))
        h = parse_length(a.get("height"))
        if w is None or h is None:
            return None
        return BBox(xmin=x, ymin=y, xmax=x + w, ymax=y + h)

    if tag in ("circle", "ellipse"):
        cx = parse_length(a.get("cx")) or 0.0
        cy = parse_length(a.get("cy")) or 0.0
        if tag == "circle":
            rx = ry = parse_length(a.get("r"))
        else:
            rx = parse_length(a.get("rx"))
            ry = parse_length(a.get("ry"))
        if rx is None or ry is None:
            return None
        return BBox(xmin=cx - rx, ymin=cy - ry, xmax=cx + rx, ymax=cy + ry)

    if tag == "line":
        coords = [parse_length(a.get(k)) or 0.0 for k in ("x1", "y1", "x2", "y2")]
        return BBox.from_points([(coords[0], coords[1]), (coords[2], coords[3])])

    if tag in ("polyline", "polygon"):
        return BBox.from_points(parse_points(a.get("points")))

    if tag == "path":
        return BBox.from_points(path_points(a.get("d", "")))

    if tag in ("text", "use", "image", "foreignObject"):
        x = parse_length(a.get("x"))
        y = parse_length(a.get("y"))
        if x is None and y is None:
            return None
        x = x or 0.0
        y = y or 0.0
        w = parse_length(a.get("width")) or 0.0
        h = parse_length(a.get("height")) or 0.0
        return BBox(xmin=x, ymin=y, xmax=x + w, ymax=y + h)

    return None


def compute_bounds(root: ET.Element) -> dict[int, BBox | None]:
    """后序计算全部元素包围盒，键为 id(element)

    显式栈遍历，嵌套深度不受递归上限约束。
    """
    order: list[ET.Element] = []
    stack = [root]
    while stack:
        el = stack.pop()
        order.append(el)
        stack.extend(el)

    bounds: dict[int, BBox | None] = {}
    contributed: dict[int, BBox | None] = {}
    # 先序的逆序保证子元素先于父元素处理
    for el in reversed(order):
        tag = local_name(el.tag)
        if tag in CONTAINER_TAGS:
            box = None
            for child in el:
                child_box = contributed[id(child)]
                if child_box is not None:
                    box = child_box if box is None else box.union(child_box)
        else:
            box = shape_bounds(el)
        bounds[id(el)] = box
        # defs/clipPath 等内容不参与父容器的并集
        contributed[id(el)] = None if tag in _HIDDEN_TAGS else box
    return bounds
