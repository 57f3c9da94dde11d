"""
HillRoute core module.

包含高程网格、通行规则、A* 算法与多源最短路径等核心功能。
"""

__all__ = ["grid", "traversal", "astar", "multisource"]
