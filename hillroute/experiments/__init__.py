"""
HillRoute 实验模块：批量运行场景并导出结果表。
"""
