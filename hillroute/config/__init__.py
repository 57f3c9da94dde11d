"""
HillRoute 配置模块。

包含场景预设与运行配置（YAML）校验。
"""

from .scenarios import SCENARIOS, Scenario, get_scenario_by_name, list_scenarios, list_scenario_descriptions
from .schema import RunConfig, load_run_config, validate_run_config, validate_search_options

__all__ = [
    "SCENARIOS",
    "Scenario",
    "get_scenario_by_name",
    "list_scenarios",
    "list_scenario_descriptions",
    "RunConfig",
    "load_run_config",
    "validate_run_config",
    "validate_search_options",
]
