"""
提示词管理器
统一管理和加载不同场景的提示词配置
"""

import logging
from typing import Dict, List, Optional
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class PromptsManager:
    """提示词管理器，负责加载和管理不同场景的提示词"""

    def __init__(self, prompts_dir: Path):
        """
        初始化提示词管理器

        Args:
            prompts_dir: 提示词配置文件目录（通常为 server/prompts/）
        """
        self.prompts_dir = Path(prompts_dir)
        self.prompts_cache: Dict[str, Dict] = {}
        self._load_all_prompts()

    def _load_all_prompts(self):
        """加载所有提示词配置文件"""
        if not self.prompts_dir.is_dir():
            logger.warning(f"提示词目录不存在: {self.prompts_dir}，将使用内置提示词")
            return

        yaml_files = sorted(self.prompts_dir.glob("*.yaml")) + sorted(self.prompts_dir.glob("*.yml"))

        for yaml_file in yaml_files:
            if yaml_file.name.startswith("_"):
                continue  # 跳过以 _ 开头的文件

            try:
                with open(yaml_file, 'r', encoding='utf-8') as f:
                    prompts_data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"加载提示词文件失败 {yaml_file}: {e}")
                continue

            if isinstance(prompts_data, dict):
                # 使用文件名（不含扩展名）作为场景名
                scene_name = yaml_file.stem
                self.prompts_cache[scene_name] = prompts_data
                logger.info(f"加载提示词配置: {scene_name} ({yaml_file.name})")

        if not self.prompts_cache:
            logger.warning(f"未找到任何提示词配置文件，目录: {self.prompts_dir}")

    def get_prompt(self, scene: str, template_name: str = "default") -> Optional[str]:
        """
        获取指定场景的提示词模板

        Args:
            scene: 场景名称（对应 YAML 文件名）
            template_name: 模板名称，默认为 "default"

        Returns:
            提示词模板字符串，如果不存在则返回 None
        """
        scene_prompts = self.prompts_cache.get(scene)
        if not scene_prompts:
            logger.warning(f"未找到场景 '{scene}' 的提示词配置")
            return None

        templates = scene_prompts.get("templates") or {}
        prompt_template = templates.get(template_name)

        if not prompt_template:
            logger.warning(f"场景 '{scene}' 中未找到模板 '{template_name}'")
            return None

        return str(prompt_template).strip()

    def get_all_scenes(self) -> List[str]:
        """获取所有可用的场景名称"""
        return list(self.prompts_cache.keys())
