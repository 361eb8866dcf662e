"""
图片配置模型与全局配置加载。

配置按以下顺序合并（后者优先）：
包内默认值 -> 全局 default -> 全局 types[type] -> 标签上显式写出的属性
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

from image_rewrite import logger
from image_rewrite.config import GLOBAL_CONFIG_FILENAME, PROJECT_ROOT
from image_rewrite.errors import ConfigError
from image_rewrite.utils.data_processor import load_json


class ImageConfig(BaseModel):
    """
    单个图片的配置。未指定的字段为 None（区别于 False / 空列表）。
    """
    model_config = ConfigDict(extra="ignore")

    webp: Optional[bool] = None
    inline: Optional[bool] = None
    url: Optional[bool] = None
    original: Optional[bool] = None
    sizes: Optional[List[PositiveInt]] = None
    densities: Optional[List[PositiveInt]] = None
    breakpoints: Optional[List[PositiveInt]] = None

    def specified(self) -> Dict:
        # 只包含已指定的字段
        return self.model_dump(exclude_none=True)

    def merge(self, other: Optional["ImageConfig"]) -> "ImageConfig":
        """
        返回以 other 中已指定字段覆盖当前配置后的新配置。
        """
        if other is None:
            return self
        return self.model_copy(update=other.specified())


class GlobalConfig(BaseModel):
    """
    images.config.json 的结构：{ default?: ImageConfig, types?: Record<string, ImageConfig> }
    """
    model_config = ConfigDict(extra="ignore")

    default: ImageConfig = Field(default_factory=ImageConfig)
    types: Dict[str, ImageConfig] = Field(default_factory=dict)


# 包内默认值
PACKAGE_DEFAULTS = ImageConfig(densities=[1])


def load_global_config(root: Union[str, Path]) -> GlobalConfig:
    """
    读取项目根目录下的 images.config.json。

    :param root: 项目根目录
    :return: GlobalConfig；文件不存在时返回空配置
    :raises ConfigError: 文件无法读取或内容不合法
    """
    path = Path(root) / GLOBAL_CONFIG_FILENAME
    if not path.is_file():
        logger.debug(f"No {GLOBAL_CONFIG_FILENAME} found in {root}, using empty config")
        return GlobalConfig()

    data = load_json(str(path))
    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {path}: {e}") from e

    logger.info(f"Loaded global image config from {path} ({len(config.types)} types)")
    return config


@lru_cache(maxsize=None)
def _load_cached(root: str) -> GlobalConfig:
    return load_global_config(root)


def get_global_config(root: Optional[Union[str, Path]] = None) -> GlobalConfig:
    """
    进程内缓存的全局配置，每个根目录只加载一次。
    """
    return _load_cached(str(Path(root or PROJECT_ROOT).resolve()))
