"""
本模块提供 JSON 文件与源码文件的读写工具函数。

主要功能包括：
1. 全局图片配置（images.config.json）的加载
2. 源码文件的字节级读取与写入（自动创建目录）

读取失败时记录日志并抛出 ConfigError / OSError，由调用方决定如何呈现。
"""

import json
import os
from typing import Any

from image_rewrite import logger
from image_rewrite.errors import ConfigError


def load_json(file_path: str) -> Any:
    """
    从指定路径加载 JSON 文件并反序列化为 Python 对象。

    :param file_path: JSON 文件路径
    :return: 反序列化后的 Python 对象
    :raises ConfigError: 文件无法读取或不是合法 JSON
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.exception(f"Error loading json file: {e}")
        raise ConfigError(f"Unable to load {file_path}: {e}") from e


def load_file(file_path: str) -> bytes:
    """
    读取源码文件的全部字节。

    :param file_path: 文件路径
    :return: 文件内容
    """
    with open(file_path, 'rb') as f:
        return f.read()


def save_file(file_path: str, content: bytes):
    """
    将内容写入文件。

    - 自动创建不存在的目录路径

    :param file_path: 保存路径
    :param content: 文件内容
    """
    dir_path = os.path.dirname(file_path)

    # 若目录不存在则递归创建
    if dir_path and not os.path.exists(dir_path):
        os.makedirs(dir_path)

    with open(file_path, 'wb') as f:
        f.write(content)
