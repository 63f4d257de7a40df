"""Configuration helpers for tb_common."""

from .env import env_bool, env_path, env_str

__all__ = ["env_bool", "env_path", "env_str"]
