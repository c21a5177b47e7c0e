# apps/common/utils/redis_keys.py

from __future__ import annotations

"""
Redis 键名集中管理，避免各模块随意拼接带来不一致
"""


def leaderboard_key() -> str:
    """全站排行榜缓存键"""
    return "leaderboard:global"
