from django.apps import AppConfig


class LeaderboardConfig(AppConfig):
    """
    Leaderboard 应用配置：
    - 无模型，只基于提交记录做只读聚合
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.leaderboard"
    label = "leaderboard"
    verbose_name = "Leaderboard"
