from django.apps import AppConfig


class PuzzlesConfig(AppConfig):
    """
    Puzzles 应用配置：
    - 声明应用路径与默认主键类型，供 Django 注册模型与 Celery 任务
    """

    default_auto_field = "django.db.models.BigAutoField"  # 默认主键类型
    name = "apps.puzzles"  # 应用路径
    label = "puzzles"  # 应用标签
    verbose_name = "Puzzles"  # 应用显示名称
