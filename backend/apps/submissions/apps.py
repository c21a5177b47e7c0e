from django.apps import AppConfig


class SubmissionsConfig(AppConfig):
    """
    Submissions 应用配置：
    - 答案提交记录，外键挂在谜题上，状态由管理员人工审核
    """

    default_auto_field = "django.db.models.BigAutoField"  # 默认主键类型
    name = "apps.submissions"  # 应用路径
    label = "submissions"  # 应用标签
    verbose_name = "答案提交"  # 应用显示名称
