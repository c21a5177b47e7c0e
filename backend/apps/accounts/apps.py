from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """
    管理员会话应用配置：
    - 单一管理员凭据来自配置，不使用 Django 用户表
    - 只保存登录会话，用于令牌吊销
    """

    # 默认主键类型：使用 BigAutoField，避免主键溢出
    default_auto_field = "django.db.models.BigAutoField"
    # 应用全路径：与 Django INSTALLED_APPS 保持一致
    name = "apps.accounts"
    label = "accounts"
    verbose_name = "管理员会话"
