from django.apps import AppConfig


class CommonConfig(AppConfig):
    """
    公共模块 AppConfig

    职责：
    - Django 启动完成后初始化日志系统（只做无数据库访问的初始化）
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.common"
    label = "common"
    verbose_name = "Common"

    def ready(self):
        from apps.common.infra.logger import configure_logging, get_log_path_from_settings

        configure_logging(force=True, log_file_path=get_log_path_from_settings())
