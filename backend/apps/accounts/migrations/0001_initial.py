import django.utils.timezone
from django.db import migrations, models

import apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AdminSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "session_id",
                    models.CharField(
                        default=apps.accounts.models.generate_session_id,
                        max_length=64,
                        unique=True,
                        verbose_name="会话标识",
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="创建时间")),
                ("user_agent", models.CharField(blank=True, default="", max_length=512, verbose_name="User-Agent")),
                ("ip", models.GenericIPAddressField(blank=True, null=True, verbose_name="来源 IP")),
            ],
            options={
                "verbose_name": "管理员会话",
                "verbose_name_plural": "管理员会话",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["created_at"], name="admin_session_created_idx")],
            },
        ),
    ]
