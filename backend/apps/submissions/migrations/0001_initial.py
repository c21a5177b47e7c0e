from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("puzzles", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="姓名")),
                ("email", models.CharField(blank=True, default="", max_length=254, verbose_name="邮箱")),
                ("answer", models.TextField(verbose_name="答案")),
                ("comments", models.TextField(blank=True, default="", verbose_name="备注")),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="提交时间")),
                ("status", models.CharField(choices=[("pending", "待审核"), ("correct", "正确"), ("incorrect", "错误")], default="pending", max_length=20, verbose_name="状态")),
                ("puzzle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="puzzles.puzzle", verbose_name="谜题")),
            ],
            options={
                "verbose_name": "答案提交",
                "verbose_name_plural": "答案提交",
                "ordering": ["-submitted_at", "-id"],
                "indexes": [
                    models.Index(fields=["puzzle", "submitted_at"], name="submission_puzzle_time_idx"),
                    models.Index(fields=["email", "status"], name="submission_email_status_idx"),
                    models.Index(fields=["status", "submitted_at"], name="submission_status_time_idx"),
                ],
            },
        ),
    ]
