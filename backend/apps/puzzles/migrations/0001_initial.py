from __future__ import annotations

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Puzzle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="标题")),
                ("slug", models.SlugField(max_length=255, unique=True, verbose_name="短标识")),
                ("description", models.TextField(verbose_name="描述")),
                ("tags", models.JSONField(blank=True, default=list, verbose_name="标签")),
                ("difficulty", models.CharField(choices=[("Easy", "简单"), ("Medium", "中等"), ("Hard", "困难"), ("Expert", "专家")], max_length=16, verbose_name="难度")),
                ("format", models.CharField(choices=[("text", "纯文本"), ("latex", "LaTeX"), ("image", "图片"), ("pdf", "PDF")], max_length=16, verbose_name="题面格式")),
                ("file_path", models.CharField(blank=True, default="", max_length=500, verbose_name="题面文件")),
                ("deadline", models.DateTimeField(verbose_name="截止时间")),
                ("solution_format", models.CharField(blank=True, choices=[("text", "纯文本"), ("latex", "LaTeX"), ("image", "图片"), ("pdf", "PDF")], default="", max_length=16, verbose_name="题解格式")),
                ("solution_text", models.TextField(blank=True, default="", verbose_name="题解内容")),
                ("solution_file_path", models.CharField(blank=True, default="", max_length=500, verbose_name="题解文件")),
                ("is_active", models.BooleanField(default=True, verbose_name="是否启用")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="创建时间")),
            ],
            options={
                "verbose_name": "谜题",
                "verbose_name_plural": "谜题",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["created_at"], name="puzzle_created_at_idx"),
                    models.Index(fields=["deadline"], name="puzzle_deadline_idx"),
                ],
            },
        ),
    ]
