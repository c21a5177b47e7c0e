from __future__ import annotations

from django.db import models
from django.utils import timezone

# 模型定义：限时谜题，提交记录通过外键挂在谜题上


class Puzzle(models.Model):
    """
    限时谜题：
    - 题面可以是纯文本/LaTeX，也可以是图片/PDF 附件
    - 截止时间之前接受提交，截止后公开题解
    - status（active/closed）由截止时间实时推导，不落库
    """

    class Difficulty(models.TextChoices):
        """难度枚举"""
        EASY = "Easy", "简单"
        MEDIUM = "Medium", "中等"
        HARD = "Hard", "困难"
        EXPERT = "Expert", "专家"

    class Format(models.TextChoices):
        """题面/题解格式"""
        TEXT = "text", "纯文本"
        LATEX = "latex", "LaTeX"
        IMAGE = "image", "图片"
        PDF = "pdf", "PDF"

    # 需要附件的格式
    FILE_FORMATS = {Format.IMAGE, Format.PDF}

    STATUS_ACTIVE = "active"
    STATUS_CLOSED = "closed"

    title = models.CharField("标题", max_length=200)
    # 全局唯一的 URL 标识，由标题生成
    slug = models.SlugField("短标识", max_length=255, unique=True)
    description = models.TextField("描述")
    # 有序标签列表
    tags = models.JSONField("标签", default=list, blank=True)
    difficulty = models.CharField("难度", max_length=16, choices=Difficulty.choices)
    format = models.CharField("题面格式", max_length=16, choices=Format.choices)
    # 题面附件（相对 MEDIA_ROOT 的路径），format 为 image/pdf 时必填
    file_path = models.CharField("题面文件", max_length=500, blank=True, default="")
    deadline = models.DateTimeField("截止时间")
    solution_format = models.CharField("题解格式", max_length=16, choices=Format.choices, blank=True, default="")
    solution_text = models.TextField("题解内容", blank=True, default="")
    solution_file_path = models.CharField("题解文件", max_length=500, blank=True, default="")
    is_active = models.BooleanField("是否启用", default=True)
    created_at = models.DateTimeField("创建时间", default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["created_at"], name="puzzle_created_at_idx"),
            models.Index(fields=["deadline"], name="puzzle_deadline_idx"),
        ]
        verbose_name = "谜题"
        verbose_name_plural = "谜题"

    def __str__(self) -> str:
        return self.title

    def is_open(self, now=None) -> bool:
        """截止时间严格晚于当前时间才接受提交"""
        return self.deadline > (now or timezone.now())

    @property
    def status(self) -> str:
        return self.STATUS_ACTIVE if self.is_open() else self.STATUS_CLOSED

    @property
    def stored_files(self) -> list[str]:
        """当前引用的所有附件路径"""
        return [path for path in (self.file_path, self.solution_file_path) if path]
