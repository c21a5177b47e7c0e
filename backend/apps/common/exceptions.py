"""
业务异常（BizError）

预期内的失败都抛 BizError 子类，全局异常处理器按 code / message / http_status / extra
生成响应；代码缺陷与数据库故障不走这里，统一返回 500。

错误码分段：
    400xx  请求体 / 参数
    401xx  管理员认证
    404xx  谜题、提交不存在
    429xx  频率限制
    460xx  谜题状态（已截止）
    503xx  文件存储等外部依赖
"""


class BizError(Exception):
    """子类覆盖 default_code / default_message / http_status；实例化时也可逐个覆盖"""

    default_code: int = 40000
    default_message: str = "业务错误"
    http_status: int = 400

    def __init__(self, message: str | None = None, code: int | None = None, *, extra: dict | None = None):
        self.code = self.default_code if code is None else code
        self.message = self.default_message if message is None else message
        self.extra = extra or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class BadRequestError(BizError):
    """请求体无法解析（非法 JSON、残缺的 multipart）"""
    default_code = 40001
    default_message = "错误的请求"


class ValidationError(BizError):
    default_code = 40002
    default_message = "请求参数不合法"


class AuthError(BizError):
    default_code = 40100
    default_message = "认证失败"
    http_status = 401


class InvalidCredentialsError(AuthError):
    default_code = 40101
    default_message = "邮箱或密码错误"


class TokenError(AuthError):
    """签名错误、过期，或对应的管理员会话已注销"""
    default_code = 40102
    default_message = "登录状态已失效，请重新登录"


class NotFoundError(BizError):
    default_code = 40400
    default_message = "资源不存在"
    http_status = 404


class PuzzleNotFoundError(NotFoundError):
    default_code = 40401
    default_message = "谜题不存在"


class SubmissionNotFoundError(NotFoundError):
    default_code = 40402
    default_message = "提交记录不存在"


class RateLimitError(BizError):
    default_code = 42900
    default_message = "请求过于频繁，请稍后再试"
    http_status = 429


class DeadlinePassedError(BizError):
    default_code = 46002
    default_message = "谜题已截止，不再接受提交"


class StorageUnavailableError(BizError):
    """本地磁盘或对象存储写入 / 删除失败"""
    default_code = 50303
    default_message = "文件存储服务暂时不可用，请稍后重试"
    http_status = 503


def require(condition: bool, error: BizError) -> None:
    """require(puzzle.is_open(now), DeadlinePassedError())"""
    if not condition:
        raise error
