"""
业务异常定义

每个异常携带对应的HTTP状态码，由接口层统一转换为 {"message": ...} 响应
"""


class StockPulseError(Exception):
    """业务异常基类"""
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StockPulseError):
    """输入缺失、格式错误或越界"""
    status_code = 400
    default_message = "Invalid request"


class DuplicateEmail(ValidationError):
    default_message = "Email already in use"


class AlreadyPresent(ValidationError):
    default_message = "Stock already in watchlist"


class AuthError(StockPulseError):
    """认证失败：凭据错误、缺少令牌或令牌无效"""
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(AuthError):
    default_message = "Invalid email or password"


class InvalidOrExpiredToken(AuthError):
    default_message = "Invalid or expired token"


class ForbiddenError(StockPulseError):
    """操作他人资源"""
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFoundError(StockPulseError):
    status_code = 404
    default_message = "Resource not found"


class UpstreamError(StockPulseError):
    """行情数据源失败或被限速"""
    status_code = 400
    default_message = "Market data provider request failed"


class SymbolNotFound(UpstreamError):
    default_message = "Stock symbol not found or API limit reached"


class ChartUnavailable(UpstreamError):
    default_message = "Failed to fetch chart data"


class InternalError(StockPulseError):
    """存储层异常"""
    status_code = 500
