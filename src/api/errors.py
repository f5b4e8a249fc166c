"""网关错误类型."""


class GatewayError(Exception):
    """所有请求级错误的基类, 携带 HTTP 状态码与可读信息."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthError(GatewayError):
    """访问令牌缺失或无效."""

    def __init__(self, message: str = "Invalid access token"):
        super().__init__(401, message)


class ValidationError(GatewayError):
    """请求字段缺失或格式错误, 在调用翻译之前拒绝."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(status_code, message)


class UpstreamFailure(GatewayError):
    """翻译后端返回了非 200 的应用层结果, 状态码原样透传."""


class TransportFailure(GatewayError):
    """无法到达翻译后端, 或调用在应用层以下失败."""

    def __init__(self, message: str):
        super().__init__(500, message)
