"""应用配置管理模块."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类.

    启动时构造一次, 之后只读 (frozen), 所有请求通过引用共享.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # 监听地址
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=1188, ge=1, le=65535)

    # 访问控制
    token: str = Field(default="")
    dl_session: str = Field(default="")

    # 上游网络代理, 应用于整个进程的出站翻译请求
    proxy: str = Field(default="")

    # 流式输出每个字符之间的延迟 (秒), 0 表示不延迟
    stream_delay: float = Field(default=0.05, ge=0, le=5)

    # 翻译后端
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o")
    request_timeout: int = Field(default=30, ge=1, le=300)
    max_alternatives: int = Field(default=3, ge=0, le=10)

    log_level: str = Field(default="INFO")


settings = Settings()
