from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Reachability Triage"
    API_V1_STR: str = "/api/v1"
    TOOL_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"

    # Platform the analysed application is deployed to. Uses sys.platform
    # style identifiers: linux, win32, darwin, android, ios
    TARGET_PLATFORM: str = "linux"

    # Report writer (OpenAI compatible chat completions API)
    REPORT_API_URL: str = "https://api.groq.com/openai/v1"
    REPORT_API_KEY: str = ""
    REPORT_MODEL: str = "llama-3.3-70b-versatile"
    REPORT_MAX_RETRIES: int = 3
    REPORT_RETRY_BASE_DELAY: float = 2.0
    REPORT_REQUEST_TIMEOUT: float = 60.0
    REPORT_TOTAL_TIMEOUT: float = 180.0
    REPORT_TEMPERATURE: float = 0.3
    REPORT_MAX_TOKENS: int = 4000
    REPORT_MAX_PROMPT_ITEMS: int = 20

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")


settings = Settings()
