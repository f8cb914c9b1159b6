from os import getenv

class Settings:
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  # 15 minutes
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  # 30 days

    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskquest:taskquest@db:5432/taskquest")

    # OpenAI-compatible endpoint used for task parsing and transcription
    OPENAI_API_KEY = getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = getenv("OPENAI_MODEL", "gpt-4")
    OPENAI_TEMPERATURE = float(getenv("OPENAI_TEMPERATURE", "0.7"))
    OPENAI_MAX_TOKENS = int(getenv("OPENAI_MAX_TOKENS", "1000"))
    WHISPER_MODEL = getenv("WHISPER_MODEL", "whisper-1")
    LLM_TIMEOUT = int(getenv("LLM_TIMEOUT", "60"))

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
