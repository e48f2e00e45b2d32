import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_JWT_SECRET = "change-this-jwt-secret-in-production"


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./daily_report.db")

    JWT_SECRET: str = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    AUTH_COOKIE_NAME: str = os.getenv("AUTH_COOKIE_NAME", "auth-token")

    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    Front_URL: str = os.getenv("Front_URL", "")
    Domain_Front_URL: str = os.getenv("Domain_Front_URL", "")
    Local_Front_URL: str = os.getenv("Local_Front_URL", "http://localhost:3000")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def allowed_origins(self) -> list[str]:
        if self.is_production:
            # In production, use both Front_URL and Domain_Front_URL
            if not self.Front_URL or not self.Domain_Front_URL:
                raise ValueError("Front_URL and Domain_Front_URL must be set in production environment")
            return [self.Front_URL, self.Domain_Front_URL]
        return [self.Local_Front_URL]

    def check(self) -> None:
        if self.is_production and self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production environment")


settings = Settings()
