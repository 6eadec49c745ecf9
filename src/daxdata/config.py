"""앱 설정 관리 모듈 (pydantic-settings + TOML 기반)"""

from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    """TOML 파일 + 환경변수 기반 설정"""

    model_config = SettingsConfigDict(
        toml_file="settings.toml",
        extra="ignore",
    )

    # --- DB ---
    DATABASE_URL: str = ""            # 전체 SQLAlchemy URL (비어있으면 SQLite 파일)
    DB_PATH: str = "data/dax.db"
    DB_POOL_SIZE: int = 5             # 유휴 커넥션 수
    DB_MAX_OVERFLOW: int = 20         # 풀 초과 허용 수 (최대 25개 동시 연결)
    DB_ECHO: bool = False

    # --- DAX 저장소 ---
    DAX_STORE: str = "database"       # "database" | "memory"

    # --- 로깅 ---
    LOG_LEVEL: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """우선순위: 코드 직접 전달 > 환경변수 > TOML 파일"""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @property
    def database_url(self) -> str:
        """DB URL 반환 (DATABASE_URL 우선, 없으면 SQLite 파일)"""
        url = self.DATABASE_URL.strip()
        if url:
            # psycopg(v3) 드라이버 명시
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+psycopg://", 1)
            return url

        db_path = Path(self.DB_PATH)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"


# 싱글턴 인스턴스
settings = Settings()
