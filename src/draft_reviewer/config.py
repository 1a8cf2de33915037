"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path
import logging


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    reviewer: Optional[str] = None  # 비어 있으면 토큰 소유자 login 사용


@dataclass
class ReviewConfig:
    """pending 리뷰 재구성 설정"""
    line_tolerance: int = 5
    similarity_threshold: float = 60.0
    exclusive_matching: bool = True
    max_body_length: int = 65536  # GitHub 본문 길이 제한
    notes_heading: str = "**Additional Notes:**"


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            github=GitHubConfig(
                token=os.getenv("GITHUB_TOKEN"),
                api_base_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                reviewer=os.getenv("GITHUB_REVIEWER"),
            ),
            review=ReviewConfig(
                line_tolerance=int(os.getenv("LINE_TOLERANCE", "5")),
                similarity_threshold=float(os.getenv("SIMILARITY_THRESHOLD", "60")),
                exclusive_matching=_env_flag("EXCLUSIVE_MATCHING", "true"),
                max_body_length=int(os.getenv("MAX_BODY_LENGTH", "65536")),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=_env_flag("DEBUG", "false"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(
            github=GitHubConfig(**config_data.get('github', {})),
            review=ReviewConfig(**config_data.get('review', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # GitHub 토큰 필수 확인
        if not self.github.token:
            errors.append("GitHub token is required")

        # 라인 허용 오차 검증
        if self.review.line_tolerance < 0:
            errors.append("Line tolerance must be non-negative")

        # 유사도 임계값 검증 (0-100 스케일)
        if not 0.0 <= self.review.similarity_threshold <= 100.0:
            errors.append("Similarity threshold must be between 0 and 100")

        # 본문 길이 검증
        if self.review.max_body_length < 1000:
            errors.append("Max body length must be at least 1000")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'github': {
                'api_base_url': self.github.api_base_url,
                'reviewer': self.github.reviewer,
                # 보안상 토큰은 제외
            },
            'review': {
                'line_tolerance': self.review.line_tolerance,
                'similarity_threshold': self.review.similarity_threshold,
                'exclusive_matching': self.review.exclusive_matching,
                'max_body_length': self.review.max_body_length,
                'notes_heading': self.review.notes_heading,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """설정 업데이트"""
        config_dict = self._config.to_dict()
        token = self._config.github.token

        for key, value in kwargs.items():
            if '.' in key:
                # 중첩된 설정 (예: 'review.line_tolerance')
                section, field_name = key.split('.', 1)
                if section in config_dict:
                    config_dict[section][field_name] = value
            else:
                # 최상위 설정
                config_dict[key] = value

        config_dict['github'].setdefault('token', token)

        # 새로운 설정 객체 생성
        new_config = AppConfig(
            github=GitHubConfig(**config_dict['github']),
            review=ReviewConfig(**config_dict['review']),
            logging=LoggingConfig(**config_dict['logging']),
            debug=config_dict['debug'],
        )

        new_config.validate()
        self._config = new_config
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        level = logging.DEBUG if self._config.debug else getattr(logging, self._config.logging.level.upper())
        logging.basicConfig(
            level=level,
            format=self._config.logging.format,
        )

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            root_logger = logging.getLogger()
            for handler in root_logger.handlers:
                if getattr(handler, 'baseFilename', None) == str(Path(self._config.logging.file_path).resolve()):
                    return

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            # 루트 로거에 핸들러 추가
            root_logger.addHandler(handler)


# 전역 설정 관리자 인스턴스 (첫 사용 시 생성)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """전역 설정 관리자 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """현재 설정 반환"""
    return get_config_manager().config
