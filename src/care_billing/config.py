"""
Модуль конфигурации Care Billing.

Содержит настройки:
- Основные параметры приложения (название, версия)
- Настройки базы данных (путь)
- Настройки логирования
- Параметры биллинга (периодичность по умолчанию)
- Персистентность настроек (загрузка/сохранение)
- Управление пользовательской директорией данных
"""

import os
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class Config:
    """
    Класс конфигурации приложения.
    Реализует паттерн Singleton для доступа к настройкам из любой части приложения.

    Все пользовательские данные (БД, логи, настройки) хранятся в
    директории ~/.care_billing_data/.
    """

    _instance = None

    # Константы приложения
    APP_NAME = "Care Billing"
    VERSION = "1.0.0"

    # Допустимые значения периодичности по умолчанию
    SUPPORTED_DEFAULT_CADENCES = ("weekly", "biweekly", "monthly")

    @staticmethod
    def get_user_data_dir() -> Path:
        """
        Возвращает путь к директории пользовательских данных.

        Создаёт директорию ~/.care_billing_data/ и поддиректорию logs/.

        Returns:
            Path: Путь к ~/.care_billing_data/
        """
        data_dir = Path.home() / ".care_billing_data"
        data_dir.mkdir(exist_ok=True)
        logger.info(f"Директория пользовательских данных: {data_dir}")

        logs_dir = data_dir / "logs"
        logs_dir.mkdir(exist_ok=True)
        logger.debug(f"Директория логов: {logs_dir}")

        return data_dir

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True

        self.user_data_dir = self.get_user_data_dir()

        # Пути к файлам
        self.db_path: str = str(self.user_data_dir / "care_billing.db")
        self.config_file: str = str(self.user_data_dir / "config.json")
        self.log_file: str = str(self.user_data_dir / "logs" / "care_billing.log")

        # Настройки логирования
        self.log_level: str = "INFO"

        # Биллинг: периодичность для рассрочки, если она не указана явно
        self.default_cadence: str = "monthly"

        self.load()

    def load(self) -> None:
        """
        Загружает настройки из файла конфигурации.

        Если файл не существует или повреждён, используются значения по умолчанию.
        Путь к БД не загружается из конфигурации.
        """
        if not os.path.exists(self.config_file):
            logger.info(f"Файл конфигурации не найден, используются значения по умолчанию: {self.config_file}")
            return

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            self.log_level = data.get("log_level", "INFO")

            default_cadence = data.get("default_cadence", "monthly")
            if default_cadence not in self.SUPPORTED_DEFAULT_CADENCES:
                logger.warning(
                    f"Неподдерживаемая периодичность по умолчанию '{default_cadence}', "
                    f"используется 'monthly'"
                )
                default_cadence = "monthly"
            self.default_cadence = default_cadence

            logger.info(f"Конфигурация загружена из {self.config_file}")

        except (OSError, ValueError) as e:
            logger.error(f"Ошибка при загрузке конфигурации: {e}")

    def save(self) -> None:
        """
        Сохраняет текущие настройки в файл конфигурации.
        """
        data = {
            "log_level": self.log_level,
            "default_cadence": self.default_cadence,
        }

        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
            logger.info(f"Конфигурация сохранена в {self.config_file}")
        except OSError as e:
            logger.error(f"Ошибка при сохранении конфигурации: {e}")


# Глобальный экземпляр конфигурации
settings = Config()
