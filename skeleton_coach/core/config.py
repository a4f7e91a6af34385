import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
load_dotenv(os.path.join(BASE_DIR, '.env'))


class Settings(BaseSettings):
    PROJECT_NAME: str = os.getenv('PROJECT_NAME', 'SKELETON COACH')
    API_PREFIX: str = '/api'
    BACKEND_CORS_ORIGINS: List[str] = ['*']
    LOGGING_CONFIG_FILE: str = os.path.join(BASE_DIR, 'logging.ini')
    SESSION_LOG_DIR: str = os.getenv('SESSION_LOG_DIR', os.path.join(BASE_DIR, 'data', 'logs'))

    # Exercise settings
    DEFAULT_TOLERANCE: float = float(os.getenv('DEFAULT_TOLERANCE', '0.1'))
    TOLERANCE_MIN: float = 0.01
    TOLERANCE_MAX: float = 0.5
    TOLERANCE_STEP: float = 0.01
    REPETITION_TARGET: int = int(os.getenv('REPETITION_TARGET', '4'))

    # Sensor settings
    CAMERA_INDEX: Optional[int] = None  # None picks the first connected camera
    MAX_CAMERA_INDEX: int = int(os.getenv('MAX_CAMERA_INDEX', '4'))
    POSE_MODEL_PATH: str = os.getenv(
        'POSE_MODEL_PATH',
        os.path.join(BASE_DIR, 'models', 'pose_landmarker_lite.task')
    )
    SUBJECT_DISTANCE_M: float = float(os.getenv('SUBJECT_DISTANCE_M', '2.0'))
    MIRROR_CAMERA: bool = os.getenv('MIRROR_CAMERA', 'true').lower() == 'true'


settings = Settings()
