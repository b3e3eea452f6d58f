import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-key'

    # Prioritize the production DATABASE_URL, with SQLite as a fallback.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'journal.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Wall clock used for the "lesson has ended" check
    SCHOOL_TIMEZONE = os.environ.get('SCHOOL_TIMEZONE', 'UTC')

    # 'five_point' or 'cumulative', applied to classes created without one
    DEFAULT_GRADING_SYSTEM = os.environ.get('DEFAULT_GRADING_SYSTEM', 'five_point')

    # Weighted mean weights for the five-point system; unknown types weigh 1
    GRADE_TYPE_WEIGHTS = {
        'exam': 3,
        'test': 2,
        'project': 2,
        'control_work': 2,
        'test_work': 2,
        'project_work': 2,
        'homework': 1,
        'classwork': 1,
    }


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False  # Always False in production
    TESTING = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # In-memory database for tests
    SCHOOL_TIMEZONE = 'UTC'
    DEFAULT_GRADING_SYSTEM = 'five_point'
