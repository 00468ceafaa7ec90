# Configuration settings
import os
from datetime import timedelta

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _database_url(default):
    url = os.environ.get('DATABASE_URL', default)
    # SQLAlchemy needs the driver spelled out for MySQL
    if url.startswith('mysql://'):
        url = url.replace('mysql://', 'mysql+pymysql://', 1)
    return url


class Config:
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///' + os.path.join(BASE_DIR, 'minisocial.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'please-set-JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    FEED_LIMIT = int(os.environ.get('FEED_LIMIT', 100))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    DEBUG = True


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
